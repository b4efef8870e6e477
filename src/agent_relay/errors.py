"""Exception hierarchy for agent-relay.

Automation failures (availability, stabilization, extraction, session) are
never recovered locally: they abort the run and trigger teardown.
ModelResponseError is recovered only by the reviewer.
"""


class RelayError(Exception):
	"""Base exception for agent-relay errors."""
	pass


class ConfigurationError(RelayError):
	"""Raised when a target surface is unknown or missing coordinates."""
	pass


class AvailabilityError(RelayError):
	"""Raised when a required control never reached the expected state."""
	pass


class StabilizationTimeout(RelayError):
	"""Raised when the output region text never settled."""

	def __init__(self, selector: str, timeout_ms: int):
		self.selector = selector
		self.timeout_ms = timeout_ms
		super().__init__(
			f'Response text in "{selector}" did not stabilize within {timeout_ms}ms.'
		)


class EmptyExtractionError(RelayError):
	"""Raised when a stable output region yields no content."""
	pass


class ModelResponseError(RelayError):
	"""Raised when a language-model collaborator returns an unusable response."""
	pass


class SessionError(RelayError):
	"""Raised when a browser session cannot be set up or torn down."""
	pass
