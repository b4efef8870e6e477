"""Target-surface adapter table.

Each hosted chat UI is one row of coordinates: where to navigate, which
selectors mark the input, run control, working indicator and output region,
and how to pull the answer out of the output region. Adding a surface means
adding a row, either here or under [surfaces.<id>] in config.toml.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class ExtractionStrategy(str, Enum):
	"""How the answer is read from the output region."""
	# All turns share one listing; drop the first (echoed prompt) and join the rest
	ALL_AFTER_FIRST = "all_after_first"
	# The answer is the single trailing element
	LAST_ONLY = "last_only"


@dataclass(frozen=True)
class SurfaceConfig:
	"""Coordinates of one target surface."""
	name: str
	url: str
	input_selector: str
	run_selector: str
	working_selector: str
	response_selector: str
	extraction: ExtractionStrategy = ExtractionStrategy.LAST_ONLY

	def to_dict(self) -> dict:
		return {
			"name": self.name,
			"url": self.url,
			"input_selector": self.input_selector,
			"run_selector": self.run_selector,
			"working_selector": self.working_selector,
			"response_selector": self.response_selector,
			"extraction": self.extraction.value,
		}


_REQUIRED_KEYS = (
	"url",
	"input_selector",
	"run_selector",
	"working_selector",
	"response_selector",
)


BUILTIN_SURFACES: dict[str, SurfaceConfig] = {
	"googleAIStudio": SurfaceConfig(
		name="googleAIStudio",
		url="https://aistudio.google.com/prompts/new_chat",
		input_selector="ms-prompt-input-wrapper textarea",
		run_selector='button[aria-label="Run"]:not([disabled])',
		working_selector="button.run-button.stoppable",
		response_selector="ms-cmark-node.cmark-node",
	),
	"claude": SurfaceConfig(
		name="claude",
		url="https://claude.ai/chats",
		input_selector='div[contenteditable="true"]',
		run_selector='button[aria-label="Send message"]:not([disabled])',
		working_selector='button[aria-label="Stop response"]',
		response_selector="div.grid.grid-cols-1",
		extraction=ExtractionStrategy.ALL_AFTER_FIRST,
	),
	"chatGPT": SurfaceConfig(
		name="chatGPT",
		url="https://chatgpt.com/?model=auto&temporary-chat=true",
		input_selector="div.ProseMirror",
		run_selector='button[data-testid="send-button"]',
		working_selector='button[data-testid="stop-button"]',
		response_selector="div.prose",
	),
	"perplexity": SurfaceConfig(
		name="perplexity",
		url="https://www.perplexity.ai/",
		input_selector="#ask-input",
		run_selector='button[data-testid="submit-button"]',
		working_selector='button[data-testid="stop-generating-response-button"]',
		response_selector="div.prose",
	),
}


def surface_from_mapping(name: str, data: Mapping[str, Any]) -> SurfaceConfig:
	"""Build a SurfaceConfig from a config.toml table."""
	missing = [key for key in _REQUIRED_KEYS if not data.get(key)]
	if missing:
		raise ConfigurationError(
			f'Surface "{name}" is missing coordinates: {", ".join(missing)}'
		)
	try:
		extraction = ExtractionStrategy(data.get("extraction", ExtractionStrategy.LAST_ONLY.value))
	except ValueError as e:
		raise ConfigurationError(f'Surface "{name}" has an unknown extraction strategy') from e

	return SurfaceConfig(
		name=name,
		url=data["url"],
		input_selector=data["input_selector"],
		run_selector=data["run_selector"],
		working_selector=data["working_selector"],
		response_selector=data["response_selector"],
		extraction=extraction,
	)


class SurfaceRegistry:
	"""Lookup table from surface identifier to coordinates."""

	def __init__(self, extra: Optional[Mapping[str, Mapping[str, Any]]] = None):
		self._surfaces: dict[str, SurfaceConfig] = dict(BUILTIN_SURFACES)
		for name, data in (extra or {}).items():
			self._surfaces[name] = surface_from_mapping(name, data)
			logger.debug(f"Registered surface from config: {name}")

	def get(self, name: str) -> SurfaceConfig:
		"""Get the coordinates for a surface, failing on unknown identifiers."""
		surface = self._surfaces.get(name)
		if surface is None:
			raise ConfigurationError(f'Config for chatbot "{name}" not found.')
		return surface

	def names(self) -> list[str]:
		return sorted(self._surfaces)

	def all(self) -> list[SurfaceConfig]:
		return [self._surfaces[name] for name in self.names()]

	def __contains__(self, name: str) -> bool:
		return name in self._surfaces
