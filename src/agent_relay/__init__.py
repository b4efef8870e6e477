"""agent-relay: carry one work artifact through a team of browser-driven chatbot agents."""

from .errors import (
	AvailabilityError,
	ConfigurationError,
	EmptyExtractionError,
	ModelResponseError,
	RelayError,
	SessionError,
	StabilizationTimeout,
)
from .models import AgentSpec, ReviewResult, RunStatus, SharedContext
from .orchestrator import PlanOrchestrator, build_orchestrator

__version__ = "0.1.0"

__all__ = [
	"AgentSpec",
	"AvailabilityError",
	"ConfigurationError",
	"EmptyExtractionError",
	"ModelResponseError",
	"PlanOrchestrator",
	"RelayError",
	"ReviewResult",
	"RunStatus",
	"SessionError",
	"SharedContext",
	"StabilizationTimeout",
	"build_orchestrator",
]
