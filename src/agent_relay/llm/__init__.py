"""Language-model collaborators: clarify, plan, prompt, review and finalize."""

from .agents import (
	REVIEW_FALLBACK_FEEDBACK,
	Clarifier,
	Finalizer,
	Planner,
	Prompter,
	Reviewer,
)
from .client import ChatClient, parse_json

__all__ = [
	"REVIEW_FALLBACK_FEEDBACK",
	"ChatClient",
	"Clarifier",
	"Finalizer",
	"Planner",
	"Prompter",
	"Reviewer",
	"parse_json",
]
