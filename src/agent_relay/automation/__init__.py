"""Browser automation: sessions, bounded waits and the task protocol."""

from .polling import PollOutcome, wait_for_control, wait_for_stable_text
from .runner import TaskRunner, compose_message
from .sessions import Session, SessionPool, persistent_launcher

__all__ = [
	"PollOutcome",
	"Session",
	"SessionPool",
	"TaskRunner",
	"compose_message",
	"persistent_launcher",
	"wait_for_control",
	"wait_for_stable_text",
]
