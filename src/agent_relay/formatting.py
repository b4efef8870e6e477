"""Pure text transforms applied to agent and model output."""

import re

_MARKDOWN_LINK = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
_THINK_BLOCK = re.compile(r"<think>[\s\S]*?</think>")


def clean_links(text: str) -> str:
	"""
	Remove Markdown link targets, keeping the label.

	"This is some text [1](http://example.com)" becomes "This is some text [1]".
	Cleaning already-clean text returns it unchanged.
	"""
	return _MARKDOWN_LINK.sub(r"[\1]", text)


def strip_think(text: str) -> str:
	"""Drop <think>...</think> reasoning blocks emitted by some models."""
	return _THINK_BLOCK.sub("", text).strip()
