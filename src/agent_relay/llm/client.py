"""
Chat completion client for the planning/review collaborators.

Talks to any OpenAI-compatible /chat/completions endpoint (Groq by default)
over aiohttp. Every failure, from transport errors to malformed bodies,
surfaces as ModelResponseError.
"""

import json
import logging
import re
from typing import Any, Optional

import aiohttp

from ..config import DEFAULT_LLM_BASE_URL
from ..errors import ModelResponseError
from ..formatting import strip_think

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def extract_content(payload: Any) -> str:
	"""Pull the assistant message text out of a completion response body."""
	try:
		content = payload["choices"][0]["message"]["content"]
	except (KeyError, IndexError, TypeError) as e:
		raise ModelResponseError(f"Unexpected completion payload: {e}") from e
	if not isinstance(content, str):
		raise ModelResponseError("Completion content is not text")
	return content


def parse_json(text: str) -> Any:
	"""
	Parse a model reply that should be JSON.

	Tolerates a leading <think> block and a Markdown code fence around the
	JSON, which chat models often add despite instructions.
	"""
	cleaned = strip_think(text)
	match = _CODE_FENCE.match(cleaned)
	if match:
		cleaned = match.group(1)
	try:
		return json.loads(cleaned)
	except json.JSONDecodeError as e:
		raise ModelResponseError(f"Invalid JSON from model: {e}") from e


class ChatClient:
	"""Minimal async client for chat completions."""

	def __init__(
		self,
		api_key: str,
		base_url: str = DEFAULT_LLM_BASE_URL,
		timeout: int = 120,
	):
		self.api_key = api_key
		self.base_url = base_url.rstrip("/")
		self.timeout = timeout

	async def complete(
		self,
		messages: list[dict[str, str]],
		model: str,
		temperature: float = 0.0,
	) -> str:
		"""
		Send a chat completion request.

		Args:
			messages: OpenAI-style [{"role": ..., "content": ...}] list
			model: Model name
			temperature: Sampling temperature

		Returns:
			The assistant message text
		"""
		if not self.api_key:
			raise ModelResponseError("No API key configured")

		url = f"{self.base_url}/chat/completions"
		body = {"model": model, "messages": messages, "temperature": temperature}
		headers = {"Authorization": f"Bearer {self.api_key}"}

		logger.debug(f"Requesting completion from {model} ({len(messages)} messages)")
		try:
			async with aiohttp.ClientSession(
				timeout=aiohttp.ClientTimeout(total=self.timeout),
			) as session:
				async with session.post(url, json=body, headers=headers) as response:
					if response.status >= 400:
						detail = await response.text()
						raise ModelResponseError(
							f"{model} request failed with HTTP {response.status}: {detail[:200]}"
						)
					payload = await response.json(content_type=None)
		except ModelResponseError:
			raise
		except (aiohttp.ClientError, TimeoutError, json.JSONDecodeError) as e:
			raise ModelResponseError(f"{model} request failed: {e}") from e

		return extract_content(payload)


def system_message(content: str) -> dict[str, str]:
	return {"role": "system", "content": content}


def user_message(content: str) -> dict[str, str]:
	return {"role": "user", "content": content}


def build_messages(system: str, user: Optional[str] = None) -> list[dict[str, str]]:
	messages = [system_message(system)]
	if user is not None:
		messages.append(user_message(user))
	return messages
