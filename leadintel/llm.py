"""
Generative Backend
A thin client over Claude plus the defensive JSON extraction shared by the
analysis and drafting stages. The client is built once per process and
closed by whoever built it.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Optional

import anthropic

from leadintel.errors import GenerativeBackendError

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json|JSON)?")


class GenerativeBackend(ABC):
    """Turns a prompt into best-effort text."""

    @abstractmethod
    def generate(self, prompt: str, system: Optional[str] = None, max_tokens: int = 2000) -> str:
        ...

    def close(self) -> None:
        pass


class ClaudeBackend(GenerativeBackend):
    """Claude client making exactly one attempt per call (SDK retries off)."""

    def __init__(self, api_key: str, model: str, timeout: float = 60.0):
        if not api_key:
            raise ValueError("Anthropic API key is required")
        self.model = model
        self.client = anthropic.Anthropic(api_key=api_key, timeout=timeout, max_retries=0)

    def generate(self, prompt: str, system: Optional[str] = None, max_tokens: int = 2000) -> str:
        kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system

        logger.info(f"Sending request to Claude ({self.model})...")
        try:
            message = self.client.messages.create(**kwargs)
        except anthropic.APIError as e:
            raise GenerativeBackendError(f"Claude request failed: {e}") from e

        parts = [block.text for block in message.content if getattr(block, "text", None)]
        if not parts:
            raise GenerativeBackendError("Claude returned an empty response")
        return "".join(parts).strip()

    def close(self) -> None:
        self.client.close()


def _first_balanced_object(text: str) -> Optional[str]:
    """Return the first brace-delimited span whose braces balance, ignoring braces in strings."""
    start = text.find("{")
    if start < 0:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    return None


def extract_json_object(response_text: str) -> dict:
    """
    Pull a JSON object out of an LLM response.

    Code fences are stripped, then the first balanced {...} span is decoded.

    Raises:
        ValueError: If no object can be found or decoded.
    """
    cleaned = _FENCE_RE.sub("", response_text or "").strip()
    span = _first_balanced_object(cleaned)
    if span is None:
        raise ValueError(f"LLM did not return valid JSON: {cleaned[:200]}")

    try:
        data = json.loads(span)
    except json.JSONDecodeError as e:
        raise ValueError(f"LLM did not return valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ValueError("LLM response is not a JSON object")
    return data
