"""
Chat-completions client for the categorization / insight features.

Talks to an OpenAI-compatible endpoint (Groq by default). Prompts may first be
compressed through Scaledown when SCALEDOWN_API_KEY is set; compression
failures are logged and the original prompt is sent.
"""
import json
import logging
import re
from typing import Any

import requests

from app.config import Settings, get_settings

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class LLMUnavailableError(RuntimeError):
    """The provider is not configured, unreachable, or answered with an unexpected shape."""


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None


def parse_ai_response(text: str | None) -> dict | None:
    """
    Extract a JSON object from a model answer.

    Tries, in order: the whole text, a ```json fenced block, the outermost
    {...} span. Returns None when nothing parses to an object.
    """
    if not text:
        return None

    candidates = [text]
    fenced = _FENCED_JSON.search(text)
    if fenced:
        candidates.append(fenced.group(1).strip())
    obj = _JSON_OBJECT.search(text)
    if obj:
        candidates.append(obj.group(0))

    for candidate in candidates:
        parsed = _loads(candidate)
        if isinstance(parsed, dict):
            return parsed
    return None


class LLMClient:
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    @property
    def enabled(self) -> bool:
        return self.settings.ai_enabled

    def compress(self, context: str, prompt: str) -> tuple[str, str]:
        if not self.settings.SCALEDOWN_API_KEY:
            return context, prompt
        try:
            resp = requests.post(
                f"{self.settings.SCALEDOWN_BASE_URL}/compress/raw/",
                json={"context": context, "prompt": prompt, "scaledown": {"rate": "auto"}},
                headers={"x-api-key": self.settings.SCALEDOWN_API_KEY},
                timeout=self.settings.AI_TIMEOUT_SECONDS,
            )
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("Scaledown compression skipped: %s", e)
            return context, prompt
        return (
            data.get("compressed_context") or context,
            data.get("compressed_prompt") or prompt,
        )

    def chat(self, system_prompt: str, user_prompt: str, max_tokens: int, temperature: float) -> str | None:
        """
        Send one system + user exchange, return the assistant text (may be None).

        Raises:
            LLMUnavailableError: no API key, transport error, or malformed envelope
        """
        if not self.enabled:
            raise LLMUnavailableError("GROQ_API_KEY is not configured")

        context, prompt = self.compress(system_prompt, user_prompt)
        try:
            resp = requests.post(
                f"{self.settings.GROQ_BASE_URL}/chat/completions",
                json={
                    "model": self.settings.GROQ_MODEL,
                    "messages": [
                        {"role": "system", "content": context},
                        {"role": "user", "content": prompt},
                    ],
                    "max_tokens": max_tokens,
                    "temperature": temperature,
                },
                headers={"Authorization": f"Bearer {self.settings.GROQ_API_KEY}"},
                timeout=self.settings.AI_TIMEOUT_SECONDS,
            )
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise LLMUnavailableError(str(e)) from e

        try:
            return data["choices"][0]["message"].get("content")
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise LLMUnavailableError(f"unexpected response shape: {e}") from e

    def chat_json(self, system_prompt: str, user_prompt: str, max_tokens: int, temperature: float) -> dict | None:
        """chat() followed by parse_ai_response()."""
        return parse_ai_response(self.chat(system_prompt, user_prompt, max_tokens, temperature))
