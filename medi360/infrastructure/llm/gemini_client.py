import logging
from typing import List

import requests

from medi360.application.ports import LLMPort
from medi360.infrastructure.config import Settings


logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"


def build_prompt(messages: List[dict]) -> str:
    """Flatten chat messages into the single text part the REST endpoint takes."""
    system = [m["content"] for m in messages if m["role"] == "system"]
    turns = [m for m in messages if m["role"] != "system"]

    parts = []
    if system:
        parts.append("SYSTEM INSTRUCTIONS:\n" + "\n\n".join(system))
    for m in turns[:-1]:
        label = "USER MESSAGE" if m["role"] == "user" else "AI RESPONSE"
        parts.append(f"{label}:\n{m['content']}")
    if turns:
        parts.append(f"USER MESSAGE:\n{turns[-1]['content']}")
    parts.append("AI RESPONSE:")
    return "\n\n".join(parts)


class GeminiLLMAdapter(LLMPort):
    def __init__(self, model: str, settings: Settings | None = None):
        self.settings = settings or Settings()
        self.model = model
        self.name = model
        self.api_key = self.settings.gemini_api_key
        self.timeout = self.settings.llm_timeout

    def generate_reply(self, messages: List[dict]) -> str:
        if not self.api_key:
            raise RuntimeError("GEMINI_API_KEY is missing")

        body = {"contents": [{"parts": [{"text": build_prompt(messages)}]}]}
        try:
            resp = requests.post(
                GEMINI_URL.format(model=self.model),
                params={"key": self.api_key},
                json=body,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as e:
            logger.exception("Gemini %s request failed: %s", self.model, e)
            raise

        try:
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise RuntimeError(f"Unexpected Gemini response shape from {self.model}") from e
