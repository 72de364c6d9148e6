import logging
from typing import List

from medi360.application.ports import LLMPort
from medi360.infrastructure.config import Settings


logger = logging.getLogger(__name__)


class MistralLLMAdapter(LLMPort):
    def __init__(self, model: str | None = None, settings: Settings | None = None):
        self.settings = settings or Settings()
        self._client = None
        self._model = model or self.settings.mistral_model
        self.name = self._model
        self._init_client()

    def _init_client(self):
        api_key = self.settings.mistral_api_key
        if not api_key:
            logger.error("Mistral API key is missing.")
            self._client = None
            return
        try:
            from mistralai import Mistral
            self._client = Mistral(api_key=api_key)
        except Exception as e:
            logger.exception("Failed to initialize Mistral client: %s", e)
            self._client = None

    def generate_reply(self, messages: List[dict]) -> str:
        if not self._client:
            raise RuntimeError("Mistral client not initialized (missing API key or import error)")
        try:
            response = self._client.chat.complete(
                model=self._model,
                messages=messages,
            )
            return response.choices[0].message.content
        except Exception as e:
            logger.exception("Mistral chat call with %s failed: %s", self._model, e)
            raise
