import logging
from typing import List

from medi360.application.ports import LLMPort
from medi360.infrastructure.config import Settings
from medi360.infrastructure.llm.gemini_client import GeminiLLMAdapter
from medi360.infrastructure.llm.mistral_client import MistralLLMAdapter


logger = logging.getLogger(__name__)


def build_llm_chain(settings: Settings | None = None) -> List[LLMPort]:
    """Hosted models in the order they are tried: primary model, then secondary.

    An empty chain means every reply comes from the local classifier.
    """
    settings = settings or Settings()
    provider = settings.llm_provider

    if provider == "gemini":
        if not settings.gemini_api_key:
            logger.warning("GEMINI_API_KEY not set; replies will use the local classifier")
            return []
        return [
            GeminiLLMAdapter(settings.gemini_primary_model, settings=settings),
            GeminiLLMAdapter(settings.gemini_fallback_model, settings=settings),
        ]

    if provider == "mistral":
        if not settings.mistral_api_key:
            logger.warning("MISTRAL_API_KEY not set; replies will use the local classifier")
            return []
        return [
            MistralLLMAdapter(settings.mistral_model, settings=settings),
            MistralLLMAdapter(settings.mistral_fallback_model, settings=settings),
        ]

    return []
