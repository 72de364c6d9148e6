import os
import logging
from pathlib import Path

try:
    import streamlit as st  # type: ignore
    _HAS_STREAMLIT = True
except Exception:
    _HAS_STREAMLIT = False

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent


def get_secret(name: str, default: str | None = None) -> str | None:
    # Streamlit secrets win over environment variables
    if _HAS_STREAMLIT:
        try:
            if name in st.secrets:
                return str(st.secrets.get(name))
        except Exception:
            # No secrets.toml present
            pass
    return os.environ.get(name, default)


class Settings:
    @property
    def llm_provider(self) -> str:
        provider = (get_secret("LLM_PROVIDER", "gemini") or "gemini").strip().lower()
        if provider not in {"gemini", "mistral", "local"}:
            logger.warning("Unknown LLM_PROVIDER %r; falling back to local classifier only", provider)
            return "local"
        return provider

    @property
    def gemini_api_key(self) -> str | None:
        return get_secret("GEMINI_API_KEY")

    @property
    def gemini_primary_model(self) -> str:
        return get_secret("GEMINI_PRIMARY_MODEL", "gemini-2.5-flash") or "gemini-2.5-flash"

    @property
    def gemini_fallback_model(self) -> str:
        return get_secret("GEMINI_FALLBACK_MODEL", "gemini-1.5-flash") or "gemini-1.5-flash"

    @property
    def mistral_api_key(self) -> str | None:
        return get_secret("MISTRAL_API_KEY")

    @property
    def mistral_model(self) -> str:
        return get_secret("MISTRAL_MODEL", "mistral-large-latest") or "mistral-large-latest"

    @property
    def mistral_fallback_model(self) -> str:
        return get_secret("MISTRAL_FALLBACK_MODEL", "mistral-small-latest") or "mistral-small-latest"

    @property
    def llm_timeout(self) -> float:
        raw = get_secret("LLM_TIMEOUT", "30")
        try:
            return float(raw)
        except (TypeError, ValueError):
            logger.warning("Invalid LLM_TIMEOUT %r; using 30 seconds", raw)
            return 30.0

    @property
    def data_dir(self) -> str:
        return get_secret("MEDI360_DATA_DIR") or str(PROJECT_ROOT / ".streamlit" / "data")
