import aiohttp

from chatranslator.core.models import Translator
from chatranslator.settings import (
    APPWORLDS_API_URL,
    OPENAI_API_KEY_OPENROUTER,
    OPENROUTER_BASE_URL,
    PROVIDER_MIN_INTERVAL_SECONDS,
    PROVIDER_TIMEOUT_SECONDS,
    TRANSLATION_AI_MODEL,
    TRANSLATION_PROVIDER,
)
from chatranslator.translation.appworlds import AppWorldsTranslator
from chatranslator.translation.openrouter import OpenRouterTranslator


def get_translator(http_session: aiohttp.ClientSession, provider: str | None = None) -> Translator:
    provider = (provider or TRANSLATION_PROVIDER).lower().strip()

    if provider == "appworlds":
        return AppWorldsTranslator(
            http_session,
            APPWORLDS_API_URL,
            min_interval=PROVIDER_MIN_INTERVAL_SECONDS,
            timeout=PROVIDER_TIMEOUT_SECONDS,
        )
    if provider == "openrouter":
        return OpenRouterTranslator(
            OPENAI_API_KEY_OPENROUTER,
            OPENROUTER_BASE_URL,
            TRANSLATION_AI_MODEL,
            timeout=PROVIDER_TIMEOUT_SECONDS,
        )

    raise ValueError(f"Unknown translator provider: {provider}")
