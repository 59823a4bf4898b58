from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest
from chatranslator.core.errors import ProviderThrottled, TransportFailure
from chatranslator.translation.appworlds import AppWorldsTranslator
from chatranslator.translation.factory import get_translator
from chatranslator.translation.openrouter import OpenRouterTranslator, TranslationResponse

REQUEST = httpx.Request("POST", "https://openrouter.test/api/v1/chat/completions")


@pytest.fixture
def translator():
    t = OpenRouterTranslator("test-key", "https://openrouter.test/api/v1", "test/model")
    t.client = MagicMock()
    t.client.chat.completions.parse = AsyncMock()
    return t


def completion(parsed):
    message = MagicMock()
    message.parsed = parsed
    choice = MagicMock()
    choice.message = message
    result = MagicMock()
    result.choices = [choice]
    return result


@pytest.mark.asyncio
async def test_translate_returns_parsed_translation(translator):
    translator.client.chat.completions.parse.return_value = completion(TranslationResponse(translation="你好"))

    assert await translator.translate("hello", "en", "zh-CN") == "你好"

    kwargs = translator.client.chat.completions.parse.call_args.kwargs
    assert kwargs["model"] == "test/model"
    assert kwargs["response_format"] is TranslationResponse
    assert "Simplified Chinese" in kwargs["messages"][0]["content"]
    assert "English" in kwargs["messages"][0]["content"]
    assert "hello" in kwargs["messages"][1]["content"]


@pytest.mark.asyncio
async def test_rate_limit_maps_to_provider_throttled(translator):
    response = httpx.Response(429, request=REQUEST)
    translator.client.chat.completions.parse.side_effect = openai.RateLimitError(
        "slow down", response=response, body=None
    )

    with pytest.raises(ProviderThrottled):
        await translator.translate("hello", "auto", "zh-CN")


@pytest.mark.asyncio
async def test_status_error_maps_to_transport_failure(translator):
    response = httpx.Response(503, request=REQUEST)
    translator.client.chat.completions.parse.side_effect = openai.InternalServerError(
        "unavailable", response=response, body=None
    )

    with pytest.raises(TransportFailure) as exc_info:
        await translator.translate("hello", "auto", "zh-CN")
    assert exc_info.value.status == 503


@pytest.mark.asyncio
async def test_connection_error_maps_to_transport_failure(translator):
    translator.client.chat.completions.parse.side_effect = openai.APIConnectionError(request=REQUEST)

    with pytest.raises(TransportFailure):
        await translator.translate("hello", "auto", "zh-CN")


@pytest.mark.asyncio
async def test_missing_structured_output_is_transport_failure(translator):
    translator.client.chat.completions.parse.return_value = completion(None)

    with pytest.raises(TransportFailure):
        await translator.translate("hello", "auto", "zh-CN")


def test_factory_builds_appworlds():
    assert isinstance(get_translator(MagicMock(), "appworlds"), AppWorldsTranslator)


def test_factory_builds_openrouter():
    with patch("chatranslator.translation.factory.OPENAI_API_KEY_OPENROUTER", "test-key"):
        assert isinstance(get_translator(MagicMock(), " OpenRouter "), OpenRouterTranslator)


def test_factory_rejects_unknown_provider():
    with pytest.raises(ValueError, match="Unknown translator provider"):
        get_translator(MagicMock(), "babelfish")
