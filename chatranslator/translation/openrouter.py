import logging

import openai
from openai import AsyncOpenAI
from pydantic import BaseModel

from chatranslator.config import language_name
from chatranslator.core.errors import ProviderThrottled, TransportFailure

log = logging.getLogger(__name__)

GAME_GLOSSARY = """
Keep these gaming/technical terms unchanged:
- Gaming terms: spawn, respawn, AFK, GG, DC, lag, ping, fps, coords, waypoint, loot, buff, debuff, meta, OP, mob, PvP.
- Commands: anything starting with /.
- Player names, server names and item names.
"""


class TranslationResponse(BaseModel):
    translation: str


class OpenRouterTranslator:
    """LLM translation through an OpenAI-compatible endpoint with structured output."""

    def __init__(self, api_key: str | None, base_url: str, model: str, timeout: float = 5.0):
        self.model = model
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0)

    async def translate(self, text: str, source: str, target: str) -> str:
        source_info = "Auto-detect the source language" if source == "auto" else f"The source language is {language_name(source)}"
        try:
            completion = await self.client.chat.completions.parse(
                model=self.model,
                messages=[
                    {
                        "role": "system",
                        "content": (
                            f"Translate the following game chat message to {language_name(target)}. "
                            f"{source_info}. If already in the target language, return it unchanged. "
                            "Casual tone. Output only the translated content."
                            f"\n\nGLOSSARY:\n{GAME_GLOSSARY}"
                        ),
                    },
                    {"role": "user", "content": f"### MESSAGE TO TRANSLATE:\n{text}"},
                ],
                response_format=TranslationResponse,
            )
        except openai.RateLimitError as e:
            raise ProviderThrottled(str(e)) from e
        except openai.APIStatusError as e:
            raise TransportFailure(str(e), status=e.status_code) from e
        except openai.APIError as e:
            # Connection errors and timeouts
            raise TransportFailure(str(e)) from e

        result = completion.choices[0].message.parsed
        if result is None:
            raise TransportFailure("model returned no structured translation")
        return result.translation
