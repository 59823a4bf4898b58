from dataclasses import dataclass
from typing import Optional, Protocol

# Shown in place of the sender when a line carried no recognizable player name
UNKNOWN_SENDER = "未知玩家"


@dataclass(frozen=True)
class PlayerUtterance:
    sender: Optional[str]
    content: str


@dataclass(frozen=True)
class Ignored:
    reason: str


@dataclass(frozen=True)
class TranslationRequest:
    content: str
    # immediate requests skip the configured display delay
    immediate: bool = False
    attempt: int = 1


@dataclass(frozen=True)
class TranslationOutcome:
    """What a single translation call produced: either text or an error."""

    text: Optional[str] = None
    error: Optional[Exception] = None


class ConfigSource(Protocol):
    enabled: bool
    source_language: str
    target_language: str
    show_original: bool
    delay_ms: int


class Translator(Protocol):
    async def translate(self, text: str, source: str, target: str) -> str: ...


class DisplaySink(Protocol):
    async def deliver(
        self, sender: str, original: str, translated: str, show_original: bool
    ) -> None: ...
