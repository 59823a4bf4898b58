"""User-facing translator settings, persisted in SQLite."""

import logging
from pydantic import BaseModel, Field, ValidationError, field_validator
from chatranslator.db import TranslatorDB

log = logging.getLogger(__name__)

VALID_LANGUAGES = ["auto", "zh-CN", "en", "ja", "ko", "fr", "de", "es", "it", "ru"]

LANGUAGE_NAMES = {
    "auto": "Auto-detect",
    "zh-CN": "Simplified Chinese",
    "en": "English",
    "ja": "Japanese",
    "ko": "Korean",
    "fr": "French",
    "de": "German",
    "es": "Spanish",
    "it": "Italian",
    "ru": "Russian",
}

MAX_DELAY_MS = 10000


def language_name(code: str) -> str:
    return LANGUAGE_NAMES.get(code, code)


class TranslatorConfig(BaseModel):
    enabled: bool = True
    source_language: str = "auto"
    target_language: str = "zh-CN"
    show_original: bool = True
    delay_ms: int = Field(default=0, ge=0, le=MAX_DELAY_MS)

    @field_validator("source_language")
    @classmethod
    def _check_source(cls, v: str) -> str:
        if v not in VALID_LANGUAGES:
            raise ValueError(f"invalid language code, valid: {', '.join(VALID_LANGUAGES)}")
        return v

    @field_validator("target_language")
    @classmethod
    def _check_target(cls, v: str) -> str:
        if v == "auto":
            raise ValueError("target language cannot be 'auto'")
        if v not in VALID_LANGUAGES:
            raise ValueError(f"invalid language code, valid: {', '.join(VALID_LANGUAGES)}")
        return v


class ConfigStore:
    """
    Read-through cache over the saved TranslatorConfig.

    Exposes the same attributes as TranslatorConfig so the pipeline can read it
    directly. Setters validate, update the cache and persist.
    """

    def __init__(self, db: TranslatorDB):
        self.db = db
        self.config = self._load()

    def _load(self) -> TranslatorConfig:
        row = self.db.load_config()
        if row is None:
            config = TranslatorConfig()
            self.db.save_config(config.model_dump())
            return config
        try:
            return TranslatorConfig.model_validate(row)
        except ValidationError as e:
            log.error(f"Saved translator config is invalid, using defaults: {e}")
            return TranslatorConfig()

    def _update(self, **changes) -> TranslatorConfig:
        try:
            config = TranslatorConfig.model_validate({**self.config.model_dump(), **changes})
        except ValidationError as e:
            raise ValueError(e.errors()[0]["msg"]) from e
        self.config = config
        if not self.db.save_config(config.model_dump()):
            log.error("Failed to save translator config")
        return config

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    @property
    def source_language(self) -> str:
        return self.config.source_language

    @property
    def target_language(self) -> str:
        return self.config.target_language

    @property
    def show_original(self) -> bool:
        return self.config.show_original

    @property
    def delay_ms(self) -> int:
        return self.config.delay_ms

    def set_enabled(self, enabled: bool):
        self._update(enabled=enabled)

    def toggle(self) -> bool:
        return self._update(enabled=not self.config.enabled).enabled

    def set_source_language(self, language: str):
        self._update(source_language=language)

    def set_target_language(self, language: str):
        self._update(target_language=language)

    def set_show_original(self, show: bool):
        self._update(show_original=show)

    def set_delay_ms(self, delay_ms: int):
        self._update(delay_ms=delay_ms)

    def reset(self):
        self.config = TranslatorConfig()
        self.db.save_config(self.config.model_dump())
