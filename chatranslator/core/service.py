import logging
from typing import Optional

from chatranslator.core.admission import InFlightRegistry
from chatranslator.core.classifier import classify
from chatranslator.core.dispatcher import Dispatcher
from chatranslator.core.models import ConfigSource, DisplaySink, Ignored, Translator
from chatranslator.core.request_queue import RequestQueue

log = logging.getLogger(__name__)


class ChatTranslationService:
    """
    Owns the classification-and-dispatch pipeline for one chat session.

    Ingestion adapters call submit() from wherever their lines arrive, including
    worker threads. The admission registry is the only deduplication step, so
    the same line coming in through several adapters is translated once.
    """

    def __init__(
        self,
        config: ConfigSource,
        translator: Translator,
        sink: DisplaySink,
        *,
        self_name: Optional[str] = None,
        min_interval: float = 1.3,
        tick_seconds: float = 0.1,
        max_attempts: int = 5,
    ):
        self.config = config
        self.translator = translator
        self.self_name = self_name
        self.registry = InFlightRegistry()
        self.queue = RequestQueue(min_interval=min_interval)
        self.dispatcher = Dispatcher(
            self.queue,
            self.registry,
            translator,
            sink,
            config,
            tick_seconds=tick_seconds,
            max_attempts=max_attempts,
        )

    def submit(self, raw_line: str, source: str = "unknown", immediate: bool = False) -> bool:
        """Feed one raw chat line in. Returns True if it was queued for translation."""
        if not self.config.enabled:
            return False

        result = classify(raw_line, self_name=self.self_name)
        if isinstance(result, Ignored):
            log.debug(f"[{source}] ignored ({result.reason}): {raw_line!r}")
            return False

        if not self.registry.admit(result.content, result.sender):
            log.debug(f"[{source}] already pending: {result.content!r}")
            return False

        if result.sender is None:
            log.debug(f"[{source}] no sender pattern matched, passing through unattributed: {raw_line!r}")
        self.queue.enqueue(result.content, immediate)
        log.info(f"[{source}] queued message from {result.sender}: {result.content!r}")
        return True

    async def translate_now(self, text: str) -> str:
        """One-off translation outside the queue, e.g. for a slash command."""
        return await self.translator.translate(
            text, self.config.source_language, self.config.target_language
        )

    def start(self):
        self.dispatcher.start()

    async def stop(self):
        await self.dispatcher.stop()

    def status(self) -> dict:
        return {
            "running": self.dispatcher.is_running,
            "queued": len(self.queue),
            "pending": len(self.registry),
            "in_flight": self.dispatcher.in_flight,
        }
