import asyncio
import logging
from datetime import datetime
from typing import Optional

from discord.ext import tasks

from chatranslator.core.admission import InFlightRegistry
from chatranslator.core.classifier import should_skip_translation
from chatranslator.core.errors import EmptyOrUnchangedResult, ProviderThrottled, RetryLimitExceeded
from chatranslator.core.models import (
    UNKNOWN_SENDER,
    ConfigSource,
    DisplaySink,
    TranslationOutcome,
    TranslationRequest,
    Translator,
)
from chatranslator.core.request_queue import RequestQueue

log = logging.getLogger(__name__)

# Generic marker the HTTP provider puts in its payload when a call is refused
FAILURE_MARKER = "something went wrong"

# Free-tier rate limit message of the appworlds provider
FREE_TIER_THROTTLE = "免费用户接口访问频率"


def is_throttle_signature(text: str) -> bool:
    """True when a translated payload is really the provider refusing the call.

    The generic marker only counts as the `marker:` prefix the provider emits,
    so a real translation that happens to contain the phrase is delivered.
    """
    return FREE_TIER_THROTTLE in text or text.startswith(f"{FAILURE_MARKER}:")


class Dispatcher:
    """
    Single consumer of the request queue.

    Every tick it tries to take one request through the spacing gate and starts
    the translation as its own task, so a slow provider never holds up the
    tick. Each task ends in handle_outcome, which either re-queues the content,
    delivers it, or drops it and releases its admission.
    """

    def __init__(
        self,
        queue: RequestQueue,
        registry: InFlightRegistry,
        translator: Translator,
        sink: DisplaySink,
        config: ConfigSource,
        *,
        tick_seconds: float = 0.1,
        max_attempts: int = 5,
    ):
        self.queue = queue
        self.registry = registry
        self.translator = translator
        self.sink = sink
        self.config = config
        self.max_attempts = max_attempts
        self._tasks: set[asyncio.Task] = set()
        self.tick_loop = tasks.loop(seconds=tick_seconds)(self.tick)

    def start(self):
        if not self.tick_loop.is_running():
            self.tick_loop.start()

    async def stop(self):
        self.tick_loop.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    @property
    def is_running(self) -> bool:
        return self.tick_loop.is_running()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def tick(self, now: Optional[datetime] = None):
        try:
            request = self.queue.try_dequeue(now)
            if request is None:
                return

            # Classification may have changed since the line was admitted
            if should_skip_translation(request.content):
                log.info(f"Dropping queued content that needs no translation: {request.content!r}")
                self.registry.resolve(request.content)
                return

            task = asyncio.create_task(self.process(request))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        except Exception as e:
            log.error(f"Error processing translation queue: {e}")

    async def process(self, request: TranslationRequest):
        outcome = await self.call_translator(request)
        try:
            await self.handle_outcome(request, outcome)
        except Exception as e:
            log.error(f"Error handling translation result for {request.content!r}: {e}")
            self.registry.resolve(request.content)

    async def call_translator(self, request: TranslationRequest) -> TranslationOutcome:
        log.info(f"Translating: {request.content!r} (attempt {request.attempt})")
        try:
            text = await self.translator.translate(
                request.content,
                self.config.source_language,
                self.config.target_language,
            )
        except Exception as e:
            return TranslationOutcome(error=e)
        return TranslationOutcome(text=text)

    async def handle_outcome(self, request: TranslationRequest, outcome: TranslationOutcome):
        content = request.content
        text = outcome.text
        error = outcome.error
        if error is None and (not text or not text.strip() or text == content):
            error = EmptyOrUnchangedResult(f"empty or unchanged result: {text!r}")

        if isinstance(error, ProviderThrottled):
            self._requeue(request, str(error))
            return
        if isinstance(error, EmptyOrUnchangedResult):
            log.info(f"Skipping translation of {content!r}: {error}")
            self.registry.resolve(content)
            return
        if error is not None:
            log.error(f"Translation failed for {content!r}: {error}")
            self.registry.resolve(content)
            return

        if is_throttle_signature(text):
            self._requeue(request, text)
            return

        log.info(f"Translation result: {content!r} -> {text!r}")
        sender = self.registry.resolve(content) or UNKNOWN_SENDER

        if not request.immediate:
            delay_ms = self.config.delay_ms
            if delay_ms > 0:
                await asyncio.sleep(delay_ms / 1000)

        await self._deliver(sender, content, text)

    def _requeue(self, request: TranslationRequest, detail: str):
        if request.attempt >= self.max_attempts:
            err = RetryLimitExceeded(request.content, request.attempt)
            log.warning(f"{err}; last response: {detail}")
            self.registry.resolve(request.content)
            return
        # Content stays admitted, so duplicates arriving meanwhile are still rejected
        log.info(f"Provider throttled, requeueing {request.content!r}: {detail}")
        self.queue.enqueue(request.content, immediate=False, attempt=request.attempt + 1)

    async def _deliver(self, sender: str, original: str, translated: str):
        try:
            await self.sink.deliver(sender, original, translated, self.config.show_original)
        except Exception as e:
            log.warning(f"Could not deliver translation from {sender}: {e}")
