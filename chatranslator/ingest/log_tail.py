"""
Follow a game client log file and feed its chat lines into the pipeline.

Client logs look like `[12:34:56] [Render thread/INFO]: [CHAT] <Bob> hello`;
everything from the `[CHAT]` tag onwards is handed to the service.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import aiohttp
from discord.ext import tasks

from chatranslator.config import ConfigStore
from chatranslator.core.service import ChatTranslationService
from chatranslator.db import TranslatorDB
from chatranslator.settings import (
    CHAT_LOG_PATH,
    DISPATCH_MIN_INTERVAL_SECONDS,
    DISPATCH_TICK_SECONDS,
    LOCAL_PLAYER_NAME,
    LOG_POLL_SECONDS,
    TRANSLATION_MAX_ATTEMPTS,
    TRANSLATOR_DB_PATH,
)
from chatranslator.translation.factory import get_translator
from chatranslator.utils.text_utils import format_translation

log = logging.getLogger(__name__)

CHAT_TAG = "[CHAT]"


def chat_payload(line: str) -> Optional[str]:
    """Return the `[CHAT] ...` part of a log line, or None for non-chat lines."""
    idx = line.find(CHAT_TAG)
    if idx < 0:
        return None
    payload = line[idx:].strip()
    return payload if len(payload) > len(CHAT_TAG) else None


class ConsoleSink:
    """Prints translations to stdout."""

    async def deliver(self, sender: str, original: str, translated: str, show_original: bool):
        print(format_translation(sender, original, translated, show_original), flush=True)


class LogTailAdapter:
    def __init__(
        self,
        service: ChatTranslationService,
        path: str,
        *,
        poll_seconds: float = 0.5,
        from_start: bool = False,
    ):
        self.service = service
        self.path = Path(path)
        self.from_start = from_start
        self._position: Optional[int] = None
        self.poll_loop = tasks.loop(seconds=poll_seconds)(self.poll)

    def start(self):
        if not self.poll_loop.is_running():
            self.poll_loop.start()

    def stop(self):
        self.poll_loop.cancel()

    def read_new_lines(self) -> list[str]:
        """Read complete lines appended since the last call.

        Starts at the end of the file unless from_start is set, and starts over
        when the file shrinks (the client rotated its log).
        """
        try:
            size = self.path.stat().st_size
        except FileNotFoundError:
            return []

        if self._position is None:
            self._position = 0 if self.from_start else size
        if size < self._position:
            log.info(f"{self.path} was truncated, reading from the start")
            self._position = 0

        with self.path.open("rb") as f:
            f.seek(self._position)
            data = f.read()

        end = data.rfind(b"\n")
        if end < 0:
            return []
        self._position += end + 1
        return data[: end + 1].decode("utf-8", errors="replace").splitlines()

    def pump(self) -> int:
        """Read new lines and submit chat ones. Runs in a worker thread."""
        queued = 0
        for line in self.read_new_lines():
            payload = chat_payload(line)
            if payload and self.service.submit(payload, source="log", immediate=False):
                queued += 1
        return queued

    async def poll(self):
        try:
            await asyncio.to_thread(self.pump)
        except Exception as e:
            log.error(f"Error reading chat log {self.path}: {e}")


async def _async_main():
    async with aiohttp.ClientSession() as http_session:
        config = ConfigStore(TranslatorDB(TRANSLATOR_DB_PATH))
        service = ChatTranslationService(
            config,
            get_translator(http_session),
            ConsoleSink(),
            self_name=LOCAL_PLAYER_NAME,
            min_interval=DISPATCH_MIN_INTERVAL_SECONDS,
            tick_seconds=DISPATCH_TICK_SECONDS,
            max_attempts=TRANSLATION_MAX_ATTEMPTS,
        )
        adapter = LogTailAdapter(service, CHAT_LOG_PATH, poll_seconds=LOG_POLL_SECONDS)
        log.info(f"Following {CHAT_LOG_PATH}")
        service.start()
        adapter.start()
        try:
            await asyncio.Event().wait()
        finally:
            adapter.stop()
            await service.stop()


def main():
    logging.basicConfig(level=logging.INFO)
    try:
        asyncio.run(_async_main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
