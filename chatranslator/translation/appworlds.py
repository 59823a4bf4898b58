"""Client for the appworlds.cn free translation HTTP API."""

import asyncio
import logging
from datetime import timedelta
from typing import Optional

import aiohttp
from pydantic import BaseModel, ValidationError
from yarl import URL

from chatranslator.core.dispatcher import FAILURE_MARKER
from chatranslator.core.errors import TransportFailure
from chatranslator.utils.rate_limiter import RateLimiter

log = logging.getLogger(__name__)


class AppWorldsResponse(BaseModel):
    code: int
    data: Optional[str] = None
    msg: Optional[str] = None


class AppWorldsTranslator:
    """
    GET {api_url}?text=..&from=..&to=.. returning {"code", "data", "msg"}.

    A call starts at least `min_interval` after the previous one finished,
    independently of any spacing the caller applies. A refused call (code != 200) comes back as
    text carrying FAILURE_MARKER rather than as an exception, which is how the
    dispatcher learns to try again later.
    """

    def __init__(
        self,
        http_session: aiohttp.ClientSession,
        api_url: str,
        *,
        min_interval: float = 2.0,
        timeout: float = 5.0,
    ):
        self.http_session = http_session
        self.api_url = api_url
        self.timeout = aiohttp.ClientTimeout(sock_connect=timeout, sock_read=timeout)
        self.limiter = RateLimiter(max_calls=1, period=timedelta(seconds=min_interval))
        self._lock = asyncio.Lock()

    async def translate(self, text: str, source: str, target: str) -> str:
        if not text or not text.strip():
            return text

        url = URL(self.api_url).with_query({"text": text, "from": source, "to": target})
        async with self._lock:
            await self.limiter.wait()
            log.info(f"GET {url}")
            try:
                async with self.http_session.get(url, timeout=self.timeout) as resp:
                    if resp.status != 200:
                        raise TransportFailure(f"HTTP {resp.status}", status=resp.status)
                    payload = await resp.json(content_type=None)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise TransportFailure(f"{type(e).__name__}: {e}") from e
            finally:
                # Spacing counts from the end of this call, failed or not
                self.limiter.record()

        try:
            body = AppWorldsResponse.model_validate(payload)
        except ValidationError as e:
            raise TransportFailure(f"unexpected response body: {payload!r}") from e

        if body.code == 200 and body.data is not None:
            return body.data

        log.error(f"Translation API refused the call: {body.msg}")
        return f"{FAILURE_MARKER}: {body.msg}"
