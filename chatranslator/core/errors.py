"""Error taxonomy for the translation pipeline.

None of these are fatal. The dispatcher contains all of them and always
releases the in-flight entry for a content string once its outcome is terminal.
"""


class TranslationError(RuntimeError):
    """Base class for pipeline errors."""


class ProviderThrottled(TranslationError):
    """The provider rejected the call because of its own rate limit."""


class TransportFailure(TranslationError):
    """Network error, timeout, non-2xx status or an unreadable response body."""

    def __init__(self, detail: str, status: int | None = None):
        super().__init__(detail)
        self.detail = detail
        self.status = status


class EmptyOrUnchangedResult(TranslationError):
    """The provider returned nothing useful; the request is dropped quietly."""


class RetryLimitExceeded(TranslationError):
    """A throttled request ran out of attempts."""

    def __init__(self, content: str, attempts: int):
        super().__init__(f"gave up on {content!r} after {attempts} attempts")
        self.content = content
        self.attempts = attempts
