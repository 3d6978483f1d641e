"""Exception taxonomy for fetchkit.

Transport failures raised by httpx or the OS are propagated unchanged by the
retry loop. The classes here cover failures fetchkit itself reports:

- TransportError: attempt callables may raise it to report a failure with an
  explicit code (e.g. "ECONNREFUSED")
- ResponseParseError: body could not be decoded
- RetryExhaustedError: loop ended with no recorded outcome
"""

from __future__ import annotations


class FetchkitError(Exception):
    """Base class for all fetchkit errors."""


class TransportError(FetchkitError):
    """Network-level failure to complete an attempt.

    Attributes:
        code: Short machine-readable code matched against retryable markers
        message: Human-readable description
    """

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def __repr__(self) -> str:
        return f"TransportError({self.message!r}, code={self.code!r})"


class ResponseParseError(FetchkitError):
    """Response body could not be read or decoded."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.original_error = original_error


class RetryExhaustedError(FetchkitError):
    """Retry loop finished without a response or a failure to report."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"Request failed after {attempts} attempt(s)")
        self.attempts = attempts
