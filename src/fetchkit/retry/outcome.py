"""Tagged outcome of a single HTTP attempt.

Every attempt ends in exactly one of:
- HttpStatus: a response came back (any status)
- TransportFailure: no response, the transport raised

The retry policy dispatches on this union instead of a pair of optionals.
"""

from __future__ import annotations

import errno
import socket
from collections.abc import Iterator
from dataclasses import dataclass

import httpx

# Node-style codes keep marker sets portable across transports
_DNS_FAILURE = "ENOTFOUND"
_TIMED_OUT = "ETIMEDOUT"
_CONNECTION_REFUSED = "ECONNREFUSED"


@dataclass(frozen=True, slots=True)
class HttpStatus:
    """A response was obtained with this status code."""

    status: int

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300


@dataclass(frozen=True, slots=True)
class TransportFailure:
    """The attempt raised before producing a response.

    Attributes:
        code: Short failure code such as "ECONNREFUSED" (None if unknown)
        message: Exception message
    """

    code: str | None
    message: str

    @property
    def marker_source(self) -> str:
        """Text matched against retryable markers: code, else message."""
        return self.code or self.message or ""

    @classmethod
    def from_exception(cls, exc: BaseException) -> TransportFailure:
        return cls(code=classify_transport_error(exc), message=str(exc) or type(exc).__name__)


Outcome = HttpStatus | TransportFailure


def _chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield exc and its causes/contexts, outermost first."""
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def classify_transport_error(exc: BaseException) -> str | None:
    """Derive a failure code from an exception and its cause chain.

    Example:
        >>> classify_transport_error(ConnectionRefusedError(errno.ECONNREFUSED, "refused"))
        'ECONNREFUSED'
        >>> classify_transport_error(httpx.ReadTimeout("slow"))
        'ETIMEDOUT'
    """
    chain = list(_chain(exc))
    for err in chain:
        code = getattr(err, "code", None)
        if isinstance(code, str) and code:
            return code
        if isinstance(err, socket.gaierror):
            return _DNS_FAILURE
        if isinstance(err, (httpx.TimeoutException, TimeoutError)):
            return _TIMED_OUT
        if isinstance(err, OSError) and err.errno in errno.errorcode:
            return errno.errorcode[err.errno]
    if any(isinstance(err, httpx.ConnectError) for err in chain):
        return _CONNECTION_REFUSED
    return None
