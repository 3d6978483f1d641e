"""Tests for transport failure classification."""

from __future__ import annotations

import errno
import socket

import httpx
import pytest

from fetchkit.errors import TransportError
from fetchkit.retry import HttpStatus, TransportFailure, classify_transport_error


def _raised_from(outer: Exception, cause: BaseException) -> Exception:
    try:
        try:
            raise cause
        except BaseException as inner:
            raise outer from inner
    except Exception as e:
        return e


@pytest.mark.parametrize("exc, code", [
    (TransportError("refused", code="ECONNREFUSED"), "ECONNREFUSED"),
    (ConnectionRefusedError(errno.ECONNREFUSED, "Connection refused"), "ECONNREFUSED"),
    (ConnectionResetError(errno.ECONNRESET, "Connection reset"), "ECONNRESET"),
    (OSError(errno.EBADF, "Bad file descriptor"), "EBADF"),
    (socket.gaierror(socket.EAI_NONAME, "Name or service not known"), "ENOTFOUND"),
    (TimeoutError("timed out"), "ETIMEDOUT"),
    (httpx.ConnectTimeout("connect timed out"), "ETIMEDOUT"),
    (httpx.ReadTimeout("read timed out"), "ETIMEDOUT"),
    (httpx.ConnectError("connection failed"), "ECONNREFUSED"),
    (ValueError("not a transport problem"), None),
    (TransportError("no code given"), None),
])
def test_classify_transport_error(exc: Exception, code: str | None) -> None:
    assert classify_transport_error(exc) == code


def test_classify_walks_cause_chain() -> None:
    """httpx wraps the OS error; the code comes from the cause."""
    exc = _raised_from(httpx.ConnectError("[Errno -2] Name or service not known"), socket.gaierror(-2, "nope"))
    assert classify_transport_error(exc) == "ENOTFOUND"

    exc = _raised_from(httpx.ConnectError("[Errno 111] refused"), ConnectionRefusedError(errno.ECONNREFUSED, "x"))
    assert classify_transport_error(exc) == "ECONNREFUSED"


def test_classify_ignores_non_string_code() -> None:
    exc = RuntimeError("boom")
    exc.code = 500  # type: ignore[attr-defined]
    assert classify_transport_error(exc) is None


def test_failure_from_exception() -> None:
    failure = TransportFailure.from_exception(TransportError("connect ECONNREFUSED 10.0.0.1:443", code="ECONNREFUSED"))
    assert failure == TransportFailure("ECONNREFUSED", "connect ECONNREFUSED 10.0.0.1:443")
    assert failure.marker_source == "ECONNREFUSED"


def test_failure_message_falls_back_to_type_name() -> None:
    failure = TransportFailure.from_exception(RuntimeError())
    assert failure.code is None
    assert failure.message == "RuntimeError"
    assert failure.marker_source == "RuntimeError"


@pytest.mark.parametrize("status, success", [(199, False), (200, True), (204, True), (299, True), (300, False), (503, False)])
def test_http_status_success_range(status: int, success: bool) -> None:
    assert HttpStatus(status).is_success is success
