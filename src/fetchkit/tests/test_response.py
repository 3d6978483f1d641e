"""Tests for content-type based response parsing."""

from __future__ import annotations

import httpx
import pytest

from fetchkit import ParsedResponse, ResponseParseError, parse_response, parse_response_safe


def test_parse_json() -> None:
    response = httpx.Response(200, json={"items": [1, 2]}, headers={"X-Request-Id": "r1"})
    parsed = parse_response(response)

    assert parsed.status == 200
    assert parsed.status_text == "OK"
    assert parsed.data == {"items": [1, 2]}
    assert parsed.headers["content-type"] == "application/json"
    assert parsed.headers["x-request-id"] == "r1"
    assert parsed.error is None
    assert parsed.ok


def test_parse_json_with_charset() -> None:
    response = httpx.Response(200, content=b'[true]', headers={"Content-Type": "application/json; charset=utf-8"})
    assert parse_response(response).data == [True]


def test_parse_text() -> None:
    parsed = parse_response(httpx.Response(503, text="upstream down"))

    assert parsed.status == 503
    assert parsed.status_text == "Service Unavailable"
    assert parsed.data == "upstream down"
    assert not parsed.ok


def test_parse_without_content_type_is_text() -> None:
    parsed = parse_response(httpx.Response(200, content=b'{"looks": "like json"}'))
    assert parsed.data == '{"looks": "like json"}'


def test_invalid_json_raises() -> None:
    response = httpx.Response(502, content=b"{not json", headers={"Content-Type": "application/json"})

    with pytest.raises(ResponseParseError) as excinfo:
        parse_response(response)

    assert excinfo.value.status_code == 502
    assert excinfo.value.original_error is not None
    assert str(excinfo.value).startswith("Failed to parse JSON response")


def test_unread_body_raises() -> None:
    response = httpx.Response(200, headers={"Content-Type": "text/plain"}, stream=httpx.ByteStream(b"abc"))

    with pytest.raises(ResponseParseError, match="Failed to read response body"):
        parse_response(response)


def test_none_response_raises() -> None:
    with pytest.raises(ResponseParseError):
        parse_response(None)


def test_safe_returns_parsed_on_success() -> None:
    assert parse_response_safe(httpx.Response(201, json={"id": 7})).data == {"id": 7}


def test_safe_captures_parse_error() -> None:
    response = httpx.Response(500, content=b"<html>", headers={"Content-Type": "application/json"})
    parsed = parse_response_safe(response)

    assert parsed == ParsedResponse(
        status=500,
        status_text="Internal Server Error",
        headers={},
        data=None,
        error=parsed.error,
    )
    assert parsed.error is not None and parsed.error.startswith("Failed to parse JSON response")


def test_safe_with_missing_response() -> None:
    parsed = parse_response_safe(None)

    assert parsed.status == 0
    assert parsed.status_text == "Unknown"
    assert parsed.data is None
    assert parsed.error == "Response object is None"
