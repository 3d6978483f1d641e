"""Response parsing by content type.

JSON bodies (Content-Type containing application/json) are decoded to Python
objects; everything else is returned as text.

Example:
    >>> response = await fetch_with_retry("https://api.example.com/items")
    >>> parsed = parse_response_safe(response)
    >>> if parsed.error is None:
    ...     print(parsed.data)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

from fetchkit.errors import ResponseParseError

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger("fetchkit.response")


class ParsedResponse(BaseModel):
    """Normalized response shape.

    Attributes:
        status: HTTP status code (0 if unknown)
        status_text: Reason phrase
        headers: Response headers (lowercased names)
        data: Decoded JSON, text, or None on error
        error: Error message when parsing failed (safe variant only)
    """

    model_config = ConfigDict(frozen=True, extra="forbid", revalidate_instances="never")

    status: int
    status_text: str = ""
    headers: dict[str, str] = Field(default_factory=dict, repr=False)
    data: Any = Field(default=None, repr=False)
    error: str | None = None

    @computed_field
    @property
    def ok(self) -> bool:
        """Whether the status is in the 2xx success range."""
        return 200 <= self.status < 300


def _headers(response: httpx.Response) -> dict[str, str]:
    return dict(response.headers.items())


def _content_type(response: httpx.Response) -> str:
    headers = getattr(response, "headers", None)
    return (headers.get("content-type") if headers is not None else None) or ""


def parse_response(response: httpx.Response | None) -> ParsedResponse:
    """Decode a loaded response body according to its content type.

    Raises:
        ResponseParseError: Response missing, or body unreadable/undecodable
    """
    if response is None:
        raise ResponseParseError("Response object is None")

    if "application/json" in _content_type(response):
        try:
            data = response.json()
        except Exception as e:
            raise ResponseParseError(
                f"Failed to parse JSON response: {e}", response.status_code, e,
            ) from e
    else:
        try:
            data = response.text
        except Exception as e:
            raise ResponseParseError(
                f"Failed to read response body: {e}", response.status_code, e,
            ) from e

    return ParsedResponse(
        status=response.status_code,
        status_text=response.reason_phrase,
        headers=_headers(response),
        data=data,
    )


def parse_response_safe(response: httpx.Response | None) -> ParsedResponse:
    """Like parse_response, but failures come back in the error field."""
    try:
        return parse_response(response)
    except Exception as e:
        logger.debug(f"Response parsing failed: {e}")
        status = getattr(response, "status_code", None) or 0
        if isinstance(e, ResponseParseError):
            status = e.status_code or status
        return ParsedResponse(
            status=status,
            status_text=getattr(response, "reason_phrase", None) or "Unknown",
            headers={},
            data=None,
            error=e.message if isinstance(e, ResponseParseError) else str(e),
        )
