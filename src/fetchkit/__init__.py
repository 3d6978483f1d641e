"""fetchkit - Retry-with-backoff, response parsing, and request building for httpx.

Three cooperating facilities for outbound HTTP calls:

Retry With Backoff:
    >>> from fetchkit import BackoffPolicy, fetch_with_retry
    >>>
    >>> policy = BackoffPolicy(max_retries=3, initial_delay_ms=500)
    >>> response = await fetch_with_retry("https://api.example.com/items", policy=policy)
    >>> # 503s are retried; a final 503 is returned, not raised

Preset Fetch Function:
    >>> from fetchkit import create_fetch_with_retry
    >>> fetch = create_fetch_with_retry(policy)
    >>> response = await fetch("https://api.example.com/items")

Request Builder:
    >>> from fetchkit import build_request
    >>> response = await (
    ...     build_request("https://api.example.com/items", "POST")
    ...     .add_auth_header("sk-xxx")
    ...     .set_json_body({"name": "widget"})
    ...     .send(policy=policy)
    ... )

Response Parsing:
    >>> from fetchkit import parse_response_safe
    >>> parsed = parse_response_safe(response)
    >>> parsed.status, parsed.data
"""

from __future__ import annotations

__version__ = "0.1.0"

# Errors
from .errors import FetchkitError, ResponseParseError, RetryExhaustedError, TransportError

# Request building
from .request import RequestBuilder, RequestOptions, build_request

# Response parsing
from .response import ParsedResponse, parse_response, parse_response_safe

# Retry
from .retry import (
    NO_RETRY,
    BackoffPolicy,
    ExponentialBackoff,
    HttpStatus,
    TransportFailure,
    create_fetch_with_retry,
    create_fetch_with_retry_sync,
    execute,
    execute_sync,
    fetch_with_retry,
    fetch_with_retry_sync,
)

__all__ = [
    "__version__",
    # Errors
    "FetchkitError",
    "TransportError",
    "ResponseParseError",
    "RetryExhaustedError",
    # Retry
    "BackoffPolicy",
    "ExponentialBackoff",
    "HttpStatus",
    "TransportFailure",
    "NO_RETRY",
    "execute",
    "execute_sync",
    "fetch_with_retry",
    "fetch_with_retry_sync",
    "create_fetch_with_retry",
    "create_fetch_with_retry_sync",
    # Request
    "RequestBuilder",
    "RequestOptions",
    "build_request",
    # Response
    "ParsedResponse",
    "parse_response",
    "parse_response_safe",
]
