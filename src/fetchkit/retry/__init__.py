"""Retry-with-backoff for outbound HTTP calls.

Pairs an immutable decision policy with a delay scheduler and a sequential
attempt loop.

Example:
    >>> from fetchkit.retry import BackoffPolicy, create_fetch_with_retry
    >>>
    >>> fetch = create_fetch_with_retry(BackoffPolicy(
    ...     max_retries=4,
    ...     initial_delay_ms=250,
    ...     retryable_status_codes={429, 503},
    ... ))
    >>> response = await fetch("https://api.example.com/items")
"""

from .backoff import Backoff, ExponentialBackoff
from .executor import (
    ResponseLike,
    create_fetch_with_retry,
    create_fetch_with_retry_sync,
    execute,
    execute_sync,
    fetch_with_retry,
    fetch_with_retry_sync,
)
from .outcome import HttpStatus, Outcome, TransportFailure, classify_transport_error
from .policy import DEFAULT_RETRYABLE_ERRORS, DEFAULT_RETRYABLE_STATUS, NO_RETRY, BackoffPolicy

__all__ = [
    # Backoff scheduling
    "Backoff",
    "ExponentialBackoff",
    # Outcomes
    "HttpStatus",
    "TransportFailure",
    "Outcome",
    "classify_transport_error",
    # Policy
    "BackoffPolicy",
    "DEFAULT_RETRYABLE_STATUS",
    "DEFAULT_RETRYABLE_ERRORS",
    "NO_RETRY",
    # Execution
    "ResponseLike",
    "execute",
    "execute_sync",
    "fetch_with_retry",
    "fetch_with_retry_sync",
    "create_fetch_with_retry",
    "create_fetch_with_retry_sync",
]
