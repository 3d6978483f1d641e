"""Retrying executor: drives sequential attempts under a BackoffPolicy.

One logical request becomes up to ``max_retries + 1`` physical attempts. The
loop ends in exactly one of:
- a 2xx response (returned immediately)
- a non-retried unsuccessful response (returned, never raised)
- a propagated transport failure (the attempt's own exception)

Cancellation is pass-through: cancelling the task during an attempt or during
the inter-attempt sleep stops the loop with CancelledError.

Example:
    >>> import httpx
    >>> from fetchkit.retry import BackoffPolicy, execute
    >>>
    >>> async with httpx.AsyncClient() as client:
    ...     response = await execute(
    ...         lambda: client.get("https://api.example.com/items"),
    ...         BackoffPolicy(max_retries=2),
    ...     )
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from typing import TYPE_CHECKING, Protocol, TypeVar, runtime_checkable

import httpx

from fetchkit.errors import RetryExhaustedError

from .outcome import HttpStatus, TransportFailure
from .policy import BackoffPolicy

if TYPE_CHECKING:
    from fetchkit.request import RequestOptions


logger = logging.getLogger("fetchkit.retry")


@runtime_checkable
class ResponseLike(Protocol):
    """Anything with an integer HTTP status (httpx.Response qualifies)."""

    @property
    def status_code(self) -> int: ...


R = TypeVar("R", bound=ResponseLike)


async def _sleep(delay_ms: int) -> None:
    await asyncio.sleep(delay_ms / 1000)


def _sleep_sync(delay_ms: int) -> None:
    time.sleep(delay_ms / 1000)


def _log_retry(policy: BackoffPolicy, attempt: int, delay_ms: int, reason: str) -> None:
    logger.info(f"Retry {attempt}/{policy.max_retries} after {delay_ms}ms ({reason})")


def _log_final(policy: BackoffPolicy, attempt: int, reason: str) -> None:
    if policy.max_retries and attempt >= policy.max_retries:
        logger.warning(f"Giving up after {attempt + 1} attempts ({reason})")
    else:
        logger.debug(f"Attempt {attempt + 1} not retryable ({reason})")


# ─────────────────────────────────────────────────────────────────────────────
# Attempt Loops
# ─────────────────────────────────────────────────────────────────────────────


async def execute(perform_attempt: Callable[[], Awaitable[R]], policy: BackoffPolicy | None = None) -> R:
    """Run perform_attempt until success, a final response, or a propagated failure.

    Args:
        perform_attempt: Zero-arg coroutine function doing one physical request
        policy: Retry policy (default: BackoffPolicy())

    Returns:
        The 2xx response, or the last unsuccessful response

    Raises:
        Exception: The attempt's transport failure once non-retryable or exhausted
        RetryExhaustedError: Loop ended with nothing recorded
    """
    policy = policy if policy is not None else BackoffPolicy()
    last_response: R | None = None
    last_error: Exception | None = None
    reason = "no outcome"

    for attempt in range(policy.max_retries + 1):
        if attempt > 0:
            delay = policy.calculate_delay(attempt - 1)
            _log_retry(policy, attempt, delay, reason)
            await _sleep(delay)

        try:
            response = await perform_attempt()
        except Exception as e:
            last_error = e
            failure = TransportFailure.from_exception(e)
            reason = f"error {failure.marker_source}"
            if not policy.should_retry(failure, attempt):
                _log_final(policy, attempt, reason)
                raise
            continue

        if HttpStatus(response.status_code).is_success:
            return response
        if not policy.should_retry(HttpStatus(response.status_code), attempt):
            _log_final(policy, attempt, f"status {response.status_code}")
            return response
        last_response = response
        reason = f"status {response.status_code}"

    if last_response is not None:
        return last_response
    if last_error is not None:
        raise last_error
    raise RetryExhaustedError(policy.max_attempts)


def execute_sync(perform_attempt: Callable[[], R], policy: BackoffPolicy | None = None) -> R:
    """Execute sync attempt callable with retry policy.

    Synchronous version for single-request-at-a-time embeddings; blocks the
    calling thread between attempts.
    """
    policy = policy if policy is not None else BackoffPolicy()
    last_response: R | None = None
    last_error: Exception | None = None
    reason = "no outcome"

    for attempt in range(policy.max_retries + 1):
        if attempt > 0:
            delay = policy.calculate_delay(attempt - 1)
            _log_retry(policy, attempt, delay, reason)
            _sleep_sync(delay)

        try:
            response = perform_attempt()
        except Exception as e:
            last_error = e
            failure = TransportFailure.from_exception(e)
            reason = f"error {failure.marker_source}"
            if not policy.should_retry(failure, attempt):
                _log_final(policy, attempt, reason)
                raise
            continue

        if HttpStatus(response.status_code).is_success:
            return response
        if not policy.should_retry(HttpStatus(response.status_code), attempt):
            _log_final(policy, attempt, f"status {response.status_code}")
            return response
        last_response = response
        reason = f"status {response.status_code}"

    if last_response is not None:
        return last_response
    if last_error is not None:
        raise last_error
    raise RetryExhaustedError(policy.max_attempts)


# ─────────────────────────────────────────────────────────────────────────────
# httpx Integration
# ─────────────────────────────────────────────────────────────────────────────


def _coerce_options(url: str, options: RequestOptions | Mapping[str, object] | None) -> RequestOptions:
    from fetchkit.request import RequestOptions

    if isinstance(options, RequestOptions):
        return options if options.url == url else options.model_copy(update={"url": url})
    return RequestOptions(**{**dict(options or {}), "url": url})


def _client_defaults() -> dict[str, object]:
    from fetchkit.config import get_settings

    http = get_settings().http
    return {
        "timeout": http.timeout,
        "follow_redirects": http.follow_redirects,
        "verify": http.verify_ssl,
        "headers": {"User-Agent": http.user_agent},
    }


async def fetch_with_retry(
    url: str,
    options: RequestOptions | Mapping[str, object] | None = None,
    policy: BackoffPolicy | None = None,
    *,
    client: httpx.AsyncClient | None = None,
) -> httpx.Response:
    """Send an HTTP request, retrying per policy.

    Without a client, one httpx.AsyncClient is opened for the whole logical
    request (all attempts) and closed afterwards.

    Example:
        >>> response = await fetch_with_retry(
        ...     "https://api.example.com/items",
        ...     {"method": "POST", "headers": {"X-Trace": "1"}},
        ...     BackoffPolicy(max_retries=5),
        ... )
    """
    request = _coerce_options(url, options).to_httpx()

    if client is not None:
        return await execute(lambda: client.request(**request), policy)

    async with httpx.AsyncClient(**_client_defaults()) as owned:
        return await execute(lambda: owned.request(**request), policy)


def fetch_with_retry_sync(
    url: str,
    options: RequestOptions | Mapping[str, object] | None = None,
    policy: BackoffPolicy | None = None,
    *,
    client: httpx.Client | None = None,
) -> httpx.Response:
    """Blocking twin of fetch_with_retry using httpx.Client."""
    request = _coerce_options(url, options).to_httpx()

    if client is not None:
        return execute_sync(lambda: client.request(**request), policy)

    with httpx.Client(**_client_defaults()) as owned:
        return execute_sync(lambda: owned.request(**request), policy)


# ─────────────────────────────────────────────────────────────────────────────
# Preset Factories
# ─────────────────────────────────────────────────────────────────────────────


def create_fetch_with_retry(
    policy: BackoffPolicy | None = None,
) -> Callable[..., Awaitable[httpx.Response]]:
    """Return a fetch function pre-bound to one policy.

    Example:
        >>> fetch = create_fetch_with_retry(BackoffPolicy(max_retries=1))
        >>> response = await fetch("https://api.example.com/health")
    """
    policy = policy if policy is not None else BackoffPolicy()

    async def fetch(
        url: str,
        options: RequestOptions | Mapping[str, object] | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> httpx.Response:
        return await fetch_with_retry(url, options, policy, client=client)

    return fetch


def create_fetch_with_retry_sync(policy: BackoffPolicy | None = None) -> Callable[..., httpx.Response]:
    policy = policy if policy is not None else BackoffPolicy()

    def fetch(
        url: str,
        options: RequestOptions | Mapping[str, object] | None = None,
        *,
        client: httpx.Client | None = None,
    ) -> httpx.Response:
        return fetch_with_retry_sync(url, options, policy, client=client)

    return fetch
