"""Backoff policy: retry eligibility and inter-attempt delay.

A BackoffPolicy is immutable and stateless, so one instance can be shared by
any number of concurrent requests.

Optimizations:
- Frozen for immutability and hashability
- Backoff scheduler built once per policy
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    PositiveFloat,
    PrivateAttr,
    computed_field,
    field_serializer,
    field_validator,
)

from .backoff import ExponentialBackoff
from .outcome import HttpStatus, Outcome, TransportFailure

if TYPE_CHECKING:
    from fetchkit.config import RetrySettings


# Transient HTTP statuses: timeout, rate limit, gateway/server hiccups
DEFAULT_RETRYABLE_STATUS: frozenset[int] = frozenset({408, 429, 500, 502, 503, 504})

DEFAULT_RETRYABLE_ERRORS: frozenset[str] = frozenset({"ECONNREFUSED", "ENOTFOUND", "ETIMEDOUT"})


class BackoffPolicy(BaseModel):
    """Decides whether a failed attempt is retried and how long to wait.

    Attributes:
        max_retries: Retries after the first attempt (total attempts = max_retries + 1)
        initial_delay_ms: Delay after the first failed attempt
        max_delay_ms: Upper bound on the delay before jitter
        backoff_multiplier: Exponential growth factor
        jitter_fraction: Fraction of the capped delay used as symmetric jitter
        retryable_status_codes: HTTP statuses eligible for retry
        retryable_errors: Substrings marking a transport failure as retryable

    Example:
        >>> policy = BackoffPolicy(max_retries=2, jitter_fraction=0)
        >>> policy.should_retry(HttpStatus(503), attempt=0)
        True
        >>> policy.should_retry(HttpStatus(404), attempt=0)
        False
        >>> policy.calculate_delay(1)
        2000
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        revalidate_instances="never",
        json_schema_extra={
            "title": "Backoff Policy",
            "description": "Retry-with-backoff configuration for outbound HTTP calls",
            "examples": [{
                "max_retries": 3,
                "initial_delay_ms": 1000,
                "retryable_status_codes": [429, 503],
            }],
        },
    )

    max_retries: NonNegativeInt = 3
    initial_delay_ms: NonNegativeInt = 1000
    max_delay_ms: NonNegativeInt = 30000
    backoff_multiplier: PositiveFloat = 2.0
    jitter_fraction: Annotated[float, Field(ge=0.0, le=1.0)] = 0.1
    retryable_status_codes: frozenset[int] = DEFAULT_RETRYABLE_STATUS
    retryable_errors: frozenset[str] = DEFAULT_RETRYABLE_ERRORS

    _backoff: ExponentialBackoff = PrivateAttr()

    @field_validator("retryable_status_codes", "retryable_errors", mode="before")
    @classmethod
    def _normalize_sets(cls, v: object) -> object:
        """Accept any iterable (list from env/JSON, set, tuple)."""
        if isinstance(v, (frozenset, str)) or v is None:
            return v
        return frozenset(v)  # type: ignore[arg-type]

    @field_serializer("retryable_status_codes", "retryable_errors")
    def _serialize_sets(self, v: frozenset[int] | frozenset[str]) -> list[int] | list[str]:
        return sorted(v)  # type: ignore[return-value]

    @computed_field
    @property
    def max_attempts(self) -> int:
        """Total physical attempts including the first one."""
        return self.max_retries + 1

    def model_post_init(self, __context: object) -> None:
        self._backoff = ExponentialBackoff(
            initial_delay_ms=self.initial_delay_ms,
            max_delay_ms=self.max_delay_ms,
            multiplier=self.backoff_multiplier,
            jitter_fraction=self.jitter_fraction,
        )

    @property
    def backoff(self) -> ExponentialBackoff:
        """Delay scheduler derived from this policy's timing fields."""
        return self._backoff

    # ─────────────────────────────────────────────────────────────────
    # Decisions
    # ─────────────────────────────────────────────────────────────────

    def should_retry(self, outcome: Outcome, attempt: int) -> bool:
        """Determine if the attempt that just completed should be retried.

        The budget check runs first, so the final permitted attempt is never
        retried whatever its classification.

        Args:
            outcome: Result of the attempt
            attempt: 0-indexed attempt that just completed

        Returns:
            True if another attempt should be made
        """
        if attempt >= self.max_retries:
            return False

        match outcome:
            case TransportFailure():
                source = outcome.marker_source
                return any(marker in source for marker in self.retryable_errors)
            case HttpStatus(status=status):
                return status in self.retryable_status_codes
            case _:
                return False

    def should_retry_status(self, status: int, attempt: int) -> bool:
        return self.should_retry(HttpStatus(status), attempt)

    def should_retry_error(self, exc: BaseException, attempt: int) -> bool:
        return self.should_retry(TransportFailure.from_exception(exc), attempt)

    def calculate_delay(self, attempt: int) -> int:
        """Milliseconds to wait after the given (0-indexed) attempt failed."""
        return self.backoff.delay_ms(attempt)

    # ─────────────────────────────────────────────────────────────────
    # Introspection
    # ─────────────────────────────────────────────────────────────────

    def get_config(self) -> dict[str, object]:
        """Snapshot of the configuration; safe for callers to mutate."""
        return {
            "max_retries": self.max_retries,
            "initial_delay_ms": self.initial_delay_ms,
            "max_delay_ms": self.max_delay_ms,
            "backoff_multiplier": self.backoff_multiplier,
            "jitter_fraction": self.jitter_fraction,
            "retryable_status_codes": sorted(self.retryable_status_codes),
            "retryable_errors": sorted(self.retryable_errors),
        }

    @classmethod
    def from_settings(cls, settings: RetrySettings | None = None) -> BackoffPolicy:
        """Build a policy from environment configuration.

        Example:
            >>> # FETCHKIT_RETRY_MAX_RETRIES=5
            >>> policy = BackoffPolicy.from_settings()
        """
        if settings is None:
            from fetchkit.config import get_settings
            settings = get_settings().retry
        return cls(**settings.model_dump())

    def __hash__(self) -> int:
        return hash((
            self.max_retries, self.initial_delay_ms, self.max_delay_ms, self.backoff_multiplier,
            self.jitter_fraction, self.retryable_status_codes, self.retryable_errors,
        ))


# Singleton for single-attempt behaviour
NO_RETRY = BackoffPolicy(max_retries=0)
