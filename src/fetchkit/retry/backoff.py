"""Backoff delay scheduling for retry policies.

Delays are integer milliseconds. Attempt numbers are 0-indexed and count
attempts already made (the delay before the second attempt uses attempt 0).
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class Backoff(Protocol):
    """Protocol for backoff delay calculation."""

    def delay_ms(self, attempt: int) -> int:
        """Calculate delay in milliseconds after the given attempt.

        Args:
            attempt: 0-indexed number of the attempt that just failed

        Returns:
            Non-negative delay in milliseconds
        """
        ...


@dataclass(frozen=True, slots=True)
class ExponentialBackoff:
    """Capped exponential backoff with symmetric proportional jitter.

    capped = min(initial * multiplier ^ attempt, max_delay)
    delay  = max(0, floor(capped + U(-1, 1) * capped * jitter_fraction))

    Attributes:
        initial_delay_ms: Delay after the first failure (default: 1000)
        max_delay_ms: Cap applied before jitter (default: 30000)
        multiplier: Exponential growth factor (default: 2.0)
        jitter_fraction: Jitter amplitude as a fraction of the capped delay (default: 0.1)
    """

    initial_delay_ms: int = 1000
    max_delay_ms: int = 30000
    multiplier: float = 2.0
    jitter_fraction: float = 0.1

    def capped_ms(self, attempt: int) -> float:
        """Deterministic part of the delay (no jitter)."""
        try:
            exponential = self.initial_delay_ms * (self.multiplier ** attempt)
        except OverflowError:
            return 0.0 if self.initial_delay_ms == 0 else self.max_delay_ms
        return min(exponential, self.max_delay_ms)

    def delay_ms(self, attempt: int) -> int:
        capped = self.capped_ms(attempt)
        amplitude = capped * self.jitter_fraction
        jitter = (random.random() - 0.5) * 2 * amplitude
        return max(0, math.floor(capped + jitter))
