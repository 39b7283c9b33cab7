"""Rate limit handling utilities for explanation providers."""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class RateLimitBackoff:
    """Backoff strategy configuration for rate limit retries."""

    max_retries: int = 3
    min_delay_seconds: float = 1.0
    max_delay_seconds: float = 10.0
    jitter_ratio: float = 0.15

    def __post_init__(self) -> None:
        if self.max_retries <= 0:
            raise ValueError("max_retries must be greater than zero.")
        if self.min_delay_seconds <= 0:
            raise ValueError("min_delay_seconds must be greater than zero.")
        if self.max_delay_seconds < self.min_delay_seconds:
            raise ValueError("max_delay_seconds must be >= min_delay_seconds.")

    def next_delay(self, *, attempt: int, retry_after: float | None) -> float:
        """Return delay in seconds for given attempt and optional retry-after."""
        base: float = self.min_delay_seconds * (2 ** (attempt - 1))
        bounded: float = min(base, self.max_delay_seconds)
        if retry_after is not None:
            bounded = max(bounded, retry_after)
        jitter: float = bounded * self.jitter_ratio
        if jitter <= 0:
            return bounded
        random_fraction: float = float(secrets.randbelow(10_000)) / 10_000
        return bounded + (jitter * random_fraction)


def retry_after_seconds(error: Any) -> float | None:
    """Read a numeric Retry-After header from a provider error when present."""
    response = getattr(error, "response", None)
    headers = getattr(response, "headers", None) if response is not None else None
    if not headers:
        return None
    value = headers.get("retry-after") or headers.get("Retry-After")
    if not value:
        return None
    try:
        return max(0.0, float(str(value).strip()))
    except ValueError:
        return None
