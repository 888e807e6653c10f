"""Configuration types for resilient HTTP clients."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float

    @classmethod
    def per_second(cls, calls: float) -> RateLimit:
        """Spread ``calls`` evenly over each second, one call at a time."""

        if calls <= 0:
            raise ValueError("calls per second must be positive")
        return cls(max_calls=1, per_seconds=1.0 / calls)


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    ratelimit: RateLimit | None = None
    max_concurrency: int | None = None
    follow_redirects: bool = True
    default_headers: Mapping[str, str] | None = None
