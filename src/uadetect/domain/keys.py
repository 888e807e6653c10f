"""Cache key layout shared with the edge proxy."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .types import IdentifierKey


@dataclass(frozen=True, slots=True)
class CacheKeys:
    """Key names for the log index, our cursor, log entries and results.

    ``ua-idx`` and ``ua-<N>`` belong to the producer; ``ua-next`` and
    ``ua-<md5>`` are written by this system.
    """

    prefix: str = "ua"

    @property
    def index(self) -> str:
        return f"{self.prefix}-idx"

    @property
    def cursor(self) -> str:
        return f"{self.prefix}-next"

    def entry(self, sequence_number: int) -> str:
        return f"{self.prefix}-{sequence_number}"

    def result(self, key: IdentifierKey) -> str:
        return f"{self.prefix}-{key}"


DEFAULT_KEYS = CacheKeys()
