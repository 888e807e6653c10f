"""Port for the external device classification service."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from uadetect.domain.types import DeviceProperties


class FailureKind(StrEnum):
    TRANSPORT = "transport"
    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    INVALID_PAYLOAD = "invalid_payload"


@dataclass(frozen=True, slots=True)
class ClassificationFailure:
    """Typed failure of a single lookup; returned, never raised."""

    kind: FailureKind
    message: str
    status_code: int | None = None

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.kind} ({self.status_code}): {self.message}"
        return f"{self.kind}: {self.message}"


type LookupOutcome = DeviceProperties | ClassificationFailure


@runtime_checkable
class PropertyLookup(Protocol):
    """Resolve User-Agent strings to device properties."""

    def lookup(self, identifier: str) -> LookupOutcome: ...

    def lookup_many(self, identifiers: Sequence[str]) -> list[LookupOutcome]:
        """Return one outcome per identifier, in input order."""
        ...


__all__ = ["ClassificationFailure", "FailureKind", "LookupOutcome", "PropertyLookup"]
