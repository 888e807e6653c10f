"""Fake classification lookups."""

from __future__ import annotations

from typing import TYPE_CHECKING

from uadetect.domain.types import DeviceProperties

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from uadetect.domain.ports.classification import LookupOutcome


class FakePropertyLookup:
    """Return canned outcomes per identifier and record every call."""

    def __init__(
        self,
        outcomes: Mapping[str, LookupOutcome] | None = None,
        *,
        default: LookupOutcome | None = None,
    ) -> None:
        self._outcomes = dict(outcomes or {})
        self._default = default if default is not None else DeviceProperties()
        self.calls: list[str] = []
        self.batches: list[list[str]] = []

    def lookup(self, identifier: str) -> LookupOutcome:
        self.calls.append(identifier)
        return self._outcomes.get(identifier, self._default)

    def lookup_many(self, identifiers: Sequence[str]) -> list[LookupOutcome]:
        self.batches.append(list(identifiers))
        return [self.lookup(identifier) for identifier in identifiers]
