"""Value types shared by the drain, classification and publication stages."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from enum import StrEnum

type IdentifierKey = str


class DeviceType(StrEnum):
    DESKTOP = "desktop"
    MOBILE = "mobile"
    TOUCH = "touch"
    TABLET = "tablet"


def identifier_key(identifier: str) -> IdentifierKey:
    """Return the content hash used to deduplicate and publish ``identifier``.

    The digest is the MD5 hex of the raw header bytes, which is what the edge
    proxy looks up. Strings decoded with ``surrogateescape`` hash to the same
    digest as the original bytes.
    """

    raw = identifier.encode("utf-8", errors="surrogateescape")
    return hashlib.md5(raw, usedforsecurity=False).hexdigest()


@dataclass(frozen=True, slots=True)
class LogEntry:
    """One unknown User-Agent observation written by the edge proxy."""

    sequence_number: int
    identifier: str

    @property
    def key(self) -> IdentifierKey:
        return identifier_key(self.identifier)


@dataclass(frozen=True, slots=True)
class Cursor:
    """Per-node log position: producer index plus our next sequence number."""

    last_seen_index: int
    next_to_process: int = 1


@dataclass(frozen=True, slots=True)
class DeviceProperties:
    """Subset of the classification service's property bag we act on.

    Absent flags are ``False``; absence is never an error.
    """

    mobile_device: bool = False
    touch_screen: bool = False
    is_tablet: bool = False
    is_robot: bool = False


@dataclass(frozen=True, slots=True)
class ClassificationResult:
    key: IdentifierKey
    identifier: str
    device_type: DeviceType


__all__ = [
    "ClassificationResult",
    "Cursor",
    "DeviceProperties",
    "DeviceType",
    "IdentifierKey",
    "LogEntry",
    "identifier_key",
]
