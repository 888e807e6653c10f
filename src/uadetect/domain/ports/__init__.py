"""Domain port definitions for adapters."""

from __future__ import annotations

from .cache import CacheNode, CacheNodeError
from .classification import ClassificationFailure, FailureKind, LookupOutcome, PropertyLookup

__all__ = [
    "CacheNode",
    "CacheNodeError",
    "ClassificationFailure",
    "FailureKind",
    "LookupOutcome",
    "PropertyLookup",
]
