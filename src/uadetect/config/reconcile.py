"""Reconciliation run settings."""

from __future__ import annotations

from dataclasses import dataclass

from uadetect.domain.drain import DEFAULT_MAX_BATCH_SIZE

from .env import env_int


@dataclass(frozen=True, slots=True)
class ReconcileConfig:
    max_batch_size: int = DEFAULT_MAX_BATCH_SIZE


def get_reconcile_config(*, max_batch_size: int | None = None) -> ReconcileConfig:
    size = max_batch_size or env_int("UADETECT_MAX_BATCH_SIZE", DEFAULT_MAX_BATCH_SIZE)
    return ReconcileConfig(max_batch_size=size)
