from __future__ import annotations

import pytest

_CONFIG_ENV_VARS = (
    "DEVICEATLAS_LICENCE_KEY",
    "DEVICEATLAS_SERVER",
    "DEVICEATLAS_TIMEOUT_SECONDS",
    "DEVICEATLAS_RATE_LIMIT",
    "UADETECT_MAX_CONCURRENCY",
    "UADETECT_NODES",
    "UADETECT_MAX_BATCH_SIZE",
    "UADETECT_CACHE_TIMEOUT_SECONDS",
)


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
