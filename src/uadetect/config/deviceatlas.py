"""DeviceAtlas Cloud configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import env_float, env_int, optional_env_float, optional_env_var, require_env_var
from .http_resilience import RateLimit, ResilienceConfig

DEFAULT_DEVICEATLAS_SERVER = "region2.deviceatlascloud.com"
DEVICEATLAS_TIMEOUT_SECONDS = 2.0
DEVICEATLAS_MAX_CONCURRENCY = 4
DEVICEATLAS_USER_AGENT = "opportunistic-device-detection/1.0 (https://github.com/Sydsvenskan)"


@dataclass(frozen=True)
class DeviceAtlasConfig:
    """Holds DeviceAtlas Cloud API configuration values."""

    licence_key: str = field(repr=False)
    resilience: ResilienceConfig


def deviceatlas_resilience(
    *,
    server: str = DEFAULT_DEVICEATLAS_SERVER,
    timeout_seconds: float = DEVICEATLAS_TIMEOUT_SECONDS,
    max_concurrency: int = DEVICEATLAS_MAX_CONCURRENCY,
    ratelimit: RateLimit | None = None,
) -> ResilienceConfig:
    return ResilienceConfig(
        name="deviceatlas",
        base_url=f"https://{server}",
        timeout_seconds=timeout_seconds,
        ratelimit=ratelimit,
        max_concurrency=max_concurrency,
        default_headers={
            "Accept": "application/json",
            "User-Agent": DEVICEATLAS_USER_AGENT,
        },
    )


def get_deviceatlas_config(
    *,
    licence_key: str | None = None,
    server: str | None = None,
    timeout_seconds: float | None = None,
    max_concurrency: int | None = None,
    rate_limit: float | None = None,
) -> DeviceAtlasConfig:
    """Build the DeviceAtlas configuration; explicit arguments win over the environment.

    ``rate_limit`` (or ``DEVICEATLAS_RATE_LIMIT``) is in calls per second; unset
    means only the concurrency cap applies.
    """

    key = licence_key or require_env_var("DEVICEATLAS_LICENCE_KEY")
    calls_per_second = rate_limit or optional_env_float("DEVICEATLAS_RATE_LIMIT")
    resilience = deviceatlas_resilience(
        server=server or optional_env_var("DEVICEATLAS_SERVER") or DEFAULT_DEVICEATLAS_SERVER,
        timeout_seconds=timeout_seconds
        or env_float("DEVICEATLAS_TIMEOUT_SECONDS", DEVICEATLAS_TIMEOUT_SECONDS),
        max_concurrency=max_concurrency
        or env_int("UADETECT_MAX_CONCURRENCY", DEVICEATLAS_MAX_CONCURRENCY),
        ratelimit=RateLimit.per_second(calls_per_second) if calls_per_second else None,
    )
    return DeviceAtlasConfig(licence_key=key, resilience=resilience)
