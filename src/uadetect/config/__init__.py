"""Application configuration helpers."""

from __future__ import annotations

from .cache import (
    DEFAULT_MEMCACHED_PORT,
    CacheConfig,
    CacheNodeConfig,
    get_cache_config,
    parse_node_address,
)
from .deviceatlas import (
    DEFAULT_DEVICEATLAS_SERVER,
    DeviceAtlasConfig,
    deviceatlas_resilience,
    get_deviceatlas_config,
)
from .env import (
    env_float,
    env_int,
    optional_env_float,
    optional_env_var,
    require_env_var,
    require_env_vars,
)
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig
from uadetect.common.logging import configure_logging
from .reconcile import DEFAULT_MAX_BATCH_SIZE, ReconcileConfig, get_reconcile_config

__all__ = [
    "DEFAULT_DEVICEATLAS_SERVER",
    "DEFAULT_MAX_BATCH_SIZE",
    "DEFAULT_MEMCACHED_PORT",
    "CacheConfig",
    "CacheNodeConfig",
    "ConfigurationError",
    "DeviceAtlasConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ReconcileConfig",
    "ResilienceConfig",
    "configure_logging",
    "deviceatlas_resilience",
    "env_float",
    "env_int",
    "get_cache_config",
    "get_deviceatlas_config",
    "get_reconcile_config",
    "optional_env_float",
    "optional_env_var",
    "parse_node_address",
    "require_env_var",
    "require_env_vars",
]
