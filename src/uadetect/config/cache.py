"""Cache node (memcached) configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .env import env_float, optional_env_var
from .errors import ConfigurationError, MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence

DEFAULT_MEMCACHED_PORT = 11211
CACHE_TIMEOUT_SECONDS = 2.0


@dataclass(frozen=True, slots=True)
class CacheNodeConfig:
    host: str
    port: int = DEFAULT_MEMCACHED_PORT
    connect_timeout_seconds: float = CACHE_TIMEOUT_SECONDS
    timeout_seconds: float = CACHE_TIMEOUT_SECONDS

    @property
    def name(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{host}:{self.port}"


@dataclass(frozen=True, slots=True)
class CacheConfig:
    nodes: tuple[CacheNodeConfig, ...]


def parse_node_address(
    address: str,
    *,
    timeout_seconds: float = CACHE_TIMEOUT_SECONDS,
) -> CacheNodeConfig:
    """Parse ``host``, ``host:port`` or ``[ipv6]:port`` into a node configuration."""

    value = address.strip()
    if not value:
        raise ConfigurationError("Empty cache node address")

    port_text: str | None = None
    if value.startswith("["):
        host, sep, rest = value[1:].partition("]")
        if not sep or not host:
            raise ConfigurationError(f"Invalid cache node address: {address!r}")
        if rest:
            if not rest.startswith(":"):
                raise ConfigurationError(f"Invalid cache node address: {address!r}")
            port_text = rest[1:]
    elif value.count(":") == 1:
        host, port_text = value.split(":")
    else:
        host = value

    port = DEFAULT_MEMCACHED_PORT
    if port_text is not None:
        try:
            port = int(port_text)
        except ValueError as exc:
            raise ConfigurationError(f"Invalid port in cache node address: {address!r}") from exc
        if not 0 < port < 65536:
            raise ConfigurationError(f"Port out of range in cache node address: {address!r}")

    if not host:
        raise ConfigurationError(f"Missing host in cache node address: {address!r}")

    return CacheNodeConfig(
        host=host,
        port=port,
        connect_timeout_seconds=timeout_seconds,
        timeout_seconds=timeout_seconds,
    )


def get_cache_config(
    addresses: Sequence[str] | None = None,
    *,
    timeout_seconds: float | None = None,
) -> CacheConfig:
    """Resolve node addresses from arguments, falling back to ``UADETECT_NODES``."""

    effective = list(addresses or ())
    if not effective:
        raw = optional_env_var("UADETECT_NODES")
        if raw is None:
            raise MissingConfigurationError(["UADETECT_NODES"])
        effective = [part for part in raw.split(",") if part.strip()]

    timeout = timeout_seconds or env_float("UADETECT_CACHE_TIMEOUT_SECONDS", CACHE_TIMEOUT_SECONDS)
    nodes: list[CacheNodeConfig] = []
    seen: set[str] = set()
    for address in effective:
        node = parse_node_address(address, timeout_seconds=timeout)
        if node.name in seen:
            continue
        seen.add(node.name)
        nodes.append(node)

    if not nodes:
        raise MissingConfigurationError(["UADETECT_NODES"])
    return CacheConfig(nodes=tuple(nodes))
