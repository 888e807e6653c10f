"""Memcached cache node adapter."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from pymemcache.client.base import Client
from pymemcache.exceptions import MemcacheError

from uadetect.domain.ports.cache import CacheNodeError

if TYPE_CHECKING:
    from collections.abc import Callable

    from uadetect.config.cache import CacheNodeConfig

log = getLogger(__name__)


class MemcacheClient(Protocol):
    """The slice of ``pymemcache.client.base.Client`` this adapter uses."""

    def get(self, key: str, default: bytes | None = None) -> bytes | None: ...

    def set(self, key: str, value: str, expire: int = 0, noreply: bool | None = None) -> bool: ...

    def delete(self, key: str, noreply: bool | None = None) -> bool: ...

    def close(self) -> None: ...


def _default_client_factory(config: CacheNodeConfig) -> MemcacheClient:
    return Client(
        (config.host, config.port),
        connect_timeout=config.connect_timeout_seconds,
        timeout=config.timeout_seconds,
        no_delay=True,
        default_noreply=False,
        encoding="utf-8",
    )


class MemcachedNode:
    """One memcached server, addressed independently of all others.

    Values are returned as text; bytes that are not valid UTF-8 survive via
    ``surrogateescape`` so their content hash matches the raw header.
    """

    def __init__(
        self,
        config: CacheNodeConfig,
        *,
        client_factory: Callable[[CacheNodeConfig], MemcacheClient] | None = None,
    ) -> None:
        self._config = config
        self._client = (client_factory or _default_client_factory)(config)

    @property
    def name(self) -> str:
        return self._config.name

    def get(self, key: str) -> str | None:
        try:
            value = self._client.get(key)
        except (MemcacheError, OSError) as exc:
            raise CacheNodeError(self.name, f"get {key} failed: {exc!r}") from exc
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="surrogateescape")
        return str(value)

    def set(self, key: str, value: str) -> None:
        try:
            stored = self._client.set(key, value, noreply=False)
        except (MemcacheError, OSError) as exc:
            raise CacheNodeError(self.name, f"set {key} failed: {exc!r}") from exc
        if not stored:
            raise CacheNodeError(self.name, f"set {key} was not stored")

    def delete(self, key: str) -> bool:
        try:
            return bool(self._client.delete(key, noreply=False))
        except (MemcacheError, OSError) as exc:
            raise CacheNodeError(self.name, f"delete {key} failed: {exc!r}") from exc

    def close(self) -> None:
        try:
            self._client.close()
        except (MemcacheError, OSError) as exc:
            log.debug("%s: error while closing connection: %r", self.name, exc)


def connect_nodes(
    configs: tuple[CacheNodeConfig, ...],
    *,
    client_factory: Callable[[CacheNodeConfig], MemcacheClient] | None = None,
) -> list[MemcachedNode]:
    """Create one adapter per configured node; connections open lazily."""

    return [MemcachedNode(config, client_factory=client_factory) for config in configs]
