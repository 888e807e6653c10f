"""Port for the key-value cache nodes the edge proxy logs into."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


class CacheNodeError(RuntimeError):
    """Raised by cache adapters when a node cannot be reached or answers garbage."""

    def __init__(self, node: str, message: str) -> None:
        super().__init__(f"{node}: {message}")
        self.node = node


@runtime_checkable
class CacheNode(Protocol):
    """Minimal get/set/delete surface of one independent cache node.

    Implementations raise ``CacheNodeError`` for connection or protocol failures
    and return ``None`` from ``get`` when a key is absent.
    """

    @property
    def name(self) -> str: ...

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> bool: ...

    def close(self) -> None: ...


__all__ = ["CacheNode", "CacheNodeError"]
