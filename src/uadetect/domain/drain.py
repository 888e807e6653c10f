"""Windowed drain of one cache node's unknown User-Agent log.

The edge proxy increments ``ua-idx`` and writes the header to ``ua-<idx>``.
We remember the next sequence number to look at in ``ua-next``. One drain
moves through ``IDLE -> WINDOW_COMPUTED -> FETCHING -> COMPLETED`` and drops to
``ABORTED`` as soon as the node fails to answer; an aborted node keeps its
cursor and entries for the next run.

Per node the order is strict: read entries, delete them, then advance the
cursor. Deletion and cursor writes are best-effort.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from .keys import DEFAULT_KEYS, CacheKeys
from .ports.cache import CacheNodeError
from .types import Cursor, LogEntry

if TYPE_CHECKING:
    from .ports.cache import CacheNode

log = getLogger(__name__)

DEFAULT_MAX_BATCH_SIZE = 1000


class DrainState(StrEnum):
    IDLE = "idle"
    WINDOW_COMPUTED = "window_computed"
    FETCHING = "fetching"
    COMPLETED = "completed"
    ABORTED = "aborted"


class DrainStateError(RuntimeError):
    """Raised when a drain step is invoked out of order."""


@dataclass(frozen=True, slots=True)
class DrainWindow:
    """Half-open range ``[start, stop)`` of sequence numbers to scan."""

    start: int
    stop: int
    last_seen_index: int
    requested_start: int
    truncated: bool = False
    clamped: bool = False

    @property
    def size(self) -> int:
        return max(0, self.stop - self.start)

    @property
    def is_empty(self) -> bool:
        return self.size == 0

    @property
    def next_cursor(self) -> int | None:
        """Cursor to persist once the window has been consumed."""

        if self.last_seen_index <= 0:
            return None
        return self.last_seen_index + 1

    def sequence_numbers(self) -> range:
        return range(self.start, self.stop)


def compute_window(
    last_seen_index: int | None,
    next_to_process: int | None,
    max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
) -> DrainWindow:
    """Compute the scan window for a node from its producer index and our cursor.

    * no index (or zero) means nothing was ever logged: empty window, no cursor
    * a missing or non-positive cursor starts at 1
    * a cursor beyond ``last_seen_index + 1`` is corrupt and clamped so the
      window is empty and the cursor gets rewritten on completion
    * backlogs wider than ``max_batch_size`` keep only the newest entries
    """

    if max_batch_size < 1:
        raise ValueError("max_batch_size must be positive")

    last = last_seen_index if last_seen_index and last_seen_index > 0 else 0
    requested = next_to_process if next_to_process and next_to_process > 0 else 1
    if last == 0:
        return DrainWindow(start=1, stop=1, last_seen_index=0, requested_start=requested)

    start = requested
    clamped = False
    if start > last + 1:
        start = last + 1
        clamped = True

    truncated = False
    if last - start + 1 > max_batch_size:
        start = last - max_batch_size + 1
        truncated = True

    return DrainWindow(
        start=start,
        stop=last + 1,
        last_seen_index=last,
        requested_start=requested,
        truncated=truncated,
        clamped=clamped,
    )


@dataclass(frozen=True, slots=True)
class DrainBatch:
    """Entries read from one node and the sequence numbers queued for deletion."""

    node: str
    window: DrainWindow
    entries: tuple[LogEntry, ...]
    pending_deletion: tuple[int, ...]

    @property
    def scanned(self) -> int:
        return len(self.pending_deletion)


@dataclass(frozen=True, slots=True)
class DrainCompletion:
    node: str
    keys_deleted: int
    delete_failures: int
    cursor_advanced: bool
    next_cursor: int | None


class LogDrainer:
    """Drive one node through a single drain cycle."""

    def __init__(
        self,
        node: CacheNode,
        *,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
        keys: CacheKeys = DEFAULT_KEYS,
    ) -> None:
        if max_batch_size < 1:
            raise ValueError("max_batch_size must be positive")
        self.node = node
        self.max_batch_size = max_batch_size
        self.keys = keys
        self.state = DrainState.IDLE
        self.window: DrainWindow | None = None
        self.error: CacheNodeError | None = None
        self._stored_cursor: int | None = None
        self._entries: list[LogEntry] = []
        self._pending_deletion: list[int] = []

    @property
    def name(self) -> str:
        return self.node.name

    @property
    def pending_deletion(self) -> tuple[int, ...]:
        return tuple(self._pending_deletion)

    def read_cursor(self) -> Cursor:
        """Read ``ua-idx`` and ``ua-next`` from the node."""

        last_seen = self._read_int(self.keys.index)
        self._stored_cursor = self._read_int(self.keys.cursor)
        return Cursor(
            last_seen_index=last_seen or 0,
            next_to_process=self._stored_cursor or 1,
        )

    def compute_window(self) -> DrainWindow:
        self._require(DrainState.IDLE)
        try:
            cursor = self.read_cursor()
        except CacheNodeError as exc:
            self.abort(exc)
            raise

        window = compute_window(
            cursor.last_seen_index,
            cursor.next_to_process,
            self.max_batch_size,
        )
        self.window = window

        if window.clamped:
            log.warning(
                "%s: cursor %s is beyond index %s, clamping",
                self.name,
                window.requested_start,
                window.last_seen_index,
            )
        if window.truncated:
            backlog = window.last_seen_index - window.requested_start + 1
            log.warning(
                "%s: only considering the last %s entries, range %s..%s is too large (%s)",
                self.name,
                self.max_batch_size,
                window.requested_start,
                window.last_seen_index,
                backlog,
            )

        if window.last_seen_index == 0:
            log.info("%s: no unknown User-Agents logged yet", self.name)
            self.state = DrainState.COMPLETED
        else:
            self.state = DrainState.WINDOW_COMPUTED
        return window

    def fetch(self) -> DrainBatch:
        """Read every entry in the window and queue all visited keys for deletion."""

        if self.state is DrainState.COMPLETED and self.window is not None:
            return self._batch()
        self._require(DrainState.WINDOW_COMPUTED)
        window = self._require_window()

        self.state = DrainState.FETCHING
        if window.is_empty:
            log.info("%s: nothing new since entry %s", self.name, window.last_seen_index)
            return self._batch()

        log.info("%s: downloading entries %s to %s", self.name, window.start, window.stop - 1)
        for sequence_number in window.sequence_numbers():
            try:
                value = self.node.get(self.keys.entry(sequence_number))
            except CacheNodeError as exc:
                self.abort(exc)
                raise
            self._pending_deletion.append(sequence_number)
            if value:
                self._entries.append(LogEntry(sequence_number=sequence_number, identifier=value))

        return self._batch()

    def drain(self) -> DrainBatch:
        """Compute the window and fetch it in one go."""

        self.compute_window()
        return self.fetch()

    def complete(self) -> DrainCompletion:
        """Delete consumed entries, then persist the new cursor."""

        if self.state is DrainState.COMPLETED:
            return DrainCompletion(
                node=self.name,
                keys_deleted=0,
                delete_failures=0,
                cursor_advanced=False,
                next_cursor=None,
            )
        self._require(DrainState.FETCHING)
        window = self._require_window()

        deleted = 0
        failures = 0
        if self._pending_deletion:
            log.info("%s: deleting %s keys", self.name, len(self._pending_deletion))
        for sequence_number in self._pending_deletion:
            key = self.keys.entry(sequence_number)
            try:
                self.node.delete(key)
            except CacheNodeError as exc:
                failures += 1
                log.warning("%s: failed to delete %s: %s", self.name, key, exc)
                continue
            deleted += 1

        advanced = False
        next_cursor = window.next_cursor
        if next_cursor is not None and next_cursor != self._stored_cursor:
            log.info("%s: updating %s to %s", self.name, self.keys.cursor, next_cursor)
            try:
                self.node.set(self.keys.cursor, str(next_cursor))
            except CacheNodeError as exc:
                log.warning("%s: failed to update %s: %s", self.name, self.keys.cursor, exc)
            else:
                advanced = True

        self._pending_deletion.clear()
        self.state = DrainState.COMPLETED
        return DrainCompletion(
            node=self.name,
            keys_deleted=deleted,
            delete_failures=failures,
            cursor_advanced=advanced,
            next_cursor=next_cursor,
        )

    def abort(self, error: CacheNodeError) -> None:
        """Give up on this node for the run, leaving its cursor untouched."""

        log.warning("%s: excluded from this run: %s", self.name, error)
        self.error = error
        self.state = DrainState.ABORTED

    def _batch(self) -> DrainBatch:
        return DrainBatch(
            node=self.name,
            window=self._require_window(),
            entries=tuple(self._entries),
            pending_deletion=tuple(self._pending_deletion),
        )

    def _require(self, expected: DrainState) -> None:
        if self.state is not expected:
            raise DrainStateError(
                f"{self.name}: expected drain state {expected}, found {self.state}"
            )

    def _require_window(self) -> DrainWindow:
        if self.window is None:
            raise DrainStateError(f"{self.name}: window has not been computed")
        return self.window

    def _read_int(self, key: str) -> int | None:
        raw = self.node.get(key)
        if raw is None or not raw.strip():
            return None
        try:
            return int(raw.strip())
        except ValueError:
            log.warning("%s: ignoring non-integer value %r for %s", self.name, raw, key)
            return None


__all__ = [
    "DEFAULT_MAX_BATCH_SIZE",
    "DrainBatch",
    "DrainCompletion",
    "DrainState",
    "DrainStateError",
    "DrainWindow",
    "LogDrainer",
    "compute_window",
]
