"""Reconcile unknown User-Agent logs across all cache nodes.

One run drains every reachable node, classifies each distinct header once,
publishes every result to every reachable node and then lets each node's
drainer delete its consumed entries and advance its own cursor. Nodes never
share cursors; they only share published results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from .device_type import DEFAULT_RULES, DeviceTypeRule, classify_device_type
from .drain import DEFAULT_MAX_BATCH_SIZE, LogDrainer
from .keys import DEFAULT_KEYS, CacheKeys
from .ports.cache import CacheNodeError
from .ports.classification import ClassificationFailure
from .types import ClassificationResult, DeviceType, IdentifierKey

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from .drain import DrainBatch, DrainWindow
    from .ports.cache import CacheNode
    from .ports.classification import PropertyLookup

log = getLogger(__name__)


@dataclass(slots=True)
class NodeReport:
    """What happened on one node during a run."""

    node: str
    reachable: bool = True
    window: DrainWindow | None = None
    entries_scanned: int = 0
    identifiers_found: int = 0
    published: int = 0
    publish_failed: bool = False
    keys_deleted: int = 0
    delete_failures: int = 0
    cursor_advanced: bool = False
    next_cursor: int | None = None
    error: str | None = None


@dataclass(slots=True)
class RunReport:
    """Outcome of one reconciliation run, for logging and monitoring only."""

    nodes: list[NodeReport] = field(default_factory=list["NodeReport"])
    unique_identifiers: int = 0
    results: dict[IdentifierKey, ClassificationResult] = field(
        default_factory=dict["IdentifierKey", "ClassificationResult"]
    )
    failures: dict[IdentifierKey, ClassificationFailure] = field(
        default_factory=dict["IdentifierKey", "ClassificationFailure"]
    )

    @property
    def entries_scanned(self) -> int:
        return sum(node.entries_scanned for node in self.nodes)

    @property
    def resolved(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def unreachable_nodes(self) -> list[str]:
        return [node.node for node in self.nodes if not node.reachable]

    def device_types(self) -> dict[IdentifierKey, DeviceType]:
        return {key: result.device_type for key, result in self.results.items()}


def merge_identifiers(batches: Iterable[DrainBatch]) -> dict[IdentifierKey, str]:
    """Collapse identifiers from all nodes by content hash; first seen wins."""

    merged: dict[IdentifierKey, str] = {}
    for batch in batches:
        for entry in batch.entries:
            merged.setdefault(entry.key, entry.identifier)
    return merged


@dataclass(slots=True)
class ReconciliationCoordinator:
    """Run the drain, classify, publish and complete stages over a set of nodes."""

    lookup: PropertyLookup
    max_batch_size: int = DEFAULT_MAX_BATCH_SIZE
    keys: CacheKeys = DEFAULT_KEYS
    rules: tuple[DeviceTypeRule, ...] = DEFAULT_RULES

    def run_once(self, nodes: Sequence[CacheNode]) -> RunReport:
        report = RunReport()
        drainers: list[tuple[LogDrainer, NodeReport]] = []
        batches: list[DrainBatch] = []

        for node in nodes:
            drainer = LogDrainer(node, max_batch_size=self.max_batch_size, keys=self.keys)
            node_report = NodeReport(node=drainer.name)
            report.nodes.append(node_report)
            try:
                batch = drainer.drain()
            except CacheNodeError as exc:
                node_report.reachable = False
                node_report.error = str(exc)
                continue
            node_report.window = batch.window
            node_report.entries_scanned = batch.scanned
            node_report.identifiers_found = len(batch.entries)
            drainers.append((drainer, node_report))
            batches.append(batch)

        pending = merge_identifiers(batches)
        report.unique_identifiers = len(pending)
        self._classify(pending, report)

        for drainer, node_report in drainers:
            self._publish(drainer, node_report, report.results)
            if node_report.publish_failed:
                continue
            completion = drainer.complete()
            node_report.keys_deleted = completion.keys_deleted
            node_report.delete_failures = completion.delete_failures
            node_report.cursor_advanced = completion.cursor_advanced
            node_report.next_cursor = completion.next_cursor

        return report

    def _classify(self, pending: Mapping[IdentifierKey, str], report: RunReport) -> None:
        if not pending:
            log.info("No previously unknown User-Agent strings to resolve")
            return

        log.info("Resolving %s previously unknown User-Agent strings", len(pending))
        outcomes = self.lookup.lookup_many(list(pending.values()))
        for (key, identifier), outcome in zip(pending.items(), outcomes, strict=True):
            if isinstance(outcome, ClassificationFailure):
                log.warning("Failed to resolve %s (%s): %s", key, identifier, outcome)
                report.failures[key] = outcome
                continue
            device_type = classify_device_type(outcome, identifier, rules=self.rules)
            log.debug("[%s] %s -> %s", key, identifier, device_type)
            report.results[key] = ClassificationResult(
                key=key,
                identifier=identifier,
                device_type=device_type,
            )

    def _publish(
        self,
        drainer: LogDrainer,
        node_report: NodeReport,
        results: Mapping[IdentifierKey, ClassificationResult],
    ) -> None:
        node = drainer.node
        for key, result in results.items():
            try:
                node.set(self.keys.result(key), result.device_type.value)
            except CacheNodeError as exc:
                node_report.publish_failed = True
                node_report.error = str(exc)
                drainer.abort(exc)
                return
            node_report.published += 1
        if results:
            log.info("%s: published %s device types", drainer.name, node_report.published)


__all__ = [
    "NodeReport",
    "ReconciliationCoordinator",
    "RunReport",
    "merge_identifiers",
]
