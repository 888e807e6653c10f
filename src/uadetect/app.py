"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from uadetect.adapters.deviceatlas import DeviceAtlasClient
from uadetect.adapters.memcached import connect_nodes
from uadetect.config import get_cache_config, get_deviceatlas_config, get_reconcile_config
from uadetect.domain.reconciliation import ReconciliationCoordinator, RunReport

if TYPE_CHECKING:
    from collections.abc import Sequence

    from uadetect.config import CacheConfig, DeviceAtlasConfig, ReconcileConfig
    from uadetect.domain.ports import CacheNode, PropertyLookup


log = getLogger(__name__)


def reconcile_unknown_user_agents(
    *,
    nodes: Sequence[CacheNode] | None = None,
    lookup: PropertyLookup | None = None,
    cache_config: CacheConfig | None = None,
    deviceatlas_config: DeviceAtlasConfig | None = None,
    reconcile_config: ReconcileConfig | None = None,
) -> RunReport:
    """Drain, classify and republish unknown User-Agents once across all nodes."""

    settings = reconcile_config or get_reconcile_config()
    effective_lookup = lookup or DeviceAtlasClient(
        config=deviceatlas_config or get_deviceatlas_config()
    )
    owned_nodes: list[CacheNode] = []
    if nodes is None:
        owned_nodes = list(connect_nodes((cache_config or get_cache_config()).nodes))
    effective_nodes = list(nodes) if nodes is not None else owned_nodes

    log.info(
        "Starting reconciliation: nodes=%s, max_batch_size=%s",
        ", ".join(node.name for node in effective_nodes),
        settings.max_batch_size,
    )

    coordinator = ReconciliationCoordinator(
        lookup=effective_lookup,
        max_batch_size=settings.max_batch_size,
    )
    try:
        report = coordinator.run_once(effective_nodes)
    finally:
        for node in owned_nodes:
            node.close()

    log.info(
        "Finished reconciliation: scanned=%s, unique=%s, resolved=%s, failed=%s, unreachable=%s",
        report.entries_scanned,
        report.unique_identifiers,
        report.resolved,
        report.failed,
        report.unreachable_nodes or "none",
    )
    for node_report in report.nodes:
        if not node_report.reachable:
            continue
        log.info(
            "%s: deleted=%s, delete_failures=%s, cursor_advanced=%s, next=%s",
            node_report.node,
            node_report.keys_deleted,
            node_report.delete_failures,
            node_report.cursor_advanced,
            node_report.next_cursor,
        )

    return report
