from __future__ import annotations

import pytest

from tests.support.cache_nodes import log_node
from tests.support.lookups import FakePropertyLookup
from uadetect import app as app_module
from uadetect.config import CacheConfig, CacheNodeConfig, ReconcileConfig
from uadetect.domain.types import DeviceProperties, identifier_key

ANDROID = "Mozilla/5.0 (Linux; Android 4.4.2; Nexus 5) Mobile Safari/537.36"


def test_reconcile_with_injected_nodes_and_lookup() -> None:
    node = log_node([ANDROID, ANDROID])
    lookup = FakePropertyLookup({ANDROID: DeviceProperties(mobile_device=True, touch_screen=True)})

    report = app_module.reconcile_unknown_user_agents(
        nodes=[node],
        lookup=lookup,
        reconcile_config=ReconcileConfig(max_batch_size=10),
    )

    assert report.resolved == 1
    assert node.data[f"ua-{identifier_key(ANDROID)}"] == "touch"
    assert node.data["ua-next"] == "3"
    assert node.closed is False


def test_reconcile_closes_nodes_it_connects(monkeypatch: pytest.MonkeyPatch) -> None:
    created = [log_node([ANDROID], name="a:11211"), log_node([], name="b:11211")]
    requested: list[tuple[CacheNodeConfig, ...]] = []

    def fake_connect(configs: tuple[CacheNodeConfig, ...]) -> list[object]:
        requested.append(configs)
        return list(created)

    monkeypatch.setattr(app_module, "connect_nodes", fake_connect)
    cache_config = CacheConfig(nodes=(CacheNodeConfig(host="a"), CacheNodeConfig(host="b")))

    report = app_module.reconcile_unknown_user_agents(
        lookup=FakePropertyLookup(),
        cache_config=cache_config,
        reconcile_config=ReconcileConfig(),
    )

    assert requested == [cache_config.nodes]
    assert all(node.closed for node in created)
    assert [node_report.node for node_report in report.nodes] == ["a:11211", "b:11211"]
    assert report.unique_identifiers == 1


def test_reconcile_closes_nodes_when_lookup_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    node = log_node([ANDROID])

    class ExplodingLookup(FakePropertyLookup):
        def lookup_many(self, _identifiers: object) -> list[object]:
            raise RuntimeError("lookup crashed")

    monkeypatch.setattr(app_module, "connect_nodes", lambda _configs: [node])

    with pytest.raises(RuntimeError, match="lookup crashed"):
        app_module.reconcile_unknown_user_agents(
            lookup=ExplodingLookup(),
            cache_config=CacheConfig(nodes=(CacheNodeConfig(host="a"),)),
            reconcile_config=ReconcileConfig(),
        )

    assert node.closed is True
    assert node.data["ua-1"] == ANDROID
    assert "ua-next" not in node.data
