from __future__ import annotations

import logging

import pytest

from tests.support.cache_nodes import InMemoryCacheNode, log_node
from uadetect.domain.drain import (
    DrainState,
    DrainStateError,
    LogDrainer,
    compute_window,
)
from uadetect.domain.ports.cache import CacheNodeError


@pytest.mark.parametrize(
    ("last_seen", "next_to_process"),
    [(5, 6), (5, 7), (5, 1000), (1, 2), (1, 50)],
)
def test_window_is_empty_when_cursor_is_past_index(last_seen: int, next_to_process: int) -> None:
    window = compute_window(last_seen, next_to_process, max_batch_size=10)

    assert window.is_empty
    assert list(window.sequence_numbers()) == []
    assert window.next_cursor == last_seen + 1


def test_window_flags_corrupted_cursor_as_clamped() -> None:
    assert compute_window(5, 6, max_batch_size=10).clamped is False
    assert compute_window(5, 9, max_batch_size=10).clamped is True


@pytest.mark.parametrize(("last_seen", "next_to_process"), [(None, None), (0, 3), (-4, None)])
def test_window_is_empty_without_index(last_seen: int | None, next_to_process: int | None) -> None:
    window = compute_window(last_seen, next_to_process, max_batch_size=10)

    assert window.is_empty
    assert window.next_cursor is None


def test_window_defaults_missing_cursor_to_first_entry() -> None:
    window = compute_window(5, None, max_batch_size=10)

    assert list(window.sequence_numbers()) == [1, 2, 3, 4, 5]
    assert window.truncated is False


def test_window_treats_non_positive_cursor_as_missing() -> None:
    assert compute_window(3, 0, max_batch_size=10).start == 1
    assert compute_window(3, -2, max_batch_size=10).start == 1


@pytest.mark.parametrize(
    ("last_seen", "next_to_process", "max_batch_size"),
    [(2000, 1, 1000), (25, None, 10), (11, 1, 10), (500, 17, 3)],
)
def test_oversized_backlog_keeps_newest_entries(
    last_seen: int,
    next_to_process: int | None,
    max_batch_size: int,
) -> None:
    window = compute_window(last_seen, next_to_process, max_batch_size=max_batch_size)

    numbers = list(window.sequence_numbers())
    assert len(numbers) == max_batch_size
    assert numbers[-1] == last_seen
    assert numbers[0] == last_seen - max_batch_size + 1
    assert window.truncated is True


def test_backlog_of_exactly_batch_size_is_not_truncated() -> None:
    window = compute_window(10, 1, max_batch_size=10)

    assert window.size == 10
    assert window.truncated is False


def test_window_rejects_non_positive_batch_size() -> None:
    with pytest.raises(ValueError, match="max_batch_size"):
        compute_window(5, 1, max_batch_size=0)


def test_drainer_fetches_entries_and_queues_every_visited_key() -> None:
    node = InMemoryCacheNode(
        data={"ua-idx": "4", "ua-1": "first", "ua-2": "", "ua-4": "fourth"},
    )
    drainer = LogDrainer(node, max_batch_size=10)

    batch = drainer.drain()

    assert drainer.state is DrainState.FETCHING
    assert [(entry.sequence_number, entry.identifier) for entry in batch.entries] == [
        (1, "first"),
        (4, "fourth"),
    ]
    assert batch.pending_deletion == (1, 2, 3, 4)
    assert batch.scanned == 4


def test_drainer_completes_by_deleting_then_advancing_cursor() -> None:
    node = log_node(["a", "b", "c"], cursor=2)
    drainer = LogDrainer(node, max_batch_size=10)
    drainer.drain()

    completion = drainer.complete()

    assert drainer.state is DrainState.COMPLETED
    assert node.deletes == ["ua-2", "ua-3"]
    assert node.sets == [("ua-next", "4")]
    assert node.data["ua-1"] == "a"
    assert completion.keys_deleted == 2
    assert completion.cursor_advanced is True
    assert completion.next_cursor == 4


def test_drainer_without_index_completes_immediately() -> None:
    node = InMemoryCacheNode(data={})
    drainer = LogDrainer(node)

    window = drainer.compute_window()
    batch = drainer.fetch()
    completion = drainer.complete()

    assert window.is_empty
    assert drainer.state is DrainState.COMPLETED
    assert batch.entries == ()
    assert completion.cursor_advanced is False
    assert node.sets == []
    assert node.deletes == []


def test_drainer_caught_up_does_not_rewrite_cursor() -> None:
    node = InMemoryCacheNode(data={"ua-idx": "5", "ua-next": "6"})
    drainer = LogDrainer(node)
    drainer.drain()

    completion = drainer.complete()

    assert node.gets == ["ua-idx", "ua-next"]
    assert node.sets == []
    assert completion.cursor_advanced is False
    assert completion.next_cursor == 6


def test_drainer_heals_corrupted_cursor(caplog: pytest.LogCaptureFixture) -> None:
    node = InMemoryCacheNode(data={"ua-idx": "5", "ua-next": "40"})
    drainer = LogDrainer(node)

    with caplog.at_level(logging.WARNING):
        batch = drainer.drain()
    drainer.complete()

    assert batch.entries == ()
    assert node.deletes == []
    assert node.data["ua-next"] == "6"
    assert "clamping" in caplog.text
    assert node.name in caplog.text


def test_drainer_warns_when_backlog_is_truncated(caplog: pytest.LogCaptureFixture) -> None:
    node = log_node([f"agent-{i}" for i in range(1, 21)])
    drainer = LogDrainer(node, max_batch_size=5)

    with caplog.at_level(logging.WARNING):
        batch = drainer.drain()

    assert batch.pending_deletion == (16, 17, 18, 19, 20)
    assert "only considering the last 5 entries" in caplog.text


def test_drainer_ignores_non_integer_index(caplog: pytest.LogCaptureFixture) -> None:
    node = InMemoryCacheNode(data={"ua-idx": "garbage", "ua-1": "x"})
    drainer = LogDrainer(node)

    with caplog.at_level(logging.WARNING):
        batch = drainer.drain()

    assert batch.entries == ()
    assert drainer.state is DrainState.COMPLETED
    assert "non-integer" in caplog.text


def test_unreachable_node_aborts_without_touching_cursor() -> None:
    node = log_node(["a"], cursor=1)
    node.unreachable = True
    drainer = LogDrainer(node)

    with pytest.raises(CacheNodeError):
        drainer.drain()

    assert drainer.state is DrainState.ABORTED
    assert drainer.error is not None
    node.unreachable = False
    assert node.data["ua-next"] == "1"
    with pytest.raises(DrainStateError):
        drainer.complete()


def test_delete_failure_does_not_block_other_deletes_or_cursor() -> None:
    node = log_node(["a", "b", "c"])
    node.fail_delete = {"ua-2"}
    drainer = LogDrainer(node)
    drainer.drain()

    completion = drainer.complete()

    assert node.deletes == ["ua-1", "ua-3"]
    assert completion.keys_deleted == 2
    assert completion.delete_failures == 1
    assert completion.cursor_advanced is True
    assert node.data["ua-next"] == "4"


def test_cursor_write_failure_is_reported() -> None:
    node = log_node(["a"])
    node.fail_set = {"ua-next"}
    drainer = LogDrainer(node)
    drainer.drain()

    completion = drainer.complete()

    assert completion.keys_deleted == 1
    assert completion.cursor_advanced is False
    assert "ua-next" not in node.data


def test_steps_out_of_order_raise() -> None:
    drainer = LogDrainer(log_node(["a"]))

    with pytest.raises(DrainStateError):
        drainer.fetch()
    with pytest.raises(DrainStateError):
        drainer.complete()


def test_window_is_computed_from_the_stored_cursor() -> None:
    node = log_node(["a", "b", "c", "d"], cursor=3)
    drainer = LogDrainer(node)

    cursor = drainer.read_cursor()
    window = LogDrainer(node).compute_window()

    assert (cursor.last_seen_index, cursor.next_to_process) == (4, 3)
    assert list(window.sequence_numbers()) == [3, 4]


def test_missing_cursor_reads_as_first_entry() -> None:
    node = log_node(["a", "b"])
    drainer = LogDrainer(node)

    cursor = drainer.read_cursor()
    window = LogDrainer(node).compute_window()

    assert cursor.next_to_process == 1
    assert window.requested_start == 1
    assert list(window.sequence_numbers()) == [1, 2]
