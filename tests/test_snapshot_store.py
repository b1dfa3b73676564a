from __future__ import annotations

import threading
from dataclasses import FrozenInstanceError

import pytest

from pong.core.latency import EndpointStats
from pong.core.snapshot import SnapshotStore, StatsSnapshot

ITERATIONS = 10_000


def test_read_before_publish_is_all_absent() -> None:
    store = SnapshotStore("eu-west-1 (Ireland)")
    snap = store.read()
    assert snap.region_id == "eu-west-1 (Ireland)"
    assert snap.total_samples == 0
    assert not snap.has_data()
    assert [snap.last, snap.min, snap.max, snap.avg, snap.stddev, snap.p95, snap.p99] == [None] * 7
    assert store.publish_count == 0


def test_publish_materializes_current_statistics() -> None:
    stats = EndpointStats("r", 4)
    for value in (10.0, 20.0, 30.0, 40.0, 50.0):
        stats.record(value)
    store = SnapshotStore("r")
    published = store.publish(stats)
    assert store.read() is published
    assert published == StatsSnapshot(
        region_id="r",
        last=50.0,
        min=20.0,
        max=50.0,
        avg=pytest.approx(30.0),
        stddev=pytest.approx(15.8113883),
        p95=50.0,
        p99=50.0,
        total_samples=5,
    )
    assert store.publish_count == 1


def test_snapshot_is_detached_from_stats() -> None:
    stats = EndpointStats("r", 4)
    stats.record(1.0)
    store = SnapshotStore("r")
    store.publish(stats)
    stats.record(100.0)
    assert store.read().last == 1.0
    assert store.read().total_samples == 1


def test_snapshot_is_immutable_and_serializable() -> None:
    snap = StatsSnapshot(region_id="r", last=1.5, total_samples=1)
    with pytest.raises(FrozenInstanceError):
        snap.last = 2.0  # type: ignore[misc]
    assert snap.to_dict() == {
        "region_id": "r",
        "last": 1.5,
        "min": None,
        "max": None,
        "avg": None,
        "stddev": None,
        "p95": None,
        "p99": None,
        "total_samples": 1,
    }


def test_publish_replaces_previous_snapshot() -> None:
    stats = EndpointStats("r", 4)
    store = SnapshotStore("r")
    stats.record(5.0)
    first = store.publish(stats)
    stats.record(7.0)
    second = store.publish(stats)
    assert store.read() is second
    assert first.last == 5.0 and second.last == 7.0
    assert store.publish_count == 2


@pytest.mark.slow
def test_concurrent_publish_and_read_never_tears() -> None:
    capacity = 4
    stats = EndpointStats("r", capacity)
    store = SnapshotStore("r")
    start = threading.Barrier(2)
    torn: list[StatsSnapshot] = []
    regressions: list[tuple[int, int]] = []

    def writer() -> None:
        start.wait()
        for i in range(ITERATIONS):
            stats.record(float(i))
            store.publish(stats)

    def reader() -> None:
        start.wait()
        previous = 0
        for _ in range(ITERATIONS):
            snap = store.read()
            n = snap.total_samples
            if n < previous:
                regressions.append((previous, n))
            previous = n
            if n == 0:
                continue
            newest = float(n - 1)
            oldest = float(max(0, n - capacity))
            if not (snap.last == snap.max == snap.p99 == newest and snap.min == oldest):
                torn.append(snap)

    threads = [threading.Thread(target=writer), threading.Thread(target=reader)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert not torn, torn[:3]
    assert not regressions
    assert store.read().total_samples == ITERATIONS
    assert store.publish_count == ITERATIONS
