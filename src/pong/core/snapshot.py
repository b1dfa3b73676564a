"""Immutable statistics snapshots and the cross-thread publish point."""

from __future__ import annotations

import threading
from dataclasses import asdict, dataclass
from typing import Any

from .latency import EndpointStats


@dataclass(frozen=True, slots=True)
class StatsSnapshot:
    """Point-in-time copy of one endpoint's derived statistics."""

    region_id: str
    last: float | None = None
    min: float | None = None
    max: float | None = None
    avg: float | None = None
    stddev: float | None = None
    p95: float | None = None
    p99: float | None = None
    total_samples: int = 0

    @classmethod
    def from_stats(cls, stats: EndpointStats) -> StatsSnapshot:
        return cls(
            region_id=stats.region_id,
            last=stats.last(),
            min=stats.min(),
            max=stats.max(),
            avg=stats.mean(),
            stddev=stats.stddev(),
            p95=stats.p95(),
            p99=stats.p99(),
            total_samples=stats.total_samples(),
        )

    def has_data(self) -> bool:
        return self.total_samples > 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class SnapshotStore:
    """Single-writer hand-off of the latest :class:`StatsSnapshot` for one endpoint.

    ``publish`` builds the snapshot in the writer's thread and only takes the
    lock to swap the reference, so readers never wait on statistics work and
    never observe a mix of two publishes.
    """

    def __init__(self, region_id: str) -> None:
        self.region_id = region_id
        self._lock = threading.Lock()
        self._current = StatsSnapshot(region_id=region_id)
        self._publish_count = 0

    def publish(self, stats: EndpointStats) -> StatsSnapshot:
        snapshot = StatsSnapshot.from_stats(stats)
        self.replace(snapshot)
        return snapshot

    def replace(self, snapshot: StatsSnapshot) -> None:
        """Swap in an already-built snapshot."""
        with self._lock:
            self._current = snapshot
            self._publish_count += 1

    def read(self) -> StatsSnapshot:
        with self._lock:
            return self._current

    @property
    def publish_count(self) -> int:
        with self._lock:
            return self._publish_count


__all__ = ["SnapshotStore", "StatsSnapshot"]
