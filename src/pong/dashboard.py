"""Orchestrator: one probe worker per endpoint plus the periodic render tick."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from types import TracebackType
from typing import Protocol

from .config import AppConfig
from .core.latency import EndpointStats
from .core.snapshot import SnapshotStore, StatsSnapshot
from .endpoints import Endpoint
from .probe.prober import Prober
from .probe.worker import CollectionGate, ProbeWorker, sleep_with_shutdown

logger = logging.getLogger(__name__)

STOP_GRACE_SECONDS = 1.0


class Renderer(Protocol):
    def draw(self, snapshots: Sequence[StatsSnapshot], total_samples: int) -> None: ...

    def draw_warmup(self, elapsed: float, remaining: float, total_seconds: float) -> None: ...


def snapshot_sort_key(snapshot: StatsSnapshot) -> tuple[bool, float, str]:
    """Order by mean latency, rows without data first, ties by name."""

    return (snapshot.avg is not None, snapshot.avg or 0.0, snapshot.region_id)


def sort_snapshots(snapshots: Sequence[StatsSnapshot]) -> list[StatsSnapshot]:
    return sorted(snapshots, key=snapshot_sort_key)


class Dashboard:
    """Owns workers, snapshot stores, the warmup gate, and the shutdown flag.

    Workers publish into their :class:`SnapshotStore`; :meth:`tick` reads every
    store, sorts, and hands the result to a :class:`Renderer`. Nothing here
    blocks on the network.
    """

    def __init__(
        self,
        endpoints: Sequence[Endpoint],
        prober: Prober,
        config: AppConfig | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not endpoints:
            raise ValueError("Dashboard needs at least one endpoint")
        self.config = config or AppConfig()
        self.endpoints = tuple(endpoints)
        self.shutdown = threading.Event()
        self._clock = clock
        self._warmup = float(self.config.display.warmup)
        self.gate = CollectionGate(open_=self._warmup <= 0)
        self._started_at: float | None = None
        self.stores: list[SnapshotStore] = []
        self.workers: list[ProbeWorker] = []
        for endpoint in self.endpoints:
            store = SnapshotStore(endpoint.name)
            self.stores.append(store)
            self.workers.append(
                ProbeWorker(
                    endpoint,
                    prober=prober,
                    stats=EndpointStats(endpoint.name, self.config.display.capacity),
                    store=store,
                    shutdown=self.shutdown,
                    policy=self.config.probe,
                    gate=self.gate,
                )
            )

    def __enter__(self) -> Dashboard:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()

    def start(self) -> None:
        if self._started_at is not None:
            return
        self._started_at = self._clock()
        logger.info(
            "Starting %d probe workers (interval %.2fs, warmup %.1fs)",
            len(self.workers),
            self.config.probe.interval,
            self._warmup,
        )
        for worker in self.workers:
            worker.start()

    def stop_timeout(self) -> float:
        """Join deadline for :meth:`stop`: one full probe timeout plus a grace period."""

        return self.config.probe.timeout + STOP_GRACE_SECONDS

    def stop(self, timeout: float | None = None) -> None:
        """Signal shutdown and wait (bounded) for the workers to exit."""

        self.shutdown.set()
        deadline = self._clock() + (self.stop_timeout() if timeout is None else timeout)
        for worker in self.workers:
            worker.join(timeout=max(0.0, deadline - self._clock()))
        alive = [w.endpoint.name for w in self.workers if w.is_alive()]
        if alive:
            logger.warning("Probe workers still running after shutdown: %s", ", ".join(alive))
        else:
            logger.info("All probe workers stopped")

    def warmup_remaining(self) -> float:
        if self._started_at is None:
            return self._warmup
        return max(0.0, self._warmup - (self._clock() - self._started_at))

    def warmup_ready(self) -> bool:
        """Return ``True`` once warmup has elapsed, opening the collection gate."""

        if self.gate.is_open():
            return True
        if self._started_at is not None and self.warmup_remaining() <= 0:
            self.gate.open()
            logger.info("Warmup complete; recording samples")
            return True
        return False

    def collect(self) -> tuple[list[StatsSnapshot], int]:
        snapshots = sort_snapshots([store.read() for store in self.stores])
        return snapshots, sum(s.total_samples for s in snapshots)

    def tick(self, renderer: Renderer) -> None:
        if not self.warmup_ready():
            elapsed = 0.0 if self._started_at is None else self._clock() - self._started_at
            renderer.draw_warmup(elapsed, self.warmup_remaining(), self._warmup)
            return
        snapshots, total = self.collect()
        renderer.draw(snapshots, total)

    def run(self, renderer: Renderer | None = None, duration: float | None = None) -> None:
        """Drive the render tick until shutdown or until ``duration`` seconds after warmup."""

        self.start()
        interval = self.config.display.render_interval
        quantum = self.config.probe.sleep_quantum
        ends_at: float | None = None
        while not self.shutdown.is_set():
            if renderer is not None:
                self.tick(renderer)
            if duration is not None and self.warmup_ready():
                if ends_at is None:
                    ends_at = self._clock() + duration
                elif self._clock() >= ends_at:
                    return
            if not sleep_with_shutdown(self.shutdown, interval, quantum):
                return


__all__ = [
    "STOP_GRACE_SECONDS",
    "Dashboard",
    "Renderer",
    "snapshot_sort_key",
    "sort_snapshots",
]
