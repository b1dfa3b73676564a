"""Per-endpoint probe loop: measure, record, publish, cool down."""

from __future__ import annotations

import logging
import threading
import time
from enum import StrEnum

from pong.config import ProbePolicy
from pong.core.latency import EndpointStats
from pong.core.snapshot import SnapshotStore
from pong.endpoints import Endpoint

from .prober import ProbeError, Prober

logger = logging.getLogger(__name__)


class WorkerState(StrEnum):
    """Lifecycle states for a probe worker."""

    IDLE = "idle"
    PROBING = "probing"
    SUCCESS = "success"
    FAILURE = "failure"
    COOLDOWN = "cooldown"
    SHUTTING_DOWN = "shutting_down"


class CollectionGate:
    """Shared switch deciding whether measurements are recorded yet (warmup)."""

    def __init__(self, open_: bool = True) -> None:
        self._event = threading.Event()
        if open_:
            self._event.set()

    def open(self) -> None:
        self._event.set()

    def is_open(self) -> bool:
        return self._event.is_set()


def sleep_with_shutdown(
    shutdown: threading.Event, seconds: float, quantum: float = 0.025
) -> bool:
    """Sleep up to ``seconds`` in ``quantum`` slices; return ``False`` if shutdown was requested."""

    deadline = time.monotonic() + max(0.0, seconds)
    while not shutdown.is_set():
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return True
        shutdown.wait(min(quantum, remaining))
    return False


class ProbeWorker:
    """Sole owner and mutator of one endpoint's :class:`EndpointStats`."""

    def __init__(
        self,
        endpoint: Endpoint,
        *,
        prober: Prober,
        stats: EndpointStats,
        store: SnapshotStore,
        shutdown: threading.Event,
        policy: ProbePolicy | None = None,
        gate: CollectionGate | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.policy = policy or ProbePolicy()
        self._prober = prober
        self._stats = stats
        self._store = store
        self._shutdown = shutdown
        self._gate = gate or CollectionGate()
        self._thread: threading.Thread | None = None
        self.state = WorkerState.IDLE
        self.cycles = 0
        self.failures = 0

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._thread = threading.Thread(
            target=self.run, name=f"probe-{self.endpoint.name}", daemon=True
        )
        self._thread.start()

    def join(self, timeout: float | None = None) -> None:
        thread = self._thread
        if thread and thread is not threading.current_thread():
            thread.join(timeout=timeout)

    def is_alive(self) -> bool:
        return bool(self._thread and self._thread.is_alive())

    def run(self) -> None:
        logger.debug("Probe worker for %s started", self.endpoint.name)
        while not self._shutdown.is_set():
            self.run_cycle()
            self.state = WorkerState.COOLDOWN
            if not sleep_with_shutdown(
                self._shutdown, self.policy.interval, self.policy.sleep_quantum
            ):
                break
        self.state = WorkerState.SHUTTING_DOWN
        logger.debug("Probe worker for %s stopped after %d cycles", self.endpoint.name, self.cycles)

    def run_cycle(self) -> float | None:
        """Measure once (with retries) and, if collection is open, record and publish."""

        measurement = self._measure_with_retries()
        if self._shutdown.is_set():
            self.state = WorkerState.SHUTTING_DOWN
            return measurement
        self.cycles += 1
        if measurement is None:
            self.failures += 1
            self.state = WorkerState.FAILURE
        else:
            self.state = WorkerState.SUCCESS
        if self._gate.is_open():
            self._stats.record(measurement)
            self._store.publish(self._stats)
        return measurement

    def _measure_with_retries(self) -> float | None:
        attempts = self.policy.retries
        for attempt in range(1, attempts + 1):
            if self._shutdown.is_set():
                return None
            self.state = WorkerState.PROBING
            value = self._attempt()
            if value is not None:
                return value
            if attempt < attempts and not sleep_with_shutdown(
                self._shutdown, self.policy.retry_delay, self.policy.sleep_quantum
            ):
                return None
        return None

    def _attempt(self) -> float | None:
        try:
            return self._prober.measure(self.endpoint, self.policy.timeout)
        except ProbeError as exc:
            logger.debug("Probe failed for %s: %s", self.endpoint.name, exc)
        except Exception:  # noqa: BLE001 - a broken prober must not kill the worker
            logger.warning("Unexpected prober error for %s", self.endpoint.name, exc_info=True)
        return None


__all__ = ["CollectionGate", "ProbeWorker", "WorkerState", "sleep_with_shutdown"]
