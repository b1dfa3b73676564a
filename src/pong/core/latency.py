"""Rolling latency statistics for a single endpoint."""

from __future__ import annotations

import math

DEFAULT_CAPACITY = 128
PERCENTILES: tuple[float, float] = (0.95, 0.99)


def _is_power_of_two(value: int) -> bool:
    return value > 0 and (value & (value - 1)) == 0


def percentile_index(length: int, percentile: float) -> int:
    """Return the 0-based slot of the nearest-rank ``percentile`` in a sorted window."""

    if length <= 0:
        return 0
    rank = math.ceil(length * percentile)
    idx = 0 if rank <= 1 else rank - 1
    return min(idx, length - 1)


class SampleBuffer:
    """Fixed-capacity ring of the most recent samples, oldest evicted first."""

    __slots__ = ("_slots", "_mask", "_head", "_len")

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if not _is_power_of_two(capacity):
            raise ValueError(f"Sample buffer capacity must be a power of two > 0; got {capacity}")
        self._slots: list[float] = [0.0] * capacity
        self._mask = capacity - 1
        self._head = 0
        self._len = 0

    @property
    def capacity(self) -> int:
        return self._mask + 1

    def __len__(self) -> int:
        return self._len

    def is_full(self) -> bool:
        return self._len == self.capacity

    def push(self, value: float) -> float | None:
        """Store ``value`` and return the evicted sample, if any."""

        evicted = self._slots[self._head] if self.is_full() else None
        self._slots[self._head] = value
        self._head = (self._head + 1) & self._mask
        if self._len < self.capacity:
            self._len += 1
        return evicted

    def snapshot_ordered(self) -> list[float]:
        """Return the window oldest-to-newest without mutating the ring."""

        start = (self._head - self._len) & self._mask
        return [self._slots[(start + i) & self._mask] for i in range(self._len)]


class StreamingAggregate:
    """Welford accumulator for mean/variance over every sample ever seen."""

    __slots__ = ("count", "mean", "m2")

    def __init__(self) -> None:
        self.count = 0
        self.mean = 0.0
        self.m2 = 0.0

    def update(self, value: float) -> None:
        self.count += 1
        delta = value - self.mean
        self.mean += delta / self.count
        delta2 = value - self.mean
        self.m2 += delta * delta2

    def current_mean(self) -> float | None:
        return self.mean if self.count else None

    def variance(self) -> float | None:
        if self.count < 2:
            return None
        return self.m2 / (self.count - 1)

    def stddev(self) -> float | None:
        variance = self.variance()
        return math.sqrt(variance) if variance is not None else None


class EndpointStats:
    """Derived latency statistics for one endpoint.

    Mean and standard deviation come from a :class:`StreamingAggregate` and
    cover the full history. Min, max and percentiles are windowed to the
    :class:`SampleBuffer` and cached until a :meth:`record` call could change
    them; reads recompute lazily.

    Instances are not thread-safe. Each one belongs to a single probe worker,
    and other threads observe it only through published snapshots.
    """

    __slots__ = (
        "region_id",
        "_buffer",
        "_aggregate",
        "_last",
        "_total_samples",
        "_running_min",
        "_running_max",
        "_min_max_valid",
        "_p95",
        "_p99",
        "_percentiles_valid",
    )

    def __init__(self, region_id: str, capacity: int = DEFAULT_CAPACITY) -> None:
        self.region_id = region_id
        self._buffer = SampleBuffer(capacity)
        self._aggregate = StreamingAggregate()
        self._last: float | None = None
        self._total_samples = 0
        self._running_min = math.inf
        self._running_max = -math.inf
        self._min_max_valid = True
        self._p95 = 0.0
        self._p99 = 0.0
        self._percentiles_valid = False

    @property
    def capacity(self) -> int:
        return self._buffer.capacity

    def record(self, sample: float | None) -> None:
        """Fold one probe result in; ``None`` (failed probe) is ignored."""

        if sample is None:
            return
        value = float(sample)
        evicted = self._buffer.push(value)
        if evicted is not None and (
            evicted <= self._running_min or evicted >= self._running_max
        ):
            self._min_max_valid = False
        if value < self._running_min:
            self._running_min = value
        if value > self._running_max:
            self._running_max = value

        self._aggregate.update(value)
        self._last = value
        self._total_samples += 1
        self._percentiles_valid = False

    def last(self) -> float | None:
        return self._last

    def total_samples(self) -> int:
        return self._total_samples

    def window(self) -> list[float]:
        return self._buffer.snapshot_ordered()

    def mean(self) -> float | None:
        return self._aggregate.current_mean()

    def stddev(self) -> float | None:
        return self._aggregate.stddev()

    def min(self) -> float | None:
        if not len(self._buffer):
            return None
        if not self._min_max_valid:
            self._recompute_min_max()
        return self._running_min

    def max(self) -> float | None:
        if not len(self._buffer):
            return None
        if not self._min_max_valid:
            self._recompute_min_max()
        return self._running_max

    def p95(self) -> float | None:
        if not len(self._buffer):
            return None
        if not self._percentiles_valid:
            self._recompute_percentiles()
        return self._p95

    def p99(self) -> float | None:
        if not len(self._buffer):
            return None
        if not self._percentiles_valid:
            self._recompute_percentiles()
        return self._p99

    def _recompute_min_max(self) -> None:
        values = self._buffer.snapshot_ordered()
        self._running_min = min(values)
        self._running_max = max(values)
        self._min_max_valid = True

    def _recompute_percentiles(self) -> None:
        values = sorted(self._buffer.snapshot_ordered())
        p95, p99 = PERCENTILES
        self._p95 = values[percentile_index(len(values), p95)]
        self._p99 = values[percentile_index(len(values), p99)]
        self._percentiles_valid = True


__all__ = [
    "DEFAULT_CAPACITY",
    "PERCENTILES",
    "EndpointStats",
    "SampleBuffer",
    "StreamingAggregate",
    "percentile_index",
]
