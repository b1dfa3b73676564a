from __future__ import annotations

import math
import statistics

import pytest
from hypothesis import given, strategies as st

from pong.core.latency import (
    DEFAULT_CAPACITY,
    SampleBuffer,
    StreamingAggregate,
    percentile_index,
)

latencies = st.floats(min_value=0.0, max_value=10_000.0, allow_nan=False, allow_infinity=False)


def test_sample_buffer_rejects_non_power_of_two() -> None:
    for capacity in (0, -4, 3, 100):
        with pytest.raises(ValueError):
            SampleBuffer(capacity)
    assert SampleBuffer().capacity == DEFAULT_CAPACITY == 128


def test_sample_buffer_push_returns_evicted_oldest() -> None:
    buf = SampleBuffer(4)
    assert [buf.push(v) for v in (1.0, 2.0, 3.0, 4.0)] == [None, None, None, None]
    assert buf.is_full()
    assert buf.push(5.0) == 1.0
    assert buf.push(6.0) == 2.0
    assert len(buf) == 4
    assert buf.snapshot_ordered() == [3.0, 4.0, 5.0, 6.0]


def test_snapshot_ordered_does_not_mutate() -> None:
    buf = SampleBuffer(2)
    buf.push(7.0)
    first = buf.snapshot_ordered()
    first.append(99.0)
    assert buf.snapshot_ordered() == [7.0]
    assert len(buf) == 1


@given(st.lists(latencies, max_size=40))
def test_snapshot_ordered_matches_tail_of_history(values: list[float]) -> None:
    buf = SampleBuffer(8)
    for value in values:
        buf.push(value)
    assert buf.snapshot_ordered() == values[-8:]
    assert len(buf) == min(len(values), 8)


def test_streaming_aggregate_underflow_is_unavailable() -> None:
    agg = StreamingAggregate()
    assert agg.current_mean() is None
    assert agg.stddev() is None
    agg.update(42.0)
    assert agg.current_mean() == 42.0
    assert agg.variance() is None
    assert agg.stddev() is None


@given(st.lists(latencies, min_size=2, max_size=200))
def test_streaming_aggregate_matches_batch_statistics(values: list[float]) -> None:
    agg = StreamingAggregate()
    for value in values:
        agg.update(value)
    assert agg.count == len(values)
    assert agg.current_mean() == pytest.approx(statistics.fmean(values), rel=1e-9, abs=1e-9)
    assert agg.stddev() == pytest.approx(statistics.stdev(values), rel=1e-6, abs=1e-6)


def test_percentile_index_nearest_rank() -> None:
    assert percentile_index(0, 0.95) == 0
    assert percentile_index(1, 0.95) == 0
    assert percentile_index(1, 0.99) == 0
    assert percentile_index(100, 0.95) == 94
    assert percentile_index(100, 0.99) == 98
    assert percentile_index(20, 0.95) == 18
    assert percentile_index(3, 0.99) == 2


@given(st.integers(min_value=1, max_value=512), st.sampled_from([0.5, 0.95, 0.99, 1.0]))
def test_percentile_index_is_in_range(length: int, percentile: float) -> None:
    idx = percentile_index(length, percentile)
    assert 0 <= idx < length
    assert idx == max(0, math.ceil(length * percentile) - 1)
