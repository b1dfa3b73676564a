from .latency import (
    DEFAULT_CAPACITY,
    PERCENTILES,
    EndpointStats,
    SampleBuffer,
    StreamingAggregate,
    percentile_index,
)
from .snapshot import SnapshotStore, StatsSnapshot

__all__ = [
    "DEFAULT_CAPACITY",
    "PERCENTILES",
    "EndpointStats",
    "SampleBuffer",
    "SnapshotStore",
    "StatsSnapshot",
    "StreamingAggregate",
    "percentile_index",
]
