"""Probe workers and the network prober they drive."""

from .prober import DEFAULT_USER_AGENT, HttpProber, ProbeError, Prober
from .worker import CollectionGate, ProbeWorker, WorkerState, sleep_with_shutdown

__all__ = [
    "DEFAULT_USER_AGENT",
    "CollectionGate",
    "HttpProber",
    "ProbeError",
    "ProbeWorker",
    "Prober",
    "WorkerState",
    "sleep_with_shutdown",
]
