"""pong: live round-trip latency dashboard."""

from . import config, contracts, core, endpoints, probe

__version__ = "0.3.0"

__all__ = [
    "config",
    "contracts",
    "core",
    "endpoints",
    "probe",
    "__version__",
]
