import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
if SRC.exists():
    sys.path.insert(0, str(SRC))

# Register shared Hypothesis profiles for deterministic CI runs and fast local loops.
from tests.util import hypothesis_profiles  # noqa: E402,F401  pylint: disable=unused-import

from pong.endpoints import Endpoint  # noqa: E402

PONG_ENV_VARS = (
    "PONG_CONFIG",
    "PONG_ENDPOINTS_FILE",
    "PONG_PROBE_INTERVAL",
    "PONG_PROBE_TIMEOUT",
    "PONG_PROBE_RETRIES",
    "PONG_RETRY_DELAY",
    "PONG_SLEEP_QUANTUM",
    "PONG_CAPACITY",
    "PONG_RENDER_INTERVAL",
    "PONG_WARMUP",
)


@pytest.fixture(autouse=True)
def _clean_pong_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer shell overrides out of config-sensitive tests."""

    for name in PONG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def endpoint() -> Endpoint:
    return Endpoint("test-region", "https://example.invalid/ping")


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "slow: threaded tests that sleep for real time")

