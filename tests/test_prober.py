from __future__ import annotations

import io
from typing import Any, cast
from urllib.error import HTTPError, URLError
from urllib.request import OpenerDirector, Request

import pytest

from pong.endpoints import Endpoint
from pong.probe.prober import HttpProber, ProbeError, Prober


class DummyResponse:
    def __enter__(self) -> "DummyResponse":
        return self

    def __exit__(self, *_: Any) -> None:
        return None

    def read(self, _amount: int = -1) -> bytes:
        return b""


class DummyOpener:
    def __init__(self, outcome: Any = None) -> None:
        self.outcome = outcome
        self.requests: list[tuple[Request, float]] = []

    def open(self, request: Request, timeout: float) -> DummyResponse:
        self.requests.append((request, timeout))
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return DummyResponse()


def _prober(outcome: Any = None) -> tuple[HttpProber, DummyOpener]:
    opener = DummyOpener(outcome)
    return HttpProber(opener=cast(OpenerDirector, opener)), opener


def test_http_prober_sends_head_with_user_agent(endpoint: Endpoint) -> None:
    prober, opener = _prober()
    latency = prober.measure(endpoint, timeout=2.5)
    assert latency >= 0.0
    request, timeout = opener.requests[0]
    assert request.get_method() == "HEAD"
    assert request.full_url == endpoint.url
    assert request.get_header("User-agent") == "pong"
    assert timeout == 2.5
    assert isinstance(prober, Prober)


def test_http_status_errors_still_count_as_round_trips(endpoint: Endpoint) -> None:
    error = HTTPError(endpoint.url, 403, "Forbidden", cast(Any, {}), io.BytesIO(b""))
    prober, _ = _prober(error)
    assert prober.measure(endpoint, timeout=1.0) >= 0.0


@pytest.mark.parametrize(
    "failure",
    [
        URLError("Name or service not known"),
        TimeoutError("timed out"),
        ConnectionRefusedError("refused"),
    ],
)
def test_transport_failures_raise_probe_error(endpoint: Endpoint, failure: Exception) -> None:
    prober, _ = _prober(failure)
    with pytest.raises(ProbeError) as excinfo:
        prober.measure(endpoint, timeout=1.0)
    assert endpoint.name in str(excinfo.value)
    assert excinfo.value.__cause__ is failure


def test_default_opener_does_not_follow_redirects() -> None:
    prober = HttpProber("custom-agent")
    assert prober.user_agent == "custom-agent"
    handler = next(h for h in prober._opener.handlers if type(h).__name__ == "_NoRedirect")
    assert handler.redirect_request() is None
