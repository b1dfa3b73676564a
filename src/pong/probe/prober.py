"""Latency probes: the interface the workers consume and its HTTP implementation."""

from __future__ import annotations

import logging
import time
from typing import Any, Protocol, runtime_checkable
from urllib.error import HTTPError, URLError
from urllib.request import HTTPRedirectHandler, OpenerDirector, Request, build_opener

from pong.endpoints import Endpoint

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "pong"


class ProbeError(Exception):
    """A single measurement attempt did not complete."""


@runtime_checkable
class Prober(Protocol):
    def measure(self, endpoint: Endpoint, timeout: float) -> float:
        """Return the round-trip latency in milliseconds or raise :class:`ProbeError`."""
        ...


class _NoRedirect(HTTPRedirectHandler):
    """Surface 3xx responses as-is; a redirect still proves a round trip."""

    def redirect_request(self, *_args: Any, **_kwargs: Any) -> None:
        return None


class HttpProber:
    """Time a bodiless ``HEAD`` request against the endpoint URL.

    Any HTTP status counts as a completed round trip. Only transport failures
    (DNS, refused connections, timeouts) raise :class:`ProbeError`.
    """

    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        *,
        opener: OpenerDirector | None = None,
    ) -> None:
        self.user_agent = user_agent
        self._opener = opener or build_opener(_NoRedirect())

    def measure(self, endpoint: Endpoint, timeout: float) -> float:
        request = Request(  # noqa: S310 - scheme validated by EndpointModel
            endpoint.url,
            method="HEAD",
            headers={"User-Agent": self.user_agent},
        )
        started = time.perf_counter()
        try:
            with self._opener.open(request, timeout=timeout) as response:  # nosec B310
                response.read(0)
        except HTTPError as exc:
            logger.debug("%s answered HTTP %s", endpoint.name, exc.code)
            exc.close()
        except (URLError, OSError) as exc:
            raise ProbeError(f"{endpoint.name}: {exc}") from exc
        return (time.perf_counter() - started) * 1000.0


__all__ = ["DEFAULT_USER_AGENT", "HttpProber", "ProbeError", "Prober"]
