"""Target client: one HTTP request in, one Outcome out. Never raises on status."""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import httpx

USER_AGENT = "apichecker/1.0"

Clock = Callable[[], float]


@dataclass
class Outcome:
    """Captured response, or a transport-error marker."""
    status_code: Optional[int] = None
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""
    size: int = 0
    elapsed_ms: float = 0.0
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name.lower())


def _elapsed(clock: Clock, start: float) -> float:
    return round((clock() - start) * 1000, 2)


def _outcome(resp: httpx.Response, elapsed_ms: float) -> Outcome:
    return Outcome(
        status_code=resp.status_code,
        headers={k.lower(): v for k, v in resp.headers.items()},
        body=resp.text or "",
        size=len(resp.content),
        elapsed_ms=elapsed_ms,
    )


def _describe(exc: httpx.HTTPError) -> str:
    msg = str(exc)
    return f"{type(exc).__name__}: {msg}" if msg else type(exc).__name__


class TargetClient:
    """
    Synchronous client used by the sequential probes.

    Every non-transport outcome (2xx…5xx) is returned as data. DNS failures,
    refused connections and timeouts come back as ``Outcome(error=...)``.
    """

    def __init__(self, timeout: float = 5.0, follow_redirects: bool = True,
                 transport: Optional[httpx.BaseTransport] = None,
                 clock: Clock = time.perf_counter):
        self.clock = clock
        self.client = httpx.Client(
            verify=False, follow_redirects=follow_redirects, timeout=timeout,
            transport=transport, headers={"User-Agent": USER_AGENT})

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self) -> None:
        self.client.close()

    def send(self, method: str, url: str, json: Any = None,
             params: Optional[Dict[str, str]] = None,
             headers: Optional[Dict[str, str]] = None) -> Outcome:
        start = self.clock()
        try:
            resp = self.client.request(method, url, json=json, params=params,
                                       headers=headers)
        except httpx.HTTPError as exc:
            return Outcome(error=_describe(exc), elapsed_ms=_elapsed(self.clock, start))
        return _outcome(resp, _elapsed(self.clock, start))


class AsyncTargetClient:
    """Same contract as TargetClient over httpx.AsyncClient, for concurrent fan-out."""

    def __init__(self, timeout: float = 5.0, follow_redirects: bool = True,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 clock: Clock = time.perf_counter,
                 max_connections: Optional[int] = None):
        self.clock = clock
        # max_connections=None lifts httpx's default pool cap of 100
        self.client = httpx.AsyncClient(
            verify=False, follow_redirects=follow_redirects, timeout=timeout,
            transport=transport, headers={"User-Agent": USER_AGENT},
            limits=httpx.Limits(max_connections=max_connections,
                                max_keepalive_connections=20))

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.client.aclose()

    async def send(self, method: str, url: str, json: Any = None,
                   params: Optional[Dict[str, str]] = None,
                   headers: Optional[Dict[str, str]] = None) -> Outcome:
        start = self.clock()
        try:
            resp = await self.client.request(method, url, json=json, params=params,
                                             headers=headers)
        except httpx.HTTPError as exc:
            return Outcome(error=_describe(exc), elapsed_ms=_elapsed(self.clock, start))
        return _outcome(resp, _elapsed(self.clock, start))
