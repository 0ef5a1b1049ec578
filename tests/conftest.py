"""Shared test fixtures for APIChecker tests."""

import httpx
import pytest

from apichecker.core.pacing import NoDelay

LAB_URL = "http://lab.test"


class StepClock:
    """Advances a fixed step on every read: every request takes the same time."""

    def __init__(self, step: float = 0.01):
        self.now = 0.0
        self.step = step

    def __call__(self) -> float:
        self.now += self.step
        return self.now


class ScriptedClock:
    """Start/end ticks such that the n-th request takes durations_ms[n]."""

    def __init__(self, durations_ms):
        self.ticks = []
        for i, ms in enumerate(durations_ms):
            self.ticks += [float(i), i + ms / 1000]
        self._pos = 0

    def __call__(self) -> float:
        tick = self.ticks[min(self._pos, len(self.ticks) - 1)]
        self._pos += 1
        return tick


@pytest.fixture
def pacer():
    return NoDelay()


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def make_probe(pacer, clock):
    """Build a probe wired to a MockTransport around *handler*."""
    def make(cls, handler=None, transport=None, **kwargs):
        if handler is not None:
            transport = httpx.MockTransport(handler)
        kwargs.setdefault("clock", clock)
        return cls(pacer=pacer, transport=transport, **kwargs)
    return make


@pytest.fixture
def lab_transport():
    """The vulnerable lab served in-process; usable by sync and async clients."""
    from vuln_lab.app import app

    wsgi = httpx.WSGITransport(app=app)

    def forward(request: httpx.Request) -> httpx.Response:
        resp = wsgi.handle_request(request)
        resp.read()
        return httpx.Response(resp.status_code, headers=resp.headers, content=resp.content)

    return httpx.MockTransport(forward)


def refused(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("Connection refused", request=request)
