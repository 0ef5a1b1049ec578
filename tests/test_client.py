"""Tests for the target client wrappers."""

import asyncio

import httpx

from apichecker.core.client import USER_AGENT, AsyncTargetClient, TargetClient
from conftest import StepClock, refused


def test_status_codes_are_data_not_errors():
    transport = httpx.MockTransport(
        lambda request: httpx.Response(500, text="boom", headers={"X-Thing": "1"}))
    with TargetClient(transport=transport, clock=StepClock(0.02)) as client:
        out = client.send("GET", "http://api.test/x")
    assert not out.failed
    assert out.status_code == 500
    assert out.body == "boom"
    assert out.size == 4
    assert out.header("X-THING") == "1"
    assert out.elapsed_ms == 20.0


def test_transport_error_becomes_outcome():
    with TargetClient(transport=httpx.MockTransport(refused), clock=StepClock()) as client:
        out = client.send("POST", "http://api.test/login", json={"a": 1})
    assert out.failed
    assert out.status_code is None
    assert out.error.startswith("ConnectError")
    assert out.elapsed_ms == 10.0


def test_sends_user_agent_json_and_params():
    seen = {}

    def handler(request):
        seen["ua"] = request.headers["user-agent"]
        seen["query"] = request.url.params.get("id")
        seen["body"] = request.content
        return httpx.Response(200)

    with TargetClient(transport=httpx.MockTransport(handler)) as client:
        client.send("POST", "http://api.test/u", json={"x": 1}, params={"id": "' OR 1=1"})
    assert seen["ua"] == USER_AGENT
    assert seen["query"] == "' OR 1=1"
    assert b'"x"' in seen["body"]


def test_async_client_same_contract():
    transport = httpx.MockTransport(lambda request: httpx.Response(429))

    async def go():
        async with AsyncTargetClient(transport=transport, clock=StepClock()) as client:
            return await asyncio.gather(*(client.send("GET", "http://api.test") for _ in range(3)))

    outs = asyncio.run(go())
    assert [o.status_code for o in outs] == [429, 429, 429]


def test_async_client_transport_error():
    async def go():
        async with AsyncTargetClient(transport=httpx.MockTransport(refused)) as client:
            return await client.send("GET", "http://api.test")

    assert asyncio.run(go()).failed
