"""Tests for the concurrent rate limiting probe."""

import asyncio

import httpx

from apichecker.core.models import ProbeConfig, Severity
from apichecker.probes.rate_limiting import RateLimiting
from conftest import refused

CONFIG = ProbeConfig(target_url="http://api.test", endpoint="/api", request_count=100)


def test_no_limit_is_vulnerable(make_probe):
    report = make_probe(RateLimiting, lambda r: httpx.Response(200)).run(CONFIG)

    assert report.status == "vulnerable"
    assert report.summary["rateLimitedRequests"] == 0
    assert report.summary["successfulRequests"] == 100
    assert report.summary["timeWindow"] == "1000ms"
    assert [f.severity for f in report.findings] == [Severity.HIGH]
    assert len(report.details) == 100
    assert sorted(a.index for a in report.details) == list(range(1, 101))


def test_mostly_limited_is_protected(make_probe):
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) > 30:
            return httpx.Response(429, headers={"X-RateLimit-Limit": "30",
                                                "X-RateLimit-Remaining": "0",
                                                "X-RateLimit-Reset": "60"})
        return httpx.Response(200)

    report = make_probe(RateLimiting, handler).run(CONFIG)
    assert report.status == "protected"
    assert report.summary["rateLimitedRequests"] == 70
    limited = [a for a in report.details if a.flags["rateLimited"]]
    assert limited[0].fields["rateLimit"] == {"limit": "30", "remaining": "0", "reset": "60"}


def test_some_limited_is_weak(make_probe):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(429 if len(calls) > 80 else 200)

    report = make_probe(RateLimiting, handler).run(CONFIG)
    assert report.status == "weak"
    assert report.findings[0].description == "Weak rate limiting"


def test_max_concurrency_caps_requests_in_flight(make_probe):
    state = {"inflight": 0, "peak": 0}

    async def handler(request):
        state["inflight"] += 1
        state["peak"] = max(state["peak"], state["inflight"])
        await asyncio.sleep(0.001)
        state["inflight"] -= 1
        return httpx.Response(200)

    config = ProbeConfig(target_url="http://api.test", request_count=40, max_concurrency=5)
    report = make_probe(RateLimiting, handler).run(config)
    assert len(report.details) == 40
    assert 1 <= state["peak"] <= 5


def test_invalid_counts_are_rejected(make_probe):
    probe = make_probe(RateLimiting, lambda r: httpx.Response(200))
    assert probe.run(ProbeConfig(target_url="http://api.test", request_count=0)).status == "error"
    assert probe.run(ProbeConfig(target_url="http://api.test",
                                 max_concurrency=0)).status == "error"


def test_unreachable_target_is_an_error(make_probe):
    report = make_probe(RateLimiting, refused).run(
        ProbeConfig(target_url="http://api.test", request_count=10))
    assert report.status == "error"
    assert report.error.startswith("Target unreachable")
    assert report.findings == []
    assert len(report.details) == 10


def test_timeouts_are_left_out_of_the_ratio(make_probe):
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) <= 90:
            raise httpx.ReadTimeout("timed out", request=request)
        return httpx.Response(429 if len(calls) > 95 else 200)

    report = make_probe(RateLimiting, handler).run(CONFIG)
    assert report.summary["totalRequests"] == 100
    assert report.summary["answeredRequests"] == 10
    assert report.summary["rateLimitedRequests"] == 5
    assert report.findings == []
    assert report.status == "protected"
