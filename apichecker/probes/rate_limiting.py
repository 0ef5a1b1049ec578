"""Rate limiting: fire every request at once and count the 429s."""

import asyncio
from typing import Optional

from apichecker.core.client import AsyncTargetClient, Outcome
from apichecker.core.errors import ProbeInputError
from apichecker.core.models import ProbeConfig, Report, Severity
from apichecker.probes.base import BaseProbe

_RATE_HEADERS = ("x-ratelimit-limit", "x-ratelimit-remaining", "x-ratelimit-reset")


class RateLimiting(BaseProbe):
    """
    Concurrent fan-out: all N requests are issued without waiting for earlier
    ones, then joined. Attempts are recorded in completion order.

    ``ProbeConfig.max_concurrency`` caps requests in flight; None keeps the
    fan-out unbounded.
    """

    key = "rate-limiting"
    name = "Rate Limiting Test"
    timeout = 5.0
    weak_ratio = 0.5
    advice = {
        "vulnerable": (
            "Implement rate limiting to prevent API abuse",
            "Consider using a rate limiting middleware in front of the API",
            "Set appropriate limits based on your API usage patterns",
        ),
        "weak": (
            "Strengthen rate limiting rules",
            "Reduce the request threshold or time window",
        ),
        "protected": (
            "Rate limiting is working effectively",
        ),
    }
    hardening = ("Monitor rate limit metrics to adjust thresholds as needed",)

    def validate(self, config: ProbeConfig) -> None:
        super().validate(config)
        if config.request_count < 1:
            raise ProbeInputError("requestCount must be at least 1")
        if config.max_concurrency is not None and config.max_concurrency < 1:
            raise ProbeInputError("maxConcurrency must be at least 1")

    def probe(self, config: ProbeConfig, report: Report) -> None:
        started = self.clock()
        asyncio.run(self._fan_out(config, report))
        total_ms = round((self.clock() - started) * 1000)

        answered = [a for a in report.details if a.error is None]
        limited = sum(1 for a in answered if a.status_code == 429)
        succeeded = sum(1 for a in answered if a.status_code == 200)
        times = [a.elapsed_ms for a in answered]
        self.ensure_reachable(report)
        n = len(answered)

        report.summary.update(
            totalRequests=config.request_count,
            answeredRequests=n,
            timeWindow=f"{config.time_window}ms",
            successfulRequests=succeeded,
            rateLimitedRequests=limited,
            averageResponseTime=sum(times) / len(times) if times else 0,
            totalExecutionTime=f"{total_ms}ms",
        )

        if limited == 0:
            report.add_finding(Severity.HIGH, "No rate limiting detected",
                               f"{n} answered requests were processed in {total_ms}ms without "
                               f"any rate limiting")
        elif limited < n * self.weak_ratio:
            report.add_finding(Severity.MEDIUM, "Weak rate limiting",
                               f"Only {limited} out of {n} answered requests were rate limited")

    async def _fan_out(self, config: ProbeConfig, report: Report) -> None:
        gate: Optional[asyncio.Semaphore] = None
        if config.max_concurrency:
            gate = asyncio.Semaphore(config.max_concurrency)

        async with AsyncTargetClient(timeout=self.timeout,
                                     follow_redirects=self.follow_redirects,
                                     transport=self.async_transport or self.transport,
                                     clock=self.clock,
                                     max_connections=config.max_concurrency) as client:

            async def one(index: int) -> None:
                if gate is None:
                    out = await client.send("GET", config.url)
                else:
                    async with gate:
                        out = await client.send("GET", config.url)
                self._collect(report, index, out)

            await asyncio.gather(*(one(i) for i in range(1, config.request_count + 1)))

    def _collect(self, report: Report, index: int, out: Outcome) -> None:
        attempt = self.record(report, index, out, flags={"rateLimited": out.status_code == 429})
        if out.header("x-ratelimit-limit"):
            limit, remaining, reset = (out.header(h) for h in _RATE_HEADERS)
            attempt.fields["rateLimit"] = {"limit": limit, "remaining": remaining, "reset": reset}
