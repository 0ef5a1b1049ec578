"""Abstract base for all probes."""

import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Iterator, Optional, Sequence, TypeVar

import httpx

from apichecker.core.client import Clock, Outcome, TargetClient
from apichecker.core.corpus import DEFAULT_CORPUS, Corpus
from apichecker.core.errors import ProbeInputError, TargetUnreachableError
from apichecker.core.models import Attempt, ProbeConfig, Report
from apichecker.core.pacing import FixedDelay
from apichecker.core.severity import StatusTable

T = TypeVar("T")


class BaseProbe(ABC):
    """
    Every probe implements probe(); run() wraps it with the shared lifecycle:
    report creation, input validation, status aggregation, recommendations
    and the single error boundary.
    """

    key: str = "unnamed"
    name: str = "Unnamed Probe"
    timeout: float = 5.0
    delay: float = 0.0
    follow_redirects: bool = True
    statuses: StatusTable = StatusTable("vulnerable", "vulnerable", "weak", "weak", "protected")
    # status label -> class-specific advice, then generic hardening last
    advice: Dict[str, Sequence[str]] = {}
    hardening: Sequence[str] = ()

    def __init__(self, corpus: Optional[Corpus] = None, pacer=None,
                 transport: Optional[httpx.BaseTransport] = None,
                 async_transport: Optional[httpx.AsyncBaseTransport] = None,
                 clock: Clock = time.perf_counter, logger=None):
        self.corpus = corpus or DEFAULT_CORPUS
        self.pacer = pacer or FixedDelay()
        self.transport = transport
        self.async_transport = async_transport
        self.clock = clock
        self.logger = logger

    # ── public API ──────────────────────────────────────────────

    def run(self, config: ProbeConfig) -> Report:
        report = Report(test_name=self.name, target=self.target_of(config))
        if self.logger:
            self.logger.info(f"Running {self.name} against {report.target or '(offline)'}")
        try:
            self.validate(config)
            self.probe(config, report)
            self.ensure_reachable(report)
            self.finalize(report)
        except ProbeInputError as exc:
            report.fail(str(exc))
            if self.logger:
                self.logger.warn(f"{self.name} skipped: {exc}")
        except Exception as exc:
            report.fail(str(exc) or type(exc).__name__)
            if self.logger:
                self.logger.fail(f"{self.name} aborted: {report.error}")
        if self.logger:
            self.logger.debug(f"{self.name} finished with status {report.status}")
        return report

    @abstractmethod
    def probe(self, config: ProbeConfig, report: Report) -> None:
        """Send the requests, record attempts and add findings to *report*."""
        ...

    # ── lifecycle hooks ─────────────────────────────────────────

    def target_of(self, config: ProbeConfig) -> str:
        return config.url

    def validate(self, config: ProbeConfig) -> None:
        if not config.target_url:
            raise ProbeInputError("targetUrl is required")
        if not config.target_url.lower().startswith(("http://", "https://")):
            raise ProbeInputError("targetUrl must include the scheme (http or https)")

    def clean_label(self, report: Report) -> Optional[str]:
        """Observation-derived label used instead of the table's clean label."""
        return None

    def recommendations_for(self, report: Report, status: str) -> Sequence[str]:
        return self.advice.get(status, ())

    def finalize(self, report: Report) -> None:
        status = self.statuses.resolve(report.findings, clean=self.clean_label(report))
        report.status = status
        report.recommend(*self.recommendations_for(report, status))
        report.recommend(*self.hardening)

    # ── shared helpers ──────────────────────────────────────────

    def client(self) -> TargetClient:
        return TargetClient(timeout=self.timeout, follow_redirects=self.follow_redirects,
                            transport=self.transport, clock=self.clock)

    def paced(self, items: Iterable[T]) -> Iterator[T]:
        """Yield work items one at a time with the politeness delay in between."""
        for i, item in enumerate(items):
            if i and self.delay:
                self.pacer.pause(self.delay)
            yield item

    @staticmethod
    def record(report: Report, index: int, outcome: Outcome,
               flags: Optional[Dict[str, bool]] = None, **fields: Any) -> Attempt:
        """Append the Attempt for *outcome*. Flags are dropped for transport errors."""
        attempt = Attempt(
            index=index,
            status_code=outcome.status_code,
            elapsed_ms=outcome.elapsed_ms,
            error=outcome.error,
            fields=fields,
            flags={} if outcome.failed else dict(flags or {}),
        )
        return report.add_attempt(attempt)

    @staticmethod
    def ensure_reachable(report: Report) -> None:
        """Raise when requests were sent and not one of them got an answer."""
        if report.details and all(a.error for a in report.details):
            raise TargetUnreachableError(
                f"Target unreachable: {report.details[-1].error}")

    @staticmethod
    def unique(values: Iterable[str]) -> list:
        return list(dict.fromkeys(values))
