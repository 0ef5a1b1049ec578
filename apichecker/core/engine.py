"""Orchestrator: run one probe, or every probe in declaration order."""

import time
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional, Type

from apichecker.core.corpus import Corpus
from apichecker.core.errors import UnknownProbeError
from apichecker.core.models import ProbeConfig, Report
from apichecker.core.pacing import FixedDelay
from apichecker.probes.authentication import Authentication
from apichecker.probes.base import BaseProbe
from apichecker.probes.brute_force import BruteForce
from apichecker.probes.cors import CORS
from apichecker.probes.discovery import EndpointDiscovery
from apichecker.probes.jwt_token import JWTProbe
from apichecker.probes.rate_limiting import RateLimiting
from apichecker.probes.security_headers import SecurityHeaders
from apichecker.probes.sqli import SQLi
from apichecker.probes.timing import TimingAttacks
from apichecker.probes.xss import XSS

PROBES: List[Type[BaseProbe]] = [
    BruteForce, RateLimiting, SQLi, XSS, SecurityHeaders,
    CORS, JWTProbe, Authentication, EndpointDiscovery, TimingAttacks,
]

# Needs a token the batch does not have.
SKIP_IN_BATCH = {"jwt"}

# Inputs used by run_all when the caller does not override them.
BATCH_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "brute-force": {"endpoint": "/login", "attempts": 50},
    "rate-limiting": {"endpoint": "/api", "request_count": 100, "time_window": 1000},
    "sql-injection": {"endpoint": "/api/users", "parameters": ("id", "user", "search")},
    "xss": {"endpoint": "/api/comments", "parameters": ("name", "comment", "message")},
    "authentication": {"endpoint": "/login", "credentials": ("testuser", "testpass")},
    "timing-attacks": {"endpoint": "/login", "samples": 20},
}

BATCH_PAUSE = 0.5


class Engine:
    def __init__(self, corpus: Optional[Corpus] = None, pacer=None,
                 transport=None, async_transport=None,
                 clock=time.perf_counter, logger=None):
        self.name = "APIChecker"
        self.version = "1.0.0"
        self.corpus = corpus
        self.pacer = pacer or FixedDelay()
        self.transport = transport
        self.async_transport = async_transport
        self.clock = clock
        self.logger = logger
        self._registry = {cls.key: cls for cls in PROBES}

    def keys(self) -> List[str]:
        return [cls.key for cls in PROBES]

    def build(self, key: str) -> BaseProbe:
        try:
            cls = self._registry[key]
        except KeyError:
            raise UnknownProbeError(key) from None
        return cls(corpus=self.corpus, pacer=self.pacer, transport=self.transport,
                   async_transport=self.async_transport, clock=self.clock,
                   logger=self.logger)

    def run(self, key: str, config: ProbeConfig) -> Report:
        report = self.build(key).run(config)
        if self.logger:
            self.logger.report(report)
        return report

    def batch_config(self, key: str, target_url: str,
                     overrides: Optional[Mapping[str, Mapping[str, Any]]] = None) -> ProbeConfig:
        config = ProbeConfig(target_url=target_url, **BATCH_DEFAULTS.get(key, {}))
        extra = (overrides or {}).get(key)
        return replace(config, **extra) if extra else config

    def run_all(self, target_url: str,
                overrides: Optional[Mapping[str, Mapping[str, Any]]] = None) -> List[Report]:
        """
        Best-effort batch: a probe that blows up is logged and reported as an
        error, the remaining probes still run.
        """
        keys = [k for k in self.keys() if k not in SKIP_IN_BATCH]
        reports: List[Report] = []

        if self.logger:
            self.logger.info(f"Running {len(keys)} probes against {target_url}")

        for i, key in enumerate(keys):
            if i:
                self.pacer.pause(BATCH_PAUSE)
            try:
                reports.append(self.run(key, self.batch_config(key, target_url, overrides)))
            except Exception as exc:
                if self.logger:
                    self.logger.fail(f"{key} failed: {exc}")
                report = Report(test_name=self._registry[key].name, target=target_url)
                report.fail(str(exc) or type(exc).__name__)
                reports.append(report)

        if self.logger:
            vulnerable = sum(1 for r in reports if r.findings)
            self.logger.ok(f"Batch complete: {len(reports)} probes, {vulnerable} with findings")
        return reports
