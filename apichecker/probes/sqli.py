import re
from typing import Iterator, List, Tuple

from apichecker.core.client import Outcome
from apichecker.core.models import ProbeConfig, Report, Severity
from apichecker.core.severity import StatusTable
from apichecker.probes.base import BaseProbe


class SQLi(BaseProbe):
    """
    Error-based and time-based SQL injection, parameter × payload sweep.

    Each payload goes out as a GET query parameter. A response body that
    matches a known database error marks the parameter vulnerable; a
    response slower than ``slow_ms`` marks it suspicious (time-based blind).
    """

    key = "sql-injection"
    name = "SQL Injection Test"
    timeout = 10.0
    delay = 0.05
    slow_ms = 5000
    statuses = StatusTable("vulnerable", "vulnerable", "vulnerable", "vulnerable", "protected")
    advice = {
        "vulnerable": (
            "URGENT: Use parameterized queries or prepared statements",
            "Implement input validation and sanitization",
            "Use an ORM (Object-Relational Mapping) framework",
            "Apply the principle of least privilege to database users",
        ),
        "protected": (
            "No SQL injection vulnerabilities detected",
            "Continue using parameterized queries",
        ),
    }
    hardening = ("Regularly update security testing patterns",)

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._err_compiled = [re.compile(p, re.I) for p in self.corpus.sql_error_patterns]

    def get_payloads(self) -> Tuple[str, ...]:
        return self.corpus.sql_payloads

    def check_response(self, outcome: Outcome) -> bool:
        body = outcome.body or ""
        return any(rx.search(body) for rx in self._err_compiled)

    def work_items(self, config: ProbeConfig) -> Iterator[Tuple[str, str]]:
        for param in config.parameters or self.corpus.sql_parameters:
            for payload in self.get_payloads():
                yield param, payload

    def probe(self, config: ProbeConfig, report: Report) -> None:
        vulnerable: List[str] = []
        suspicious: List[str] = []
        total = 0

        with self.client() as client:
            for param, payload in self.paced(self.work_items(config)):
                total += 1
                out = client.send("GET", config.url, params={param: payload})
                if out.failed:
                    self.record(report, total, out, parameter=param, payload=payload)
                    continue

                has_error = self.check_response(out)
                slow = out.elapsed_ms > self.slow_ms
                attempt = self.record(report, total, out,
                                      flags={"hasError": has_error, "suspiciousDelay": slow},
                                      parameter=param, payload=payload)
                if has_error:
                    attempt.fields["vulnerability"] = "SQL error message detected"
                    vulnerable.append(param)
                    if self.logger:
                        self.logger.debug(f"SQL error for {param}={payload!r}")
                if slow:
                    attempt.fields["warning"] = "Suspicious response time - possible time-based injection"
                    suspicious.append(param)

        report.summary.update(totalTests=total,
                              vulnerableParameters=vulnerable,
                              suspiciousParameters=self.unique(suspicious))

        confirmed = self.unique(vulnerable)
        if confirmed:
            report.add_finding(Severity.CRITICAL, "SQL Injection vulnerability detected",
                               f"Vulnerable parameters: {', '.join(confirmed)}")
        delayed = [p for p in self.unique(suspicious) if p not in confirmed]
        if delayed:
            report.add_finding(Severity.HIGH, "Possible time-based SQL injection",
                               f"Responses slower than {self.slow_ms}ms for parameters: "
                               f"{', '.join(delayed)}")
