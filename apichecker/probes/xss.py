from typing import Iterator, List, Tuple

from apichecker.core.client import Outcome
from apichecker.core.models import ProbeConfig, Report, Severity
from apichecker.core.severity import StatusTable
from apichecker.probes.base import BaseProbe


def _encoded(payload: str) -> str:
    return payload.replace("<", "&lt;").replace(">", "&gt;")


def _preview(payload: str, n: int = 50) -> str:
    return payload[:n] + ("..." if len(payload) > n else "")


class XSS(BaseProbe):
    """
    Reflected XSS. Each payload is POSTed as a JSON field; the parameter is
    vulnerable when the raw payload comes back and its entity-encoded form
    does not.
    Limitation: no DOM, no JS execution. Server-side reflection only.
    """

    key = "xss"
    name = "XSS (Cross-Site Scripting) Test"
    timeout = 5.0
    delay = 0.05
    statuses = StatusTable("vulnerable", "vulnerable", "vulnerable", "vulnerable", "protected")
    advice = {
        "vulnerable": (
            "URGENT: Implement proper output encoding/escaping",
            "Use Content Security Policy (CSP) headers",
            "Sanitize user input on both client and server side",
            "Use frameworks that auto-escape output by default",
            "Validate and whitelist allowed HTML tags if rich text is needed",
        ),
        "protected": (
            "No XSS vulnerabilities detected",
            "Continue implementing proper output encoding",
        ),
    }
    hardening = ("Consider adding CSP headers for defense in depth",)

    def get_payloads(self) -> Tuple[str, ...]:
        return self.corpus.xss_payloads

    def check_response(self, outcome: Outcome, payload: str) -> Tuple[bool, bool]:
        """(reflected raw, reflected entity-encoded)"""
        body = outcome.body or ""
        return payload in body, _encoded(payload) in body

    def work_items(self, config: ProbeConfig) -> Iterator[Tuple[str, str]]:
        for param in config.parameters or self.corpus.xss_parameters:
            for payload in self.get_payloads():
                yield param, payload

    def probe(self, config: ProbeConfig, report: Report) -> None:
        vulnerable: List[str] = []
        total = 0

        with self.client() as client:
            for param, payload in self.paced(self.work_items(config)):
                total += 1
                out = client.send("POST", config.url, json={param: payload})
                if out.failed:
                    self.record(report, total, out, parameter=param, payload=_preview(payload))
                    continue

                reflected, encoded = self.check_response(out, payload)
                attempt = self.record(report, total, out,
                                      flags={"reflected": reflected,
                                             "properlyEncoded": encoded and not reflected},
                                      parameter=param, payload=_preview(payload))
                if reflected and not encoded:
                    attempt.fields["vulnerability"] = "Unencoded payload reflected in response"
                    vulnerable.append(param)
                    if self.logger:
                        self.logger.debug(f"Raw reflection for {param}")

        report.summary.update(totalTests=total, vulnerableParameters=vulnerable)

        confirmed = self.unique(vulnerable)
        if confirmed:
            report.add_finding(Severity.HIGH, "XSS vulnerability detected",
                               f"Vulnerable parameters: {', '.join(confirmed)}")
