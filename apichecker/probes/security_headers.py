from typing import Sequence

from apichecker.core.models import ProbeConfig, Report, Severity
from apichecker.core.severity import StatusTable
from apichecker.probes.base import BaseProbe


class SecurityHeaders(BaseProbe):
    """One GET against the target; every registry header missing is a finding."""

    key = "security-headers"
    name = "Security Headers Test"
    timeout = 5.0
    statuses = StatusTable("vulnerable", "vulnerable", "weak", "good", "excellent")
    hardening = (
        "Use security header testing tools regularly",
        "Review and update security headers as standards evolve",
    )

    def target_of(self, config: ProbeConfig) -> str:
        return config.target_url

    def probe(self, config: ProbeConfig, report: Report) -> None:
        with self.client() as client:
            out = client.send("GET", config.target_url)
        self.record(report, 1, out, url=config.target_url)
        if out.failed:
            return

        present, missing, headers = [], [], {}
        for rule in self.corpus.security_headers:
            value = out.header(rule.header)
            if value:
                present.append(rule.name)
                headers[rule.name] = {"present": True, "value": value, "status": "OK"}
            else:
                missing.append(rule.name)
                headers[rule.name] = {"present": False, "severity": rule.severity.value,
                                      "recommendation": rule.remediation}
                report.add_finding(rule.severity, f"Missing {rule.name}", rule.description)

        server = out.header("server")
        if server:
            headers["Server Header"] = {
                "present": True, "value": server,
                "warning": "Server header exposes server information",
                "recommendation": "Consider removing or obfuscating the Server header",
            }

        powered_by = out.header("x-powered-by")
        if powered_by:
            headers["X-Powered-By Header"] = {
                "present": True, "value": powered_by,
                "warning": "X-Powered-By header exposes technology stack",
                "recommendation": "Remove X-Powered-By header to avoid information disclosure",
            }
            report.add_finding(Severity.LOW, "Information disclosure via X-Powered-By header",
                               f"Exposes: {powered_by}")

        report.summary.update(presentHeaders=present, missingHeaders=missing, headers=headers)

    def recommendations_for(self, report: Report, status: str) -> Sequence[str]:
        sev = report.severities
        if status == "vulnerable":
            return (f"URGENT: {sev.count(Severity.HIGH)} critical security headers are missing",)
        if status == "weak":
            return (f"{sev.count(Severity.MEDIUM)} important security headers are missing",)
        if status == "good":
            return ("Consider adding remaining security headers for defense in depth",)
        return ("All major security headers are present",)
