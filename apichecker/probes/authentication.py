"""Authentication hygiene: six independent checks against one login endpoint."""

from typing import Optional

from apichecker.core.client import TargetClient
from apichecker.core.models import ProbeConfig, Report, Severity
from apichecker.core.severity import StatusTable
from apichecker.core.timing import analyze
from apichecker.probes.base import BaseProbe


class Authentication(BaseProbe):

    key = "authentication"
    name = "Authentication Security Test"
    timeout = 5.0
    delay = 0.1
    timing_samples = 5
    statuses = StatusTable("vulnerable", "weak", "good", "good", "secure")
    advice = {
        "vulnerable": ("URGENT: Critical authentication vulnerabilities detected",),
        "weak": ("Important authentication security issues found",),
        "good": ("Minor authentication improvements recommended",),
        "secure": ("Authentication appears to be secure",),
    }
    hardening = (
        "Implement strong password policies",
        "Use constant-time comparison for credentials",
        "Implement account lockout after failed attempts",
        "Use generic error messages that don't reveal user existence",
        "Implement multi-factor authentication (MFA)",
    )

    def probe(self, config: ProbeConfig, report: Report) -> None:
        with self.client() as client:
            self.check_empty_credentials(client, config, report)
            self.check_weak_passwords(client, config, report)
            if config.credentials:
                self.check_case_sensitivity(client, config, report)
            self.check_timing(client, config, report)
            self.check_error_messages(client, config, report)
        self.check_scheme(config, report)

    # ── individual checks ──────────────────────────────────────

    def _post(self, client: TargetClient, config: ProbeConfig, report: Report,
              check: str, body: dict, **fields):
        out = client.send("POST", config.url, json=body)
        self.record(report, len(report.details) + 1, out,
                    flags={"accepted": out.status_code == 200}, check=check, **fields)
        return out

    def _creds(self, config: ProbeConfig, username: str, password: str) -> dict:
        return {config.username_field: username, config.password_field: password}

    def check_empty_credentials(self, client, config, report) -> None:
        out = self._post(client, config, report, "emptyCredentials", {})
        if out.failed:
            report.summary["emptyCredentials"] = {"error": out.error}
            return
        report.summary["emptyCredentials"] = {"statusCode": out.status_code,
                                              "accepted": out.status_code == 200}
        if out.status_code == 200:
            report.add_finding(Severity.CRITICAL, "Empty credentials accepted",
                               "Authentication endpoint accepts requests with no credentials")

    def check_weak_passwords(self, client, config, report) -> Optional[str]:
        for password in self.paced(self.corpus.weak_passwords):
            out = self._post(client, config, report, "weakPassword",
                             self._creds(config, "admin", password), password=password)
            if out.status_code == 200:
                report.summary["weakPasswordAccepted"] = password
                report.add_finding(Severity.CRITICAL, "Weak password accepted",
                                   f'Weak password "{password}" was accepted')
                return password
        return None

    def check_case_sensitivity(self, client, config, report) -> None:
        username, password = config.credentials
        upper = self._post(client, config, report, "caseSensitivity",
                           self._creds(config, username.upper(), password), variant="upper")
        lower = self._post(client, config, report, "caseSensitivity",
                           self._creds(config, username.lower(), password), variant="lower")
        if upper.failed or lower.failed:
            report.summary["caseSensitivity"] = {"error": upper.error or lower.error}
            return
        both = upper.status_code == 200 and lower.status_code == 200
        report.summary["caseSensitivity"] = {"uppercase": upper.status_code,
                                             "lowercase": lower.status_code,
                                             "bothAccepted": both}
        if both:
            report.add_finding(Severity.MEDIUM, "Username is not case-sensitive",
                               "This could facilitate brute force attacks")

    def check_timing(self, client, config, report) -> None:
        timings = []
        for i in self.paced(range(self.timing_samples)):
            out = self._post(client, config, report, "timing",
                             self._creds(config, f"nonexistentuser{i}", "wrongpassword"))
            timings.append(out.elapsed_ms)

        stats = analyze(timings)
        report.summary["timingAnalysis"] = {
            "averageResponseTime": f"{stats.mean:.2f}ms",
            "standardDeviation": f"{stats.stdev:.2f}ms",
            "samples": stats.samples,
        }
        if stats.suspicious:
            report.add_finding(Severity.MEDIUM, "Possible timing attack vulnerability",
                               "Response times vary significantly, which could leak "
                               "information about valid usernames")

    def check_error_messages(self, client, config, report) -> None:
        out = self._post(client, config, report, "errorMessage",
                         self._creds(config, "testuser", "wrongpassword"))
        if out.failed:
            report.summary["errorMessage"] = {"error": out.error}
            return
        text = out.body.lower()
        if any(marker in text for marker in self.corpus.enumeration_markers):
            report.add_finding(Severity.MEDIUM, "Information disclosure in error messages",
                               "Error messages reveal whether username exists")
        report.summary["errorMessage"] = {"statusCode": out.status_code,
                                          "message": out.body[:500]}

    def check_scheme(self, config, report) -> None:
        if config.target_url.lower().startswith("http://"):
            report.add_finding(Severity.CRITICAL, "Authentication over HTTP",
                               "Credentials are transmitted in plain text without encryption")
            report.recommend("URGENT: Use HTTPS for all authentication endpoints")
