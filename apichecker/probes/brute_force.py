"""Brute force protection: does the login endpoint ever push back?"""

from apichecker.core.errors import ProbeInputError
from apichecker.core.models import ProbeConfig, Report, Severity
from apichecker.probes.base import BaseProbe

BLOCKING_STATUSES = (429, 403)


class BruteForce(BaseProbe):

    key = "brute-force"
    name = "Brute Force Protection Test"
    timeout = 5.0
    delay = 0.1
    username = "testuser"
    weak_ratio = 0.3
    advice = {
        "vulnerable": (
            "Implement rate limiting on authentication endpoints",
            "Add account lockout after multiple failed attempts",
            "Implement CAPTCHA after several failed login attempts",
        ),
        "weak": (
            "Strengthen rate limiting rules",
            "Reduce the threshold for account lockout",
        ),
        "protected": (
            "Brute force protection is working well",
        ),
    }
    hardening = ("Consider adding additional layers like CAPTCHA for enhanced security",)

    def validate(self, config: ProbeConfig) -> None:
        super().validate(config)
        if config.attempts < 1:
            raise ProbeInputError("attempts must be at least 1")
        if not self.corpus.common_passwords:
            raise ProbeInputError("password dictionary is empty")

    def work_items(self, config: ProbeConfig):
        passwords = self.corpus.common_passwords
        for i in range(config.attempts):
            yield i + 1, passwords[i % len(passwords)]

    def probe(self, config: ProbeConfig, report: Report) -> None:
        blocked = succeeded = 0
        times = []

        with self.client() as client:
            for index, password in self.paced(self.work_items(config)):
                out = client.send("POST", config.url, json={
                    config.username_field: self.username,
                    config.password_field: password,
                })
                is_blocked = out.status_code in BLOCKING_STATUSES
                self.record(report, index, out, flags={"blocked": is_blocked},
                            password=password)
                if out.failed:
                    continue
                times.append(out.elapsed_ms)
                if is_blocked:
                    blocked += 1
                elif out.status_code == 200:
                    succeeded += 1

        self.ensure_reachable(report)
        answered = len(times)

        report.summary.update(
            totalAttempts=config.attempts,
            answeredAttempts=answered,
            successfulAttempts=succeeded,
            blockedAttempts=blocked,
            averageResponseTime=sum(times) / len(times) if times else 0,
        )

        if blocked == 0:
            report.add_finding(Severity.HIGH, "No brute force protection detected",
                               f"All {answered} answered attempts were processed without "
                               f"any blocking mechanism")
        elif blocked < answered * self.weak_ratio:
            report.add_finding(Severity.MEDIUM, "Weak brute force protection",
                               f"Only {blocked} out of {answered} answered attempts were blocked")
