from apichecker.core.errors import ProbeInputError
from apichecker.core.models import ProbeConfig, Report, Severity
from apichecker.core.severity import StatusTable
from apichecker.core.timing import analyze
from apichecker.probes.base import BaseProbe


class TimingAttacks(BaseProbe):
    """N failed logins with distinct users; flags high relative variance."""

    key = "timing-attacks"
    name = "Timing Attack Test"
    timeout = 5.0
    delay = 0.1
    statuses = StatusTable("vulnerable", "vulnerable", "vulnerable", "vulnerable", "protected")
    hardening = ("Use constant-time comparison",)

    def validate(self, config: ProbeConfig) -> None:
        super().validate(config)
        if config.samples < 1:
            raise ProbeInputError("samples must be at least 1")

    def probe(self, config: ProbeConfig, report: Report) -> None:
        timings = []
        with self.client() as client:
            for i in self.paced(range(config.samples)):
                out = client.send("POST", config.url, json={
                    config.username_field: f"user{i}",
                    config.password_field: f"pass{i}",
                })
                # timeouts still say something about the target: keep their duration
                timings.append(out.elapsed_ms)
                self.record(report, i + 1, out, username=f"user{i}")

        self.ensure_reachable(report)
        stats = analyze(timings)
        report.summary.update(samples=config.samples, timing=stats.as_dict())
        if stats.suspicious:
            report.add_finding(Severity.MEDIUM, "Timing attack vulnerability",
                               "Response times vary significantly")
