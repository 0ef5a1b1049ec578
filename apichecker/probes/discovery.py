"""Endpoint discovery: which well-known paths answer below 400?"""

from typing import Optional

from apichecker.core.models import ProbeConfig, Report, Severity
from apichecker.core.severity import StatusTable
from apichecker.probes.base import BaseProbe

SENSITIVE_MARKERS = ("admin", "debug", "config")
CRITICAL_MARKERS = (".env", "backup", "db")
DOCS_MARKERS = ("swagger", "api-docs", "docs")


class EndpointDiscovery(BaseProbe):
    """
    GETs each path with redirects disabled, so a login redirect does not
    count as a hit. Paths come from the caller or the corpus.
    """

    key = "discover-endpoints"
    name = "Endpoint Discovery Test"
    timeout = 3.0
    delay = 0.05
    follow_redirects = False
    exposed_after = 5
    statuses = StatusTable("vulnerable", "weak", "weak", "weak", "protected")
    advice = {
        "vulnerable": (
            "URGENT: Critical endpoints are publicly accessible",
            "Restrict access to sensitive endpoints immediately",
        ),
        "weak": (
            "Some sensitive endpoints are exposed",
            "Implement proper access controls",
        ),
        "exposed": (
            "Many endpoints are discoverable",
            "Consider implementing endpoint authentication",
        ),
        "protected": ("Endpoint exposure is minimal",),
    }
    hardening = (
        "Use authentication for all sensitive endpoints",
        "Disable debug/development endpoints in production",
        "Implement rate limiting on discovery attempts",
        "Monitor for endpoint scanning attempts",
    )

    def target_of(self, config: ProbeConfig) -> str:
        return config.target_url

    def paths(self, config: ProbeConfig):
        return config.common_paths or self.corpus.sensitive_paths

    def probe(self, config: ProbeConfig, report: Report) -> None:
        paths = self.paths(config)
        found = []

        with self.client() as client:
            for index, path in self.paced(enumerate(paths, 1)):
                out = client.send("GET", f"{config.target_url}{path}")
                hit = not out.failed and out.status_code < 400
                attempt = self.record(report, index, out, flags={"found": hit}, path=path)
                if out.failed:
                    continue
                attempt.fields["size"] = out.size
                if not hit:
                    continue

                found.append(path)
                if self.logger:
                    self.logger.debug(f"Found {path} (HTTP {out.status_code})")
                if any(m in path for m in SENSITIVE_MARKERS):
                    report.add_finding(Severity.HIGH, f"Sensitive endpoint exposed: {path}",
                                       f"Status: {out.status_code}")
                if any(m in path for m in CRITICAL_MARKERS):
                    report.add_finding(Severity.CRITICAL, f"Critical endpoint exposed: {path}",
                                       "This endpoint may expose sensitive configuration or data")
                if any(m in path for m in DOCS_MARKERS):
                    attempt.fields["note"] = "API documentation endpoint found"
                if "graphql" in path:
                    attempt.fields["note"] = "GraphQL endpoint found - check for introspection"

        report.summary.update(totalPaths=len(paths), foundEndpoints=found)

    def clean_label(self, report: Report) -> Optional[str]:
        if len(report.summary.get("foundEndpoints", ())) > self.exposed_after:
            return "exposed"
        return None
