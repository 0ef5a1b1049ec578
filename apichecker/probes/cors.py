"""CORS misconfiguration: preflight the target with hostile origins."""

from typing import Dict, Optional, Set, Tuple

from apichecker.core.client import Outcome
from apichecker.core.models import ProbeConfig, Report, Severity
from apichecker.core.severity import StatusTable
from apichecker.probes.base import BaseProbe


def _split(value: Optional[str]):
    return [v.strip() for v in value.split(",")] if value else []


class CORS(BaseProbe):

    key = "cors"
    name = "CORS Configuration Test"
    timeout = 5.0
    delay = 0.1
    statuses = StatusTable("vulnerable", "vulnerable", "weak", "weak", "good")
    advice = {
        "protected": (
            "CORS is not enabled or is very restrictive",
            "If you need CORS, enable it only for trusted origins",
        ),
        "vulnerable": (
            "URGENT: Fix critical CORS misconfigurations",
            "Never use Access-Control-Allow-Origin: * with credentials",
            "Whitelist only specific trusted domains",
            "Avoid reflecting the Origin header without validation",
        ),
        "weak": (
            "CORS is enabled but has some security concerns",
            "Review and restrict allowed origins",
        ),
        "good": (
            "CORS configuration appears secure",
            "Regularly review allowed origins",
        ),
    }
    hardening = (
        "Use CORS only when necessary",
        "Implement additional authentication for sensitive endpoints",
    )

    def target_of(self, config: ProbeConfig) -> str:
        return config.target_url

    @staticmethod
    def cors_headers(outcome: Outcome) -> Dict[str, Optional[str]]:
        return {
            "allowOrigin": outcome.header("access-control-allow-origin"),
            "allowMethods": outcome.header("access-control-allow-methods"),
            "allowHeaders": outcome.header("access-control-allow-headers"),
            "allowCredentials": outcome.header("access-control-allow-credentials"),
            "maxAge": outcome.header("access-control-max-age"),
        }

    def check_response(self, origin: str, cors: Dict[str, Optional[str]]):
        """Yield (severity, description, details) for one preflight answer."""
        allow = cors["allowOrigin"]
        if allow == "*":
            yield (Severity.HIGH, "Wildcard (*) CORS origin allowed",
                   "Access-Control-Allow-Origin: * allows any domain to make requests")
        if allow == "null":
            yield (Severity.MEDIUM, "Null origin allowed",
                   "Allowing null origin can be exploited by sandboxed iframes")
        if allow == origin and origin not in ("*", "null"):
            yield (Severity.HIGH, "Untrusted origin accepted",
                   f"The API accepted requests from untrusted origin: {origin}")
        if cors["allowCredentials"] == "true" and allow == "*":
            yield (Severity.CRITICAL, "Credentials allowed with wildcard origin",
                   "This combination is dangerous and not allowed by browsers")

    def probe(self, config: ProbeConfig, report: Report) -> None:
        enabled = credentials = False
        origins, methods, headers = [], [], []
        seen: Set[Tuple[Severity, str, str]] = set()

        with self.client() as client:
            for index, origin in self.paced(enumerate(self.corpus.cors_test_origins, 1)):
                out = client.send("OPTIONS", config.target_url, headers={
                    "Origin": origin,
                    "Access-Control-Request-Method": "POST",
                    "Access-Control-Request-Headers": "Content-Type",
                })
                if out.failed:
                    self.record(report, index, out, origin=origin)
                    continue

                cors = self.cors_headers(out)
                allow = cors["allowOrigin"]
                self.record(report, index, out, flags={"accepted": bool(allow)},
                            origin=origin, headers=cors)
                if not allow:
                    continue

                enabled = True
                if allow not in origins:
                    origins.append(allow)
                if cors["allowCredentials"] == "true":
                    credentials = True
                if cors["allowMethods"]:
                    methods = _split(cors["allowMethods"])
                if cors["allowHeaders"]:
                    headers = _split(cors["allowHeaders"])

                # the same misconfiguration seen from several origins is one finding
                for finding in self.check_response(origin, cors):
                    if finding not in seen:
                        seen.add(finding)
                        report.add_finding(*finding)

        report.summary.update(corsEnabled=enabled, allowedOrigins=origins,
                              allowedMethods=methods, allowedHeaders=headers,
                              allowsCredentials=credentials)

    def clean_label(self, report: Report) -> Optional[str]:
        return None if report.summary.get("corsEnabled") else "protected"
