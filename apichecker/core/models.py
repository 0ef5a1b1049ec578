"""Shared data models for the API checker."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple


class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return _RANKS[self]


_RANKS = {Severity.LOW: 1, Severity.MEDIUM: 2,
          Severity.HIGH: 3, Severity.CRITICAL: 4}


@dataclass(frozen=True)
class Finding:
    """A single vulnerability finding."""
    severity: Severity
    description: str
    details: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"severity": self.severity.value,
                "description": self.description,
                "details": self.details}

    def __str__(self):
        return f"[{self.severity.value}] {self.description}: {self.details}"


@dataclass
class Attempt:
    """One request sent to the target: the audit trail of a run."""
    index: int
    status_code: Optional[int] = None
    elapsed_ms: float = 0.0
    error: Optional[str] = None
    fields: Dict[str, Any] = field(default_factory=dict)
    flags: Dict[str, bool] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"attempt": self.index}
        out.update(self.fields)
        if self.error is not None:
            out["error"] = self.error
        else:
            out["statusCode"] = self.status_code
        out["responseTime"] = self.elapsed_ms
        out.update(self.flags)
        return out


@dataclass
class Report:
    """Outcome of one probe run. Mutated while the probe runs, finalized once."""
    test_name: str
    target: str
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat())
    status: str = "unknown"
    findings: List[Finding] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    summary: Dict[str, Any] = field(default_factory=dict)
    details: List[Attempt] = field(default_factory=list)
    error: Optional[str] = None

    def add_finding(self, severity: Severity, description: str, details: str = "") -> Finding:
        finding = Finding(severity, description, details)
        self.findings.append(finding)
        return finding

    def add_attempt(self, attempt: Attempt) -> Attempt:
        self.details.append(attempt)
        return attempt

    def recommend(self, *advice: str) -> None:
        self.recommendations.extend(advice)

    def fail(self, message: str) -> None:
        self.status = "error"
        self.error = message

    @property
    def severities(self) -> List[Severity]:
        return [f.severity for f in self.findings]

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serialisable representation of the report."""
        data: Dict[str, Any] = {
            "testName": self.test_name,
            "timestamp": self.timestamp,
            "targetUrl": self.target,
            "status": self.status,
        }
        data.update(self.summary)
        data["findings"] = [f.to_dict() for f in self.findings]
        data["recommendations"] = list(self.recommendations)
        data["details"] = [a.to_dict() for a in self.details]
        if self.error is not None:
            data["error"] = self.error
        return data


# ── caller inputs ──────────────────────────────────────────────

_CAMEL = {
    "targetUrl": "target_url",
    "usernameField": "username_field",
    "passwordField": "password_field",
    "requestCount": "request_count",
    "timeWindow": "time_window",
    "commonPaths": "common_paths",
    "maxConcurrency": "max_concurrency",
}


@dataclass(frozen=True)
class ProbeConfig:
    """Per-probe caller input. Immutable for the duration of a run."""
    target_url: str = ""
    endpoint: str = ""
    parameters: Tuple[str, ...] = ()
    username_field: str = "username"
    password_field: str = "password"
    attempts: int = 50
    request_count: int = 100
    time_window: int = 1000
    samples: int = 20
    credentials: Optional[Tuple[str, str]] = None
    common_paths: Tuple[str, ...] = ()
    token: Optional[str] = None
    max_concurrency: Optional[int] = None

    @property
    def url(self) -> str:
        return f"{self.target_url}{self.endpoint}"

    @classmethod
    def fields_from_dict(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Map a request body onto config field names and types. Accepts the
        camelCase field names of the HTTP API as well as the attribute
        names. Unknown keys and nulls are ignored; malformed values raise
        ValueError.
        """
        kwargs: Dict[str, Any] = {}
        names = set(cls.__dataclass_fields__)
        for key, value in data.items():
            name = _CAMEL.get(key, key)
            if name not in names or value is None:
                continue
            if name in ("parameters", "common_paths"):
                if isinstance(value, str):
                    value = (value,)
                elif not isinstance(value, (list, tuple)):
                    raise ValueError(f"{key} must be a list of strings")
                value = tuple(str(v) for v in value)
            elif name == "credentials":
                if isinstance(value, Mapping):
                    user, pwd = value.get("username"), value.get("password")
                    value = (str(user), str(pwd)) if user and pwd else None
                elif isinstance(value, (list, tuple)) and len(value) == 2:
                    value = (str(value[0]), str(value[1])) if all(value) else None
                else:
                    raise ValueError(f"{key} must be an object with username and password")
            elif name in ("attempts", "request_count", "time_window",
                          "samples", "max_concurrency"):
                value = int(value)
            kwargs[name] = value
        return kwargs

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProbeConfig":
        return cls(**cls.fields_from_dict(data))
