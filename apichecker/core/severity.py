"""Severity aggregation: findings in, one status label out."""

from dataclasses import dataclass
from typing import Iterable, Optional

from apichecker.core.models import Finding, Severity


def highest(findings: Iterable[Finding]) -> Optional[Severity]:
    """Worst severity present, or None when there are no findings."""
    worst: Optional[Severity] = None
    for finding in findings:
        if worst is None or finding.severity.rank > worst.rank:
            worst = finding.severity
    return worst


@dataclass(frozen=True)
class StatusTable:
    """
    One status label per severity tier. Each probe brings its own table,
    the precedence rule is shared: the highest severity present decides.
    """
    critical: str
    high: str
    medium: str
    low: str
    clean: str

    def label(self, severity: Optional[Severity]) -> str:
        if severity is None:
            return self.clean
        return {
            Severity.CRITICAL: self.critical,
            Severity.HIGH: self.high,
            Severity.MEDIUM: self.medium,
            Severity.LOW: self.low,
        }[severity]

    def resolve(self, findings: Iterable[Finding], clean: Optional[str] = None) -> str:
        """*clean* replaces the clean label when a probe derives it from observations."""
        worst = highest(findings)
        if worst is None and clean is not None:
            return clean
        return self.label(worst)


def classify(findings: Iterable[Finding], table: StatusTable) -> str:
    return table.resolve(findings)
