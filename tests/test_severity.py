"""Tests for severity aggregation and status tables."""

from apichecker.core.models import Finding, Severity
from apichecker.core.severity import StatusTable, classify, highest

TABLE = StatusTable("vulnerable", "weak", "good", "good", "secure")


def _f(sev):
    return Finding(sev, "x")


def test_highest_of_nothing_is_none():
    assert highest([]) is None


def test_highest_picks_worst():
    assert highest([_f(Severity.LOW), _f(Severity.CRITICAL), _f(Severity.MEDIUM)]) \
        is Severity.CRITICAL


def test_highest_severity_decides_status():
    assert classify([_f(Severity.LOW), _f(Severity.HIGH)], TABLE) == "weak"
    assert classify([_f(Severity.MEDIUM)], TABLE) == "good"
    assert classify([], TABLE) == "secure"


def test_clean_override_only_without_findings():
    assert TABLE.resolve([], clean="protected") == "protected"
    assert TABLE.resolve([_f(Severity.LOW)], clean="protected") == "good"


def test_clean_override_does_not_hide_low_tier_sharing_clean_label():
    table = StatusTable("vulnerable", "vulnerable", "weak", "protected", "protected")
    assert table.resolve([_f(Severity.LOW)], clean="exposed") == "protected"
