"""Tests for the orchestrator."""

import httpx
import pytest

from apichecker.core.engine import BATCH_PAUSE, Engine
from apichecker.core.errors import UnknownProbeError
from apichecker.core.models import ProbeConfig
from apichecker.probes.security_headers import SecurityHeaders


@pytest.fixture
def engine(pacer, clock):
    return Engine(pacer=pacer, clock=clock,
                  transport=httpx.MockTransport(lambda r: httpx.Response(200, text="ok")))


def test_keys_in_declaration_order(engine):
    assert engine.keys() == [
        "brute-force", "rate-limiting", "sql-injection", "xss", "security-headers",
        "cors", "jwt", "authentication", "discover-endpoints", "timing-attacks",
    ]


def test_unknown_probe_raises(engine):
    with pytest.raises(UnknownProbeError) as exc:
        engine.run("fuzz", ProbeConfig(target_url="http://api.test"))
    assert isinstance(exc.value, KeyError)
    assert str(exc.value) == "unknown probe: 'fuzz'"


def test_run_single_probe(engine):
    report = engine.run("brute-force", ProbeConfig(target_url="http://api.test",
                                                   endpoint="/login", attempts=3))
    assert report.test_name == "Brute Force Protection Test"
    assert len(report.details) == 3


def test_batch_config_defaults_and_overrides(engine):
    sqli = engine.batch_config("sql-injection", "http://api.test")
    assert sqli.url == "http://api.test/api/users"
    assert sqli.parameters == ("id", "user", "search")

    auth = engine.batch_config("authentication", "http://api.test")
    assert auth.credentials == ("testuser", "testpass")

    bf = engine.batch_config("brute-force", "http://api.test", {"brute-force": {"attempts": 5}})
    assert bf.attempts == 5
    assert bf.endpoint == "/login"


def test_run_all_skips_jwt_and_pauses_between_probes(engine, pacer):
    reports = engine.run_all("http://api.test", {"brute-force": {"attempts": 2},
                                                 "rate-limiting": {"request_count": 5},
                                                 "timing-attacks": {"samples": 3}})
    names = [r.test_name for r in reports]
    assert len(reports) == 9
    assert "JWT Token Security Test" not in names
    assert names[0] == "Brute Force Protection Test"
    assert names[-1] == "Timing Attack Test"
    assert pacer.pauses.count(BATCH_PAUSE) == 8
    assert all(r.status != "error" for r in reports)


def test_run_all_is_best_effort(engine, monkeypatch):
    def explode(self, config, report):
        raise RuntimeError("parser blew up")

    monkeypatch.setattr(SecurityHeaders, "probe", explode)
    reports = engine.run_all("http://api.test", {
        "brute-force": {"attempts": 1},
        "rate-limiting": {"request_count": 1},
        "timing-attacks": {"samples": 1},
        "xss": {"no_such_field": True},
    })
    by_name = {r.test_name: r for r in reports}
    assert len(reports) == 9
    assert by_name["Security Headers Test"].error == "parser blew up"
    assert by_name["XSS (Cross-Site Scripting) Test"].status == "error"
    assert by_name["Timing Attack Test"].status != "error"
