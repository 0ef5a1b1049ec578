"""Tests for the offline JWT analysis probe."""

import jwt
import pytest

from apichecker.core.models import ProbeConfig, Severity
from apichecker.probes.jwt_token import JWTProbe

NOW = 1_700_000_000
STRONG = "k7Qv9mZ2xR4tW8yB1nL5pE3sH6jD0cFa"


@pytest.fixture
def probe(pacer):
    return JWTProbe(now=lambda: NOW, pacer=pacer)


def _token(claims, key=STRONG, alg="HS256"):
    return jwt.encode(claims, key, algorithm=alg)


def test_weak_secret_is_critical(probe):
    token = _token({"sub": "42", "exp": NOW + 3600}, key="secret")
    report = probe.run(ProbeConfig(token=token))

    assert report.status == "vulnerable"
    assert report.summary["weakSecret"] == "secret"
    assert report.summary["algorithm"] == "HS256"
    assert [f.description for f in report.findings] == ["Weak JWT secret detected"]
    assert report.findings[0].severity is Severity.CRITICAL


def test_weak_secret_found_even_when_expired(probe):
    token = _token({"sub": "42", "exp": NOW - 60}, key="jwt-secret")
    report = probe.run(ProbeConfig(token=token))
    assert report.summary["weakSecret"] == "jwt-secret"
    assert report.summary["expiration"]["expired"] is True
    assert {f.severity for f in report.findings} == {Severity.CRITICAL, Severity.LOW}


def test_sound_token_is_secure(probe):
    report = probe.run(ProbeConfig(token=_token({"sub": "42", "iss": "auth", "exp": NOW + 900})))

    assert report.status == "secure"
    assert report.findings == []
    assert report.summary["standardClaims"] == {"sub": "42", "iss": "auth", "exp": NOW + 900}
    assert report.summary["expiration"]["timeRemaining"] == "15 minutes"
    assert "Using symmetric algorithm - ensure secret is strong and secure" \
        in report.recommendations
    assert "JWT token appears to be secure" in report.recommendations


def test_missing_expiration_is_high(probe):
    report = probe.run(ProbeConfig(token=_token({"sub": "42"})))
    assert [f.severity for f in report.findings] == [Severity.HIGH]
    assert report.status == "weak"
    assert "Always set an expiration time for JWT tokens" in report.recommendations


def test_long_lived_token_is_medium(probe):
    report = probe.run(ProbeConfig(token=_token({"exp": NOW + 7 * 24 * 3600})))
    assert [f.description for f in report.findings] == ["Token expiration time is too long"]
    assert report.status == "good"


def test_sensitive_claims_are_critical(probe):
    token = _token({"exp": NOW + 60, "password": "hunter2", "user_api_key": "abc"})
    report = probe.run(ProbeConfig(token=token))
    details = sorted(f.details for f in report.findings)
    assert details == ["Possible sensitive field detected: api_key",
                       "Possible sensitive field detected: password"]
    assert report.status == "vulnerable"


def test_alg_none_is_critical(probe):
    token = jwt.encode({"sub": "42", "exp": NOW + 60}, None, algorithm="none")
    report = probe.run(ProbeConfig(token=token))
    assert report.findings[0].description == 'Algorithm set to "none"'
    assert "weakSecret" not in report.summary
    assert report.status == "vulnerable"


def test_missing_token_is_an_input_error(probe):
    report = probe.run(ProbeConfig(target_url="http://ignored.test"))
    assert report.status == "error"
    assert report.error == "No token provided"
    assert report.target == ""


def test_malformed_token_is_an_input_error(probe):
    report = probe.run(ProbeConfig(token="not-a-jwt"))
    assert report.status == "error"
    assert report.error.startswith("Invalid JWT token format")
