"""JWT token analysis. Offline: the token is inspected, the target is never contacted."""

import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import jwt

from apichecker.core.errors import ProbeInputError
from apichecker.core.models import ProbeConfig, Report, Severity
from apichecker.core.severity import StatusTable
from apichecker.probes.base import BaseProbe

HMAC_ALGORITHMS = ["HS256", "HS384", "HS512"]
STANDARD_CLAIMS = ("iss", "sub", "aud", "exp", "nbf", "iat", "jti")
MAX_LIFETIME_S = 24 * 60 * 60

# Signature only: an expired token signed with "secret" is still a weak-secret token.
_SIGNATURE_ONLY = {
    "verify_signature": True,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
    "verify_aud": False,
    "verify_iss": False,
    "verify_sub": False,
    "verify_jti": False,
}
_UNVERIFIED = dict(_SIGNATURE_ONLY, verify_signature=False)


class JWTProbe(BaseProbe):

    key = "jwt"
    name = "JWT Token Security Test"
    statuses = StatusTable("vulnerable", "weak", "good", "good", "secure")
    advice = {
        "vulnerable": ("URGENT: Critical JWT vulnerabilities detected",),
        "weak": ("Important JWT security issues found",),
        "good": ("Minor JWT security improvements recommended",),
        "secure": ("JWT token appears to be secure",),
    }
    hardening = (
        "Use strong, randomly generated secrets",
        "Set appropriate expiration times",
        "Never store sensitive data in JWT payload",
        "Implement token refresh mechanism",
    )

    def __init__(self, now=time.time, **kwargs):
        super().__init__(**kwargs)
        self.now = now

    def target_of(self, config: ProbeConfig) -> str:
        return ""

    def validate(self, config: ProbeConfig) -> None:
        if not config.token:
            raise ProbeInputError("No token provided")

    def probe(self, config: ProbeConfig, report: Report) -> None:
        token = config.token.strip()
        report.summary["tokenProvided"] = True
        try:
            header = jwt.get_unverified_header(token)
            claims = jwt.decode(token, options=_UNVERIFIED)
        except jwt.InvalidTokenError as exc:
            raise ProbeInputError(f"Invalid JWT token format: {exc}") from exc

        report.summary.update(header=header, payload=claims)
        self.check_algorithm(header, report)
        self.check_expiration(claims, report)
        self.check_sensitive_fields(claims, report)
        report.summary["standardClaims"] = {c: claims[c] for c in STANDARD_CLAIMS
                                            if claims.get(c)}
        self.check_weak_secret(token, report)

    def check_algorithm(self, header: Dict[str, Any], report: Report) -> None:
        alg = str(header.get("alg") or "")
        report.summary["algorithm"] = alg
        if alg.lower() == "none":
            report.add_finding(Severity.CRITICAL, 'Algorithm set to "none"',
                               "Token can be forged without a signature")
        if alg.startswith("HS"):
            report.summary["algorithmType"] = "Symmetric (HMAC)"
            report.recommend("Using symmetric algorithm - ensure secret is strong and secure")
        elif alg.startswith(("RS", "ES")):
            report.summary["algorithmType"] = "Asymmetric (RSA/ECDSA)"
            report.recommend("Using asymmetric algorithm - good for distributed systems")

    def check_expiration(self, claims: Dict[str, Any], report: Report) -> None:
        exp = claims.get("exp")
        if not isinstance(exp, (int, float)) or isinstance(exp, bool):
            report.add_finding(Severity.HIGH, "No expiration claim (exp)",
                               "Token never expires, which is a security risk")
            report.recommend("Always set an expiration time for JWT tokens")
            return

        remaining = exp - self.now()
        expires = datetime.fromtimestamp(exp, tz=timezone.utc).isoformat()
        report.summary["expiration"] = {
            "timestamp": exp,
            "date": expires,
            "expired": remaining < 0,
            "timeRemaining": f"{int(remaining // 60)} minutes" if remaining > 0 else "Expired",
        }
        if remaining < 0:
            report.add_finding(Severity.LOW, "Token is expired", f"Expired on {expires}")
        if remaining > MAX_LIFETIME_S:
            report.add_finding(Severity.MEDIUM, "Token expiration time is too long",
                               "Long-lived tokens increase security risk if compromised")

    def check_sensitive_fields(self, claims: Dict[str, Any], report: Report) -> None:
        keys = [k.lower() for k in claims]
        for field in self.corpus.jwt_sensitive_fields:
            if any(field.lower() in k for k in keys):
                report.add_finding(Severity.CRITICAL, "Sensitive data in JWT payload",
                                   f"Possible sensitive field detected: {field}")

    def check_weak_secret(self, token: str, report: Report) -> Optional[str]:
        """First dictionary secret the signature verifies with, if any."""
        for secret in self.corpus.jwt_weak_secrets:
            try:
                jwt.decode(token, secret, algorithms=HMAC_ALGORITHMS, options=_SIGNATURE_ONLY)
            except jwt.PyJWTError:
                continue
            report.summary["weakSecret"] = secret
            report.add_finding(Severity.CRITICAL, "Weak JWT secret detected",
                               f'Token can be verified with weak secret: "{secret}"')
            return secret
        return None
