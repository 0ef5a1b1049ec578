"""Tests for the reflected XSS probe."""

import json

import httpx

from apichecker.core.corpus import XSS_PAYLOADS
from apichecker.core.models import ProbeConfig, Severity
from apichecker.probes.xss import XSS

CONFIG = ProbeConfig(target_url="http://api.test", endpoint="/api/comments",
                     parameters=("comment",))


def _echo(transform):
    def handler(request):
        body = json.loads(request.content)
        return httpx.Response(200, text=f"<p>{transform(body['comment'])}</p>")
    return handler


def test_raw_reflection_is_vulnerable(make_probe):
    report = make_probe(XSS, _echo(lambda v: v)).run(CONFIG)

    assert report.status == "vulnerable"
    assert report.summary["totalTests"] == len(XSS_PAYLOADS)
    (finding,) = report.findings
    assert finding.severity is Severity.HIGH
    assert finding.details == "Vulnerable parameters: comment"
    assert all(a.flags["reflected"] for a in report.details)


def test_encoded_reflection_is_protected(make_probe):
    encode = lambda v: v.replace("<", "&lt;").replace(">", "&gt;")  # noqa: E731
    report = make_probe(XSS, _echo(encode)).run(CONFIG)

    assert report.status == "protected"
    assert report.findings == []
    tagged = [a for a in report.details if "<" in XSS_PAYLOADS[a.index - 1]]
    assert tagged and all(a.flags["properlyEncoded"] for a in tagged)


def test_long_payloads_are_truncated_in_details(make_probe):
    report = make_probe(XSS, lambda r: httpx.Response(200, text="ok")).run(CONFIG)
    previews = [a.fields["payload"] for a in report.details]
    assert all(len(p) <= 53 for p in previews)
    assert any(p.endswith("...") for p in previews)
