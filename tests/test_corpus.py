"""Tests for the payload corpus and its JSON overrides."""

import json

import pytest

from apichecker.core.corpus import DEFAULT_CORPUS, load_corpus
from apichecker.core.errors import CorpusError
from apichecker.core.models import Severity


def _write(tmp_path, data):
    path = tmp_path / "corpus.json"
    path.write_text(json.dumps(data) if not isinstance(data, str) else data)
    return str(path)


def test_default_corpus_contents():
    assert len(DEFAULT_CORPUS.common_passwords) == 20
    assert DEFAULT_CORPUS.common_passwords[0] == "password"
    assert DEFAULT_CORPUS.weak_passwords == ("123456", "password", "admin", "12345678", "qwerty")
    assert "/.env" in DEFAULT_CORPUS.sensitive_paths
    assert DEFAULT_CORPUS.cors_test_origins == ("http://evil.com",
                                                "https://malicious.example.com",
                                                "null", "*")
    headers = {r.header: r.severity for r in DEFAULT_CORPUS.security_headers}
    assert headers["strict-transport-security"] is Severity.HIGH
    assert headers["x-xss-protection"] is Severity.LOW


def test_override_replaces_named_lists_only(tmp_path):
    corpus = load_corpus(_write(tmp_path, {
        "version": 2,
        "common_passwords": ["hunter2", "correcthorse"],
        "comment": "ignored",
    }))
    assert corpus.version == "2"
    assert corpus.common_passwords == ("hunter2", "correcthorse")
    assert corpus.sql_payloads == DEFAULT_CORPUS.sql_payloads


def test_override_header_rules(tmp_path):
    corpus = load_corpus(_write(tmp_path, {"security_headers": [
        {"header": "Cross-Origin-Opener-Policy", "severity": "medium"},
    ]}))
    (rule,) = corpus.security_headers
    assert rule.header == "cross-origin-opener-policy"
    assert rule.name == "Cross-Origin-Opener-Policy"
    assert rule.severity is Severity.MEDIUM


@pytest.mark.parametrize("data, message", [
    ("{not json", "not valid JSON"),
    ([1, 2], "JSON object"),
    ({"sql_payloads": "' OR 1=1"}, "must be a list"),
    ({"security_headers": [{"header": "x", "severity": "SEVERE"}]}, "invalid header rule"),
])
def test_bad_override_raises(tmp_path, data, message):
    with pytest.raises(CorpusError, match=message):
        load_corpus(_write(tmp_path, data))


def test_missing_file_raises(tmp_path):
    with pytest.raises(CorpusError, match="does not exist"):
        load_corpus(str(tmp_path / "nope.json"))
