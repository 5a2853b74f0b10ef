import pytest
from zerolist.core.origins import cors_headers, is_origin_allowed, parse_origin


@pytest.mark.parametrize("patterns", [[], None])
def test_empty_allow_list_admits_everything(patterns):
    assert is_origin_allowed("https://anything.test", patterns)
    assert is_origin_allowed("not a url", patterns)

def test_wildcard_matches_subdomains():
    patterns = ["*.example.com"]
    assert is_origin_allowed("https://a.example.com", patterns)
    assert is_origin_allowed("http://deep.a.example.com", patterns)
    assert not is_origin_allowed("https://badexample.com", patterns)
    assert not is_origin_allowed("https://example.com.evil.io", patterns)

def test_wildcard_matches_apex():
    assert is_origin_allowed("https://example.com", ["*.example.com"])

def test_full_origin_pattern_requires_exact_origin():
    patterns = ["https://app.example.com"]
    assert is_origin_allowed("https://app.example.com", patterns)
    assert is_origin_allowed("https://app.example.com:443", patterns)
    assert not is_origin_allowed("http://app.example.com", patterns)
    assert not is_origin_allowed("https://app.example.com:8443", patterns)

def test_full_origin_pattern_with_port():
    patterns = ["http://localhost:3000"]
    assert is_origin_allowed("http://localhost:3000", patterns)
    assert not is_origin_allowed("http://localhost:3001", patterns)

def test_bare_host_pattern_ignores_scheme():
    patterns = ["example.com"]
    assert is_origin_allowed("https://example.com", patterns)
    assert is_origin_allowed("http://example.com", patterns)
    assert not is_origin_allowed("https://www.example.com", patterns)

def test_bare_host_pattern_with_port():
    assert is_origin_allowed("http://localhost:5173", ["localhost:5173"])
    assert not is_origin_allowed("http://localhost", ["localhost:5173"])

def test_patterns_are_trimmed_and_case_insensitive():
    assert is_origin_allowed("https://App.Example.com", ["  *.EXAMPLE.com "])

def test_unparseable_origin_is_rejected():
    assert not is_origin_allowed("null", ["example.com"])
    assert not is_origin_allowed("example.com", ["example.com"])

def test_unparseable_pattern_never_matches():
    assert not is_origin_allowed("https://example.com", ["https://", "http://[::1"])

def test_first_match_wins_over_later_patterns():
    assert is_origin_allowed("https://b.test", ["a.test", "b.test"])

def test_parse_origin_drops_default_port():
    assert parse_origin("https://Example.com:443") == ("https://example.com", "example.com")
    assert parse_origin("http://example.com:8080") == ("http://example.com:8080", "example.com:8080")
    assert parse_origin("") is None

def test_cors_headers_echo_origin():
    headers = cors_headers("https://a.example.com")
    assert headers["Access-Control-Allow-Origin"] == "https://a.example.com"
    assert headers["Access-Control-Allow-Methods"] == "POST, GET, OPTIONS"
    assert "Access-Control-Max-Age" not in headers

    preflight = cors_headers("https://a.example.com", preflight=True)
    assert preflight["Access-Control-Allow-Headers"] == "Content-Type"
    assert preflight["Access-Control-Max-Age"] == "86400"
