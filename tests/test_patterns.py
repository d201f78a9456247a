"""
Test turning file and directory names into domain matchers.
"""

from pytest import raises

from begone import DomainMatcher, compile_domain
from begone._patterns import parse_filename, parse_dirname


def test_parse_filename():
    assert parse_filename("example.com.html") == ("example.com", False)
    assert parse_filename("example.com.json") == ("example.com", False)
    assert parse_filename("example.com.HTML") == ("example.com", False)
    assert parse_filename("*.example.com.html") == ("example.com", True)
    assert parse_filename("default.html") == ("default", False)

    # Unsupported extensions
    assert parse_filename("example.com.txt") is None
    assert parse_filename("example.com.htm") is None
    assert parse_filename("README") is None
    assert parse_filename("notes.md") is None


def test_parse_dirname():
    # Directories are never rejected on their extension
    assert parse_dirname("example.com") == ("example.com", False)
    assert parse_dirname("*.example.com") == ("example.com", True)
    assert parse_dirname("site.txt") == ("site.txt", False)


def test_exact_domain():
    m = compile_domain("example.com")
    assert isinstance(m, DomainMatcher)
    assert not m.is_wildcard
    assert m.domain == "example.com"
    assert m.pattern == "example.com"

    assert m("example.com")
    assert m("EXAMPLE.com")
    assert not m("www.example.com")
    assert not m("example.com.evil.org")
    assert not m("xexample.com")
    assert not m("example.co")
    assert not m("")


def test_exact_domain_escapes_dots():
    m = compile_domain("example.com")
    assert not m("exampleXcom")
    m = compile_domain("a+b.com")
    assert m("a+b.com")
    assert not m("aab.com")


def test_wildcard_domain():
    m = compile_domain("example.com", True)
    assert m.is_wildcard
    assert m.domain == "example.com"
    assert m.pattern == "*.example.com"

    assert m("a.example.com")
    assert m("www.example.com")
    assert m("WWW.Example.COM")
    assert not m("example.com")
    assert not m(".example.com")
    assert not m("a.example.com.org")
    assert not m("aexample.com")


def test_wildcard_matches_exactly_one_label():
    # Multi-level subdomains are deliberately not matched
    m = compile_domain("example.com", True)
    assert m("a.example.com")
    assert not m("a.b.example.com")
    assert not m("x.y.z.example.com")


def test_matcher_equality():
    assert compile_domain("example.com") == compile_domain("Example.com")
    assert compile_domain("example.com") != compile_domain("example.com", True)
    assert len({compile_domain("a.com"), compile_domain("a.com")}) == 1
    assert "example.com" in repr(compile_domain("example.com"))


def test_matcher_fails():
    with raises(TypeError):
        DomainMatcher(42)


if __name__ == "__main__":
    from common import run_tests

    run_tests(globals())
