"""
Test building the route table from a pages directory.
"""

import os

from pytest import raises

from begone import scan_pages, Route
from begone._scanner import calculate_priority, derive_url_path, format_routes
from begone.testutils import LogCapturer

from common import pages_dir


def routes_by_pattern(routes):
    return {route.pattern: route for route in routes}


def test_calculate_priority():
    assert calculate_priority(False, 0, True) == 1000
    assert calculate_priority(False, 0, False) == 1050
    assert calculate_priority(True, 0, True) == 0
    assert calculate_priority(True, 2, False) == 250
    assert calculate_priority(False, 1, True) == 1100
    assert calculate_priority(False, 0, True, True) == 990
    assert calculate_priority(True, 0, True, True) == -10


def test_derive_url_path():
    assert derive_url_path(["index.html"]) == ("/", True)
    assert derive_url_path(["INDEX.json"]) == ("/", True)
    assert derive_url_path(["about.html"]) == ("/about", False)
    assert derive_url_path(["About.html"]) == ("/About", False)
    assert derive_url_path(["docs", "index.html"]) == ("/docs", True)
    assert derive_url_path(["api", "users.json"]) == ("/api/users", False)
    assert derive_url_path(["a", "b", "index.json"]) == ("/a/b", True)
    assert derive_url_path(["a", "b", "c.html"]) == ("/a/b/c", False)


def test_missing_pages_dir():
    with pages_dir({}) as root:
        missing = os.path.join(root, "doesnotexist")
        with LogCapturer() as cap:
            routes = scan_pages(missing)

    assert routes == ()
    assert len(cap.messages) == 1
    assert "not found" in cap.messages[0].lower()


def test_empty_pages_dir():
    with pages_dir({}) as root:
        assert scan_pages(root) == ()


def test_root_files():
    pages = {
        "default.html": "x",
        "site.com.html": "x",
        "*.site.com.json": "{}",
        "notes.txt": "skipped",
        "README": "skipped",
    }
    with pages_dir(pages) as root:
        routes = scan_pages(root)

        assert len(routes) == 3
        by_pattern = routes_by_pattern(routes)

        r = by_pattern["site.com"]
        assert isinstance(r, Route)
        assert r.kind == "exact-domain"
        assert r.domain == "site.com"
        assert r.url_path == "/"
        assert r.priority == 1000
        assert r.content_type == "text/html"
        assert r.file_path == os.path.join(root, "site.com.html")
        assert r.matcher("site.com")
        assert not r.is_static_site
        assert r.base_dir is None

        r = by_pattern["*.site.com"]
        assert r.kind == "wildcard-domain"
        assert r.domain == "site.com"
        assert r.priority == 0
        assert r.content_type == "application/json"
        assert r.matcher("www.site.com")

        assert by_pattern["default"].kind == "exact-domain"

        # Wildcard is last
        assert routes[-1].pattern == "*.site.com"


def test_nested_files():
    pages = {
        "site.com/index.json": "{}",
        "site.com/about.html": "x",
        "site.com/About/team.html": "x",
        "site.com/docs/index.html.old": "skipped",
        "site.com/docs/index.html2": "skipped",
        "site.com/api/v1/users.json": "{}",
        "site.com/api/v1/index.html": "x",
        "site.com/image.png": b"skipped",
    }
    with pages_dir(pages) as root:
        routes = scan_pages(root)

        paths = {route.url_path: route for route in routes}
        assert set(paths) == {"/", "/about", "/About/team", "/api/v1/users", "/api/v1"}

        assert paths["/"].priority == 1100
        assert paths["/about"].priority == 1150
        assert paths["/About/team"].priority == 1250
        assert paths["/api/v1"].priority == 1300
        assert paths["/api/v1/users"].priority == 1350

        assert paths["/"].pattern == "site.com"
        assert paths["/about"].pattern == "site.com/about"
        assert paths["/api/v1/users"].content_type == "application/json"
        assert paths["/api/v1/users"].file_path == os.path.join(
            root, "site.com", "api", "v1", "users.json"
        )

        for route in routes:
            assert route.kind == "exact-domain"
            assert route.domain == "site.com"
            assert route.url_path.startswith("/")
            assert route.url_path == "/" or not route.url_path.endswith("/")


def test_wildcard_dir():
    pages = {"*.site.com/index.json": "{}", "*.site.com/about.html": "x"}
    with pages_dir(pages) as root:
        routes = scan_pages(root)

    assert [r.url_path for r in routes] == ["/about", "/"]
    assert [r.priority for r in routes] == [150, 100]
    for route in routes:
        assert route.kind == "wildcard-domain"
        assert route.matcher.pattern == "*.site.com"
    assert routes[0].pattern == "*.site.com/about"


def test_static_site():
    pages = {
        "site.com/index.html": "x",
        "site.com/about.html": "x",
        "site.com/data.json": "{}",
        "site.com/js/app.js": "x",
        "site.com/blog/index.html": "x",
        "*.staging.com/index.html": "x",
    }
    with pages_dir(pages) as root:
        routes = scan_pages(root)

        # Exactly one route per static site, never routes for its contents
        assert len(routes) == 2
        by_pattern = routes_by_pattern(routes)

        r = by_pattern["site.com"]
        assert r.kind == "static-site"
        assert r.is_static_site
        assert r.url_path == "/"
        assert r.priority == 990
        assert r.file_path == os.path.join(root, "site.com")
        assert r.base_dir == r.file_path

        r = by_pattern["*.staging.com"]
        assert r.kind == "static-site"
        assert r.priority == -10
        assert r.matcher("a.staging.com")


def test_index_json_is_not_a_static_site():
    pages = {"site.com/index.json": "{}", "site.com/other.html": "x"}
    with pages_dir(pages) as root:
        routes = scan_pages(root)

    assert len(routes) == 2
    assert all(route.kind == "exact-domain" for route in routes)


def test_priority_order():
    pages = {
        "*.site.com/a/b/c/d.html": "x",
        "site.com.html": "x",
        "site.com/a/index.html": "x",
        "site.com/a/b.html": "x",
        "other.com/index.html": "x",  # static site
        "other.com.html": "x",
    }
    with pages_dir(pages) as root:
        routes = scan_pages(root)

    priorities = [route.priority for route in routes]
    assert priorities == sorted(priorities, reverse=True)

    # Exact always before wildcard, regardless of depth
    kinds = [route.kind for route in routes]
    assert kinds[-1] == "wildcard-domain"
    assert routes[-1].priority == 450

    # Deeper before shallower
    patterns = [route.pattern for route in routes]
    assert patterns.index("site.com/a/b") < patterns.index("site.com/a")

    # A single file outranks a static site at the same depth
    by_kind = [(r.pattern, r.kind) for r in routes]
    assert by_kind.index(("other.com", "exact-domain")) < by_kind.index(
        ("other.com", "static-site")
    )


def test_ties_keep_scan_order():
    pages = {"b.com.html": "x", "a.com.html": "x", "c.com.json": "x"}
    with pages_dir(pages) as root:
        routes = scan_pages(root)
    assert [route.pattern for route in routes] == ["a.com", "b.com", "c.com"]


def test_routes_are_immutable():
    with pages_dir({"site.com.html": "x"}) as root:
        routes = scan_pages(root)
    assert isinstance(routes, tuple)
    with raises(AttributeError):
        routes[0].priority = 3


def test_format_routes():
    pages = {"site.com.html": "x", "other.com/index.html": "x"}
    with pages_dir(pages) as root:
        routes = scan_pages(root)
        lines = format_routes(routes)
    assert len(lines) == 2
    assert "site.com" in lines[0] and "site.com.html" in lines[0]
    assert "static-site" in lines[1]


if __name__ == "__main__":
    from common import run_tests

    run_tests(globals())
