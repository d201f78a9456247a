"""
This module implements matching a request (host and path) against a
route table produced by ``scan_pages()``.
"""

from collections import namedtuple

from ._static import resolve_static_file


RouteMatch = namedtuple("RouteMatch", ["route", "file_path", "content_type"])

DEFAULT_DOMAIN = "default"


def normalize_host(host):
    """ Lowercase the host and strip the port (if it is numeric).
    """
    name, sep, port = host.rpartition(":")
    if sep and port.isdigit() and port.isascii():
        host = name
    return host.lower()


def strip_query(path):
    """ Remove the query string from the path.
    """
    return path.partition("?")[0]


def normalize_path(path, has_query=True):
    """ Lowercase the path, remove the query string and trailing slash.
    If ``has_query`` is False, a "?" is taken to be part of the path.
    """
    if has_query:
        path = strip_query(path)
    path = path.lower()
    if path != "/" and path.endswith("/"):
        path = path[:-1]
    return path


def find_match(routes, host, path, *, has_query=True):
    """ Find the route to serve for the given host and path. The routes must
    be sorted by priority. Returns a ``RouteMatch`` or None.

    Single-file routes match when the path equals the route's path, or is
    below it. Static sites match when the path resolves to a file in the
    site; if it does not, the search continues with the next route.

    The path may include a query string. Pass ``has_query=False`` when
    it does not, e.g. for an already percent-decoded ASGI path, which can
    contain a literal "?".
    """
    host = normalize_host(host)
    raw_path = strip_query(path) if has_query else path
    path = normalize_path(raw_path, has_query=False)

    for route in routes:
        if not route.matcher(host):
            continue

        if route.is_static_site:
            resolved = resolve_static_file(route.file_path, raw_path)
            if resolved is not None:
                return RouteMatch(route, *resolved)
            continue

        route_path = route.url_path.lower()
        if (
            route_path == "/"
            or path == route_path
            or path.startswith(route_path + "/")
        ):
            return RouteMatch(route, route.file_path, route.content_type)

    return None


def find_default_page(routes):
    """ Get the route for the default page, or None. That is a "default.html"
    or "default.json" in the pages root, or an index file in a "default"
    directory. Static sites do not count.
    """
    for route in routes:
        if (
            route.matcher.pattern == DEFAULT_DOMAIN
            and route.url_path == "/"
            and not route.is_static_site
        ):
            return route
    return None
