"""
This module implements building the route table from a pages directory.

The layout of the pages directory defines the routes:

* ``pages/example.com.html`` serves all of ``example.com``.
* ``pages/*.example.com.json`` serves any single-label subdomain of example.com.
* ``pages/example.com/about.html`` serves ``example.com/about`` (and below).
* ``pages/example.com/docs/index.html`` serves ``example.com/docs``.
* ``pages/example.com/index.html`` makes ``pages/example.com`` a static site.
* ``pages/default.html`` is served when nothing else matches.
"""

import os
from collections import namedtuple

from ._logging import logger
from ._mimetypes import get_content_type
from ._patterns import parse_dirname, parse_filename, compile_domain
from ._patterns import SUPPORTED_EXTENSIONS


EXACT_DOMAIN = "exact-domain"
WILDCARD_DOMAIN = "wildcard-domain"
STATIC_SITE = "static-site"

STATIC_SITE_INDEX = "index.html"


class Route(
    namedtuple(
        "Route",
        [
            "kind",
            "pattern",
            "domain",
            "matcher",
            "file_path",
            "url_path",
            "priority",
            "content_type",
        ],
    )
):
    """ A single routing rule, mapping a host pattern and url path to
    a file (or a directory for static sites). Routes are immutable.

    * ``kind``: "exact-domain", "wildcard-domain" or "static-site".
    * ``pattern``: the textual pattern, used in logs and response headers.
    * ``domain``: the domain, without wildcard prefix.
    * ``matcher``: a ``DomainMatcher`` to test hosts with.
    * ``file_path``: the absolute path of the file to serve, or of the
      base directory for static sites.
    * ``url_path``: the path prefix that this route owns, e.g. "/about".
    * ``priority``: higher means more specific, and is tested first.
    * ``content_type``: the content type of the file. For static sites this
      is "text/html"; the real type is resolved per request.
    """

    __slots__ = ()

    @property
    def is_static_site(self):
        return self.kind == STATIC_SITE

    @property
    def base_dir(self):
        """ The base directory for static sites, None otherwise.
        """
        return self.file_path if self.kind == STATIC_SITE else None


def calculate_priority(is_wildcard, depth, is_index, is_static_site=False):
    """ Calculate the priority of a route. Exact domains always come before
    wildcards, deeper paths before shallow ones, and non-index files before
    their sibling index file. A static site is a bit less specific than a
    single file at the same depth, so that such a file can override it.
    """
    priority = 0 if is_wildcard else 1000
    priority += depth * 100
    if not is_index:
        priority += 50
    if is_static_site:
        priority -= 10
    return priority


def derive_url_path(parts):
    """ Get ``(url_path, is_index)`` for a file, given the path segments
    below its domain directory (the file name being the last segment).
    """
    *dirnames, filename = parts
    name = os.path.splitext(filename)[0]
    is_index = name.lower() == "index"
    segments = dirnames if is_index else dirnames + [name]
    url_path = "/" + "/".join(segment for segment in segments if segment)
    if url_path != "/":
        url_path = url_path.rstrip("/")
    return url_path, is_index


def _make_file_route(
    domain, is_wildcard, file_path, url_path, depth, is_index, dirname=None
):
    matcher = compile_domain(domain, is_wildcard)
    if dirname is None or url_path == "/":
        pattern = matcher.pattern
    else:
        pattern = dirname + url_path
    return Route(
        kind=WILDCARD_DOMAIN if is_wildcard else EXACT_DOMAIN,
        pattern=pattern,
        domain=domain,
        matcher=matcher,
        file_path=file_path,
        url_path=url_path,
        priority=calculate_priority(is_wildcard, depth, is_index),
        content_type=get_content_type(file_path),
    )


def _make_static_site_route(dirname, dir_path):
    domain, is_wildcard = parse_dirname(dirname)
    matcher = compile_domain(domain, is_wildcard)
    return Route(
        kind=STATIC_SITE,
        pattern=matcher.pattern,
        domain=domain,
        matcher=matcher,
        file_path=dir_path,
        url_path="/",
        priority=calculate_priority(is_wildcard, 0, True, True),
        content_type="text/html",
    )


def _scan_root_file(entry):
    """ A page file directly in the root, serving a whole domain.
    """
    parsed = parse_filename(entry.name)
    if parsed is None:
        logger.debug(f"Skipping unsupported file {entry.path}")
        return []
    domain, is_wildcard = parsed
    file_path = os.path.abspath(entry.path)
    return [_make_file_route(domain, is_wildcard, file_path, "/", 0, True)]


def _scan_domain_dir(entry):
    """ A domain directory: either a static site, or a tree of page files.
    """
    dir_path = os.path.abspath(entry.path)
    if os.path.isfile(os.path.join(dir_path, STATIC_SITE_INDEX)):
        return [_make_static_site_route(entry.name, dir_path)]

    domain, is_wildcard = parse_dirname(entry.name)
    routes = []
    for parts, file_path in _walk_files(dir_path, ()):
        url_path, is_index = derive_url_path(parts)
        route = _make_file_route(
            domain, is_wildcard, file_path, url_path, len(parts), is_index, entry.name
        )
        routes.append(route)
    return routes


def _walk_files(dir_path, parts):
    """ Generate ``(parts, file_path)`` for the supported files in the given
    directory and its subdirectories. Symlinked directories are not followed.
    """
    try:
        with os.scandir(dir_path) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as err:
        logger.warning(f"Skipping unreadable directory {dir_path}: {err}")
        return
    for entry in entries:
        try:
            if entry.is_dir(follow_symlinks=False):
                yield from _walk_files(entry.path, parts + (entry.name,))
            elif entry.is_file():
                ext = os.path.splitext(entry.name)[1].lower()
                if ext in SUPPORTED_EXTENSIONS:
                    yield parts + (entry.name,), os.path.abspath(entry.path)
        except OSError as err:
            logger.warning(f"Skipping {entry.path}: {err}")


def scan_pages(pages_dir):
    """ Build the route table for the given pages directory. Returns a
    tuple of ``Route`` objects, sorted by priority (highest first).
    Entries that cannot be read are skipped. If the directory does not
    exist, an empty table is returned.
    """
    if not isinstance(pages_dir, str):
        pages_dir = os.fspath(pages_dir)
    if not os.path.isdir(pages_dir):
        logger.warning(f"Pages directory not found: {pages_dir}")
        return ()

    try:
        with os.scandir(pages_dir) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as err:
        logger.warning(f"Cannot read pages directory {pages_dir}: {err}")
        return ()

    routes = []
    for entry in entries:
        try:
            if entry.is_dir():
                routes.extend(_scan_domain_dir(entry))
            elif entry.is_file():
                routes.extend(_scan_root_file(entry))
        except OSError as err:
            logger.warning(f"Skipping {entry.path}: {err}")

    # Sort on priority. Python's sort is stable, so ties keep scan order.
    routes.sort(key=lambda route: -route.priority)
    return tuple(routes)


def format_routes(routes):
    """ Get a list of lines describing the given routes.
    """
    lines = []
    for route in routes:
        lines.append(f"  {route.pattern} -> {route.file_path} ({route.kind})")
    return lines
