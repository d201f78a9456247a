"""
Begone - serve maintenance pages, routed by host and path

Begone serves a "503 Service Unavailable" page to the visitors of one or
more domains. The pages are configured with nothing but a directory tree:
file and directory names are domains (optionally with a ``*.`` wildcard
prefix), nested files are paths, and a directory with an ``index.html``
is served as a complete static site.
"""

from ._patterns import DomainMatcher, compile_domain
from ._scanner import Route, scan_pages
from ._static import resolve_static_file
from ._router import RouteMatch, find_match, find_default_page
from ._reload import PageTable, Debouncer, PagesWatcher, watch_pages
from ._mimetypes import get_content_type, is_text_type
from ._app import to_asgi
from ._maintenance import make_app
from ._config import Config
from ._run import run


__all__ = [
    "DomainMatcher",
    "compile_domain",
    "Route",
    "scan_pages",
    "resolve_static_file",
    "RouteMatch",
    "find_match",
    "find_default_page",
    "PageTable",
    "Debouncer",
    "PagesWatcher",
    "watch_pages",
    "get_content_type",
    "is_text_type",
    "to_asgi",
    "make_app",
    "Config",
    "run",
]


__version__ = "0.1.0"
