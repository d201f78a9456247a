"""
This module implements resolving request paths to files inside a static
site directory. The candidates are tried in order:

* The path itself, e.g. ``/style.css``.
* The path with ".html" appended, e.g. ``/about`` -> ``about.html``.
* An index file in the directory, e.g. ``/docs`` -> ``docs/index.html``.
* The site's root ``index.html``, for paths that do not look like an
  asset (to support client side routing in single page apps).

Candidates that would end up outside of the site directory are ignored.
"""

import os
import posixpath

from ._mimetypes import get_content_type


INDEX_FILENAME = "index.html"

PAGE_EXTENSIONS = ".html", ".htm"


def is_asset_path(path):
    """ Get whether the given path looks like a request for an asset,
    i.e. its last segment has an extension that is not html.
    """
    basename = posixpath.basename(path.rstrip("/"))
    ext = posixpath.splitext(basename)[1].lower()
    return bool(ext) and ext not in PAGE_EXTENSIONS


def _candidate_exact(relpath):
    return relpath or None


def _candidate_html(relpath):
    if not relpath or relpath.endswith("/"):
        return None
    return relpath + ".html"


def _candidate_dir_index(relpath):
    return posixpath.join(relpath, INDEX_FILENAME)


def _candidate_spa_fallback(relpath):
    if is_asset_path(relpath):
        return None
    return INDEX_FILENAME


CANDIDATES = (
    _candidate_exact,
    _candidate_html,
    _candidate_dir_index,
    _candidate_spa_fallback,
)


def safe_join(base_dir, relpath):
    """ Join the relative path onto the base directory, and return the
    normalized result. Returns None if the result is not inside the
    base directory.
    """
    base_dir = os.path.normpath(os.path.abspath(base_dir))
    filename = os.path.normpath(os.path.join(base_dir, relpath))
    if filename == base_dir or filename.startswith(base_dir.rstrip(os.sep) + os.sep):
        return filename
    return None


def resolve_static_file(base_dir, path):
    """ Resolve the given request path (without query string) to a file in
    the given static site directory. Case sensitive. Returns a tuple
    ``(filename, content_type)``, or None if there is no match.
    """
    relpath = path.lstrip("/")
    if safe_join(base_dir, relpath) is None:
        return None  # Traversal attempt, not a miss inside the site
    for candidate_func in CANDIDATES:
        candidate = candidate_func(relpath)
        if candidate is None:
            continue
        filename = safe_join(base_dir, candidate)
        if filename is None:
            continue
        if os.path.isfile(filename):
            return filename, get_content_type(filename)
    return None
