"""
This module implements the maintenance application: the request handler
that serves the page that matches each request, with a 503 status.
"""

import time
import asyncio

from ._app import to_asgi
from ._logging import logger
from ._mimetypes import is_text_type
from ._reload import PageTable, watch_pages
from ._router import find_match


HEALTH_PATHS = "/health", "/_health"

MATCH_HEADER = "x-503begone-match"

NOT_CONFIGURED = {
    "error": "Service Unavailable",
    "message": "No maintenance page configured for this domain",
}


def read_page(filename, content_type):
    """ Read the file, as str for text files and bytes otherwise.
    """
    if is_text_type(content_type):
        with open(filename, "rt", encoding="utf-8") as f:
            return f.read()
    else:
        with open(filename, "rb") as f:
            return f.read()


def make_app(table, *, retry_after=3600, watch=False, watch_interval=0.5):
    """ Create an ASGI application that serves the pages of the given
    ``PageTable`` (or pages directory). All pages are served with status
    503 and a ``retry-after`` header. If ``watch`` is True, the pages
    directory is watched for changes while the server is running.
    """
    if not isinstance(table, PageTable):
        table = PageTable(table)
    if not (isinstance(retry_after, int) and retry_after >= 0):
        raise TypeError("make_app() retry_after must be a non-negative int")

    started = time.monotonic()
    watchers = []

    def unavailable_headers(content_type, pattern=None):
        headers = {
            "content-type": content_type,
            "retry-after": str(retry_after),
            "cache-control": "no-store, no-cache, must-revalidate",
        }
        if pattern is not None:
            headers[MATCH_HEADER] = pattern
        return headers

    async def serve_file(filename, content_type, pattern):
        loop = asyncio.get_event_loop()
        body = await loop.run_in_executor(None, read_page, filename, content_type)
        return 503, unavailable_headers(content_type, pattern), body

    async def maintenance_handler(request):
        path = request.path

        if path in HEALTH_PATHS:
            return 200, {}, {
                "status": "ok",
                "routes": len(table.routes),
                "uptime": time.monotonic() - started,
            }

        host = request.host
        logger.info(f"{request.method} {host}{path}")

        routes, default_page = table.snapshot()

        match = find_match(routes, host, path, has_query=False)
        if match is not None:
            try:
                return await serve_file(
                    match.file_path, match.content_type, match.route.pattern
                )
            except (OSError, UnicodeDecodeError) as err:
                logger.error(f"Error reading file {match.file_path}: {err}")

        if default_page is not None:
            try:
                return await serve_file(
                    default_page.file_path, default_page.content_type, "default"
                )
            except (OSError, UnicodeDecodeError) as err:
                logger.error(f"Error reading default page: {err}")

        return 503, unavailable_headers("application/json"), NOT_CONFIGURED

    def on_startup():
        if watch:
            watchers.append(watch_pages(table, interval=watch_interval))
            logger.info(f"Watching {table.pages_dir} for changes ...")

    def on_shutdown():
        while watchers:
            watchers.pop().stop(timeout=0)

    app = to_asgi(maintenance_handler, on_startup=on_startup, on_shutdown=on_shutdown)
    app.table = table
    return app
