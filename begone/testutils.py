"""
Begone test utilities.
"""

import time
import asyncio
import logging
from collections import namedtuple
from wsgiref.handlers import format_date_time
from urllib.parse import unquote, urlparse

import requests

from ._logging import logger


Response = namedtuple("Response", ["status", "headers", "body"])


class LogCapturer(logging.Handler):
    """ Logging handler that collects the messages of the begone logger.
    """

    def __init__(self):
        super().__init__()
        self.messages = []

    def emit(self, record):
        self.messages.append(record.getMessage())

    def __enter__(self):
        logger.addHandler(self)
        return self

    def __exit__(self, *args, **kwargs):
        logger.removeHandler(self)


class MockTestServer:
    """ Object that mocks an ASGI server and runs an ASGI application
    in-process. Use it as a context manager to start and stop the
    server (i.e. the lifespan protocol). Requests *must* be done via the
    methods of this object. The host of a request can be set via the
    ``host`` argument, the used url can be anything.

    When the server has stopped, the ``out`` attribute contains the
    log messages that were emitted while it was running.
    """

    def __init__(self, app, *, url="http://localhost"):
        self._app = app
        self._url = url.rstrip("/")
        self._loop = None
        self._capturer = None
        self._out = ""

    @property
    def app(self):
        """ The application object that was given at instantiation.
        """
        return self._app

    @property
    def url(self):
        """ The url used for requests that do not specify one.
        """
        return self._url

    @property
    def out(self):
        """ The log output, set when the with-statement exits.
        """
        return self._out

    def __enter__(self):
        self._loop = asyncio.new_event_loop()
        self._capturer = LogCapturer().__enter__()
        try:
            self._lifespan_messages = []
            self._lifespan_completes = []
            self._lifespan_task = self._make_lifespan_task()
            self._wait_for_lifespan_complete("startup")
        except Exception as err:
            self._close()
            raise err
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        try:
            self._wait_for_lifespan_complete("shutdown")
        finally:
            self._close()

    def _close(self):
        self._capturer.__exit__()
        self._out = "\n".join(self._capturer.messages)
        self._loop.close()

    def get(self, path, host=None, headers=None, **kwargs):
        """ Send a GET request to the server. See request() for detais.
        """
        return self.request("GET", path, host=host, headers=headers, **kwargs)

    def head(self, path, host=None, headers=None, **kwargs):
        """ Send a HEAD request to the server. See request() for detais.
        """
        return self.request("HEAD", path, host=host, headers=headers, **kwargs)

    def request(self, method, path, host=None, headers=None, **kwargs):
        """ Send a request to the server. Returns a named tuple
        ``(status, headers, body)``.

        Arguments:
            method (str): the HTTP method (e.g. "GET")
            path (str): path or url.
            host (str): the value for the Host header (optional).
            headers: headers to send (optional).
            kwargs: additional arguments to pass to ``requests.Request()``.
        """
        assert isinstance(method, str)
        assert isinstance(path, str)
        if path.startswith("http"):
            url = path
        else:
            url = self.url + "/" + path.lstrip("/")
        headers = dict(headers or {})
        if host is not None:
            headers["host"] = host

        co = self._co_request(method, url, headers=headers, **kwargs)
        status, headers, body = self._loop.run_until_complete(co)
        return Response(status, headers, body)

    def _make_lifespan_task(self):
        scope = {"type": "lifespan"}

        async def receive():
            while True:
                if self._lifespan_messages:
                    return self._lifespan_messages.pop(0)
                await asyncio.sleep(0.02)

        async def send(m):
            self._lifespan_completes.append(m["type"])

        return self._loop.create_task(self._app(scope, receive, send))

    def _wait_for_lifespan_complete(self, what, timeout=5):
        what_complete = f"lifespan.{what}.complete"

        async def waiter():
            etime = time.time() + timeout
            while what_complete not in self._lifespan_completes:
                if self._lifespan_task.done():
                    raise RuntimeError(
                        f"Lifespan task finished without producing {what}"
                    )
                if time.time() > etime:
                    raise RuntimeError(
                        f"Timeout for {what}, has {self._lifespan_completes}"
                    )
                await asyncio.sleep(0.02)

        self._lifespan_messages.append({"type": f"lifespan.{what}"})
        self._loop.run_until_complete(waiter())

    def _make_scope(self, request):
        scheme, netloc, path, params, query, fragement = urlparse(request.url)
        if ":" in netloc:
            host, port = netloc.split(":", 1)
            port = int(port)
        else:
            host = netloc
            port = {"http": 80, "https": 443}[scheme]

        # Include the 'host' header.
        if "host" in request.headers:
            headers = []
        elif port in (80, 443):
            headers = [[b"host", host.encode()]]
        else:
            headers = [[b"host", ("%s:%d" % (host, port)).encode()]]

        # Include other request headers.
        headers += [
            [key.lower().encode(), value.encode()]
            for key, value in request.headers.items()
        ]

        return {
            "type": "http",
            "http_version": "1.1",
            "method": request.method,
            "scheme": scheme,
            "path": unquote(path),
            "root_path": "",
            "query_string": query.encode(),
            "headers": headers,
            "client": ["testclient", 50000],
            "server": [host, port],
        }

    async def _co_request(self, method, url, **kwargs):
        req = requests.Request(method, url, **kwargs)
        p = req.prepare()  # Get the "resolved" request
        p.headers.setdefault("user-agent", "begone_mock_server")
        scope = self._make_scope(p)

        client_to_server = [p.body or b""]
        server_to_client = []
        response = []

        async def receive():
            if client_to_server:
                chunk = client_to_server.pop(0)
                if isinstance(chunk, str):
                    chunk = chunk.encode()
                return {"type": "http.request", "body": chunk, "more_body": False}
            else:
                return {"type": "http.disconnect"}

        async def send(m):
            if m["type"] == "http.response.start":
                headers = dict((h[0].decode(), h[1].decode()) for h in m["headers"])
                headers.setdefault("date", format_date_time(time.time()))
                headers.setdefault("server", "begone_mock_server")
                response.extend([m["status"], headers])
            elif m["type"] == "http.response.body":
                server_to_client.append(m["body"])

        await self._app(scope, receive, send)
        if not response:
            response.extend([9999, {}])
        response.append(b"".join(server_to_client))

        return tuple(response)
