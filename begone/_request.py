"""
This module implements the HttpRequest class that is passed to the
request handler.
"""

CONNECTING = 0
CONNECTED = 1
DONE = 2


class HttpRequest:
    """ Object representing an HTTP request. Provides access to the request
    metadata, and methods to send the response.
    """

    __slots__ = ("_scope", "_receive", "_send", "_headers", "_app_state")

    def __init__(self, scope, receive, send):
        self._scope = scope
        self._receive = receive
        self._send = send
        self._headers = None
        self._app_state = CONNECTING  # CONNECTING -> CONNECTED -> DONE

    @property
    def scope(self):
        """ A dict representing the raw ASGI scope.
        """
        return self._scope

    @property
    def method(self):
        """ The HTTP method (string). E.g. 'HEAD', 'GET'.
        """
        return self._scope["method"]

    @property
    def headers(self):
        """ A dictionary representing the headers. Keys are lowercase.
        """
        if self._headers is None:
            self._headers = dict(
                (key.decode().lower(), val.decode("latin-1"))
                for key, val in self._scope["headers"]
            )
        return self._headers

    @property
    def host(self):
        """ The requested host as given in the Host header, possibly including
        a port. Falls back to ``scope['server']`` if there is no Host header.
        """
        host = self.headers.get("host", "")
        if not host:
            server = self._scope.get("server") or ("localhost", None)
            host = server[0] if server[1] is None else f"{server[0]}:{server[1]}"
        return host

    @property
    def path(self):
        """ The path part of the URL (a string, with percent escapes decoded).
        """
        return self._scope.get("root_path", "") + self._scope["path"]

    @property
    def querystring(self):
        """ The raw query string (without the "?").
        """
        return self._scope.get("query_string", b"").decode("latin-1")

    async def accept(self, status=200, headers={}):
        """ Send the status code and headers. Must be called once, before
        ``send()``.
        """
        if self._app_state != CONNECTING:
            raise IOError("Cannot accept an already accepted connection.")
        status = int(status)
        try:
            rawheaders = [(k.encode(), v.encode()) for k, v in headers.items()]
        except Exception:
            raise TypeError("Header keys and values must all be strings.")
        self._app_state = CONNECTED
        msg = {"type": "http.response.start", "status": status, "headers": rawheaders}
        await self._send(msg)

    async def send(self, data, more=True):
        """ Send (a chunk of) data, representing the response body.
        """
        more = bool(more)
        if isinstance(data, str):
            data = data.encode()
        elif not isinstance(data, bytes):
            raise TypeError(f"Can only send bytes/str over http, not {type(data)}.")
        message = {"type": "http.response.body", "body": data, "more_body": more}
        if self._app_state == CONNECTED:
            if not more:
                self._app_state = DONE
            await self._send(message)
        elif self._app_state == CONNECTING:
            raise IOError("Cannot send before calling accept.")
        else:
            raise IOError("Cannot send to a closed connection.")
