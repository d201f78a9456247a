"""
Configuration via environment variables.
"""

import os


class Config:
    """ The server configuration. Use ``Config.from_env()`` to read it from
    the environment:

    * ``PORT``: the port to listen on (default 3000).
    * ``HOST``: the interface to listen on (default "0.0.0.0").
    * ``PAGES_DIR``: the pages directory (default "./pages").
    * ``WATCH``: reload when pages change, unless set to "false".
    * ``ASGI_SERVER``: uvicorn (default), hypercorn or daphne.
    * ``RETRY_AFTER``: the value of the retry-after header in seconds (default 3600).
    * ``LOG_LEVEL``: the log level (default "info").
    """

    __slots__ = (
        "port",
        "host",
        "pages_dir",
        "watch",
        "server",
        "retry_after",
        "log_level",
    )

    def __init__(
        self,
        *,
        port=3000,
        host="0.0.0.0",
        pages_dir="pages",
        watch=True,
        server="uvicorn",
        retry_after=3600,
        log_level="info",
    ):
        self.port = port
        self.host = host
        self.pages_dir = os.path.abspath(pages_dir)
        self.watch = watch
        self.server = server
        self.retry_after = retry_after
        self.log_level = log_level

    def __repr__(self):
        items = ", ".join(f"{key}={getattr(self, key)!r}" for key in self.__slots__)
        return f"Config({items})"

    @property
    def bind(self):
        """ The address to listen on, as "host:port".
        """
        return f"{self.host}:{self.port}"

    @classmethod
    def from_env(cls, environ=None):
        """ Create a config from the given dict of environment variables
        (default ``os.environ``).
        """
        environ = os.environ if environ is None else environ
        return cls(
            port=_get_int(environ, "PORT", 3000),
            host=environ.get("HOST", "0.0.0.0"),
            pages_dir=environ.get("PAGES_DIR", "pages"),
            watch=environ.get("WATCH", "").strip().lower() != "false",
            server=environ.get("ASGI_SERVER", "uvicorn").lower(),
            retry_after=_get_int(environ, "RETRY_AFTER", 3600),
            log_level=environ.get("LOG_LEVEL", "info").lower(),
        )


def _get_int(environ, name, default):
    value = environ.get(name, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an int: {value!r}")
