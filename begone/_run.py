"""
This module implements a ``run()`` function to start an ASGI server of choice.
"""

import importlib


def run(app, server="uvicorn", bind="localhost:8080", **kwargs):
    """ Run the given ASGI app with the given ASGI server. This blocks
    until the server stops.

    Arguments:

    * ``app`` (required): The ASGI application object, or a string ``"module.path:appname"``.
    * ``server``: The name of the server to use: uvicorn (default), hypercorn or daphne.
    * ``bind``: The address to listen on, as "host:port".
    * ``kwargs``: additional arguments to pass to the underlying server.
    """

    if isinstance(app, str):
        if ":" not in app:
            raise ValueError("If specifying an app by name, give its full path!")
    elif not callable(app):
        raise TypeError("begone.run() app must be an ASGI app or a string.")

    # Check server and bind
    if not isinstance(server, str):
        raise TypeError("begone.run() server arg must be a string.")
    if not (isinstance(bind, str) and ":" in bind):
        raise ValueError("begone.run() bind arg must be 'host:port'")
    bind = bind.replace("localhost", "127.0.0.1")
    host, _, port = bind.rpartition(":")
    port = int(port)

    # Select server function
    try:
        func = SERVERS[server.lower()]
    except KeyError:
        raise ValueError(f"Invalid server specified: {server!r}")

    # Delegate
    return func(app, host, port, **kwargs)


def import_app(appname):
    """ Import an app given as "module.path:appname".
    """
    modname, _, name = appname.partition(":")
    return getattr(importlib.import_module(modname), name)


def _run_uvicorn(app, host, port, **kwargs):
    import uvicorn

    # Default to a warning log_level, otherwise uvicorn is quite verbose
    kwargs.setdefault("log_level", "warning")
    return uvicorn.run(app, host=host, port=port, **kwargs)


def _run_hypercorn(app, host, port, **kwargs):
    import asyncio
    from hypercorn.config import Config
    from hypercorn.asyncio import serve

    if isinstance(app, str):
        app = import_app(app)

    config = Config()
    config.bind = [f"{host}:{port}"]
    for key, val in kwargs.items():
        setattr(config, key, val)
    return asyncio.run(serve(app, config))


def _run_daphne(app, host, port, **kwargs):
    from daphne.server import Server

    if isinstance(app, str):
        app = import_app(app)

    kwargs.setdefault("verbosity", 0)
    endpoints = [f"tcp:port={port}:interface={host}"]
    return Server(application=app, endpoints=endpoints, **kwargs).run()


SERVERS = {"uvicorn": _run_uvicorn, "hypercorn": _run_hypercorn, "daphne": _run_daphne}
