"""
This module implements the adapter between a request handler function
and the ASGI server.
"""

import json
import inspect

from . import _request
from ._logging import logger
from ._request import HttpRequest


def normalize_response(response):
    """ Normalize the given response, by always returning a 3-element tuple
    (status, headers, body). The body is not "resolved"; it is safe
    to call this function multiple times on the same response.
    """
    if isinstance(response, tuple):
        if len(response) == 3:
            status, headers, body = response
        elif len(response) == 2:
            status = 200
            headers, body = response
        elif len(response) == 1:
            status, headers, body = 200, {}, response[0]
        else:
            raise ValueError(f"Handler returned {len(response)}-tuple.")
    else:
        status, headers, body = 200, {}, response

    if not isinstance(status, int):
        raise ValueError(f"Status code must be an int, not {type(status)}")
    if not isinstance(headers, dict):
        raise ValueError(f"Headers must be a dict, not {type(headers)}")

    return status, headers, body


def guess_content_type_from_body(body):
    """ Guess the content-type based of the body.

    * "text/html" for str bodies starting with ``<!DOCTYPE html>`` or ``<html>``.
    * "text/plain" for other str bodies.
    * "application/json" for dict bodies.
    * "application/octet-stream" otherwise.
    """
    if isinstance(body, str):
        if body.startswith(("<!DOCTYPE html>", "<!doctype html>", "<html>")):
            return "text/html"
        else:
            return "text/plain"
    elif isinstance(body, dict):
        return "application/json"
    else:
        return "application/octet-stream"


def to_asgi(handler, *, on_startup=None, on_shutdown=None):
    """ Convert a request handler (a coroutine function) to an ASGI
    application. The optional ``on_startup`` and ``on_shutdown`` functions
    are called (without arguments) when the server starts and stops.
    """

    if not inspect.iscoroutinefunction(handler):
        raise TypeError(
            "begone.to_asgi() handler function must be a coroutine function."
        )

    async def application_wrapper(scope, receive, send):
        if scope["type"] == "http":
            request = HttpRequest(scope, receive, send)
            await _handle_http(handler, request)
        elif scope["type"] == "lifespan":
            await _handle_lifespan(receive, send, on_startup, on_shutdown)
        else:
            logger.warning(f"Unknown ASGI type {scope['type']}")

    application_wrapper.__module__ = handler.__module__
    application_wrapper.__name__ = handler.__name__
    application_wrapper.__doc__ = handler.__doc__
    application_wrapper.handler = handler
    return application_wrapper


async def _handle_lifespan(receive, send, on_startup, on_shutdown):
    while True:
        message = await receive()
        if message["type"] == "lifespan.startup":
            try:
                logger.info("Server is starting up")
                if on_startup is not None:
                    on_startup()
            except Exception as err:
                logger.error(f"Error during startup: {err}", exc_info=err)
                await send({"type": "lifespan.startup.failed", "message": str(err)})
            else:
                await send({"type": "lifespan.startup.complete"})
        elif message["type"] == "lifespan.shutdown":
            try:
                logger.info("Server is shutting down")
                if on_shutdown is not None:
                    on_shutdown()
            except Exception as err:
                logger.error(f"Error during shutdown: {err}", exc_info=err)
                await send({"type": "lifespan.shutdown.failed", "message": str(err)})
            else:
                await send({"type": "lifespan.shutdown.complete"})
            return
        else:
            logger.warning(f"Unknown lifespan message {message['type']}")


async def _handle_http(handler, request):

    try:

        # Call request handler to get the result
        where = "request handler"
        result = await handler(request)

        # Process the handler output
        where = "processing handler output"
        status, headers, body = normalize_response(result)
        if "content-type" not in headers:
            headers["content-type"] = guess_content_type_from_body(body)
        if isinstance(body, bytes):
            pass
        elif isinstance(body, str):
            body = body.encode()
        elif isinstance(body, dict):
            try:
                body = json.dumps(body).encode()
            except Exception as err:
                raise ValueError(f"Could not JSON encode body: {err}")
        elif inspect.iscoroutine(body):
            raise ValueError("Body cannot be a coroutine, forgot await?")
        else:
            raise ValueError(f"Body cannot be {type(body)}.")

        # Send response. A HEAD response has the headers of a GET, but no body.
        where = "sending response"
        headers.setdefault("content-length", str(len(body)))
        if request.method == "HEAD":
            body = b""
        await request.accept(status, headers)
        await request.send(body, more=False)

    except Exception as err:
        # Process errors. We log them, and if possible send a 500
        error_text = f"{type(err).__name__} in {where}: {str(err)}"
        logger.error(error_text, exc_info=err)
        if request._app_state == _request.CONNECTING:
            await request.accept(500, {"content-type": "text/plain"})
            await request.send(error_text, more=False)
        elif request._app_state == _request.CONNECTED:
            await request.send(b"", more=False)  # At least close it
