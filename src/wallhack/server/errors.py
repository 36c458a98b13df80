"""Error responses for failures that reach the ASGI pipeline.

Router misses and anything the Recovery middleware did not catch are
still answered with the ``{"Error": ...}`` envelope, so every response
body is valid JSON.
"""

import logging

from wallhack.errors import HTTPError
from wallhack.http.request import Request
from wallhack.http.response import Response, error_response

logger = logging.getLogger("wallhack.server")


def handle_http_error(exc: HTTPError, request: Request) -> Response:
    """Map an HTTPError (404, 405, or raised by a handler) to an envelope."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
    response = error_response(exc.detail or f"Error {exc.status}", status=exc.status)
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


def handle_internal_error(exc: Exception, request: Request, debug: bool) -> Response:
    """Unexpected exception with no Recovery middleware installed: 500."""
    logger.exception("500 %s %s", request.method, request.path)
    message = f"{type(exc).__name__}: {exc}" if debug else "Internal Server Error"
    return error_response(message, status=500)
