"""ASGI handler: translates ASGI scope/messages to wallhack types.

The only component that touches raw ASGI HTTP messages. Builds the
Request, runs it through the middleware chain down to the matched route
procedure, and sends the Response back through ``send()``.
"""

from typing import Any

from wallhack._internal.asgi import Receive, Scope, Send
from wallhack.errors import HTTPError
from wallhack.http.request import Request
from wallhack.http.response import Response
from wallhack.middleware.protocol import Next
from wallhack.routing.router import Router
from wallhack.server.errors import handle_http_error, handle_internal_error
from wallhack.server.sender import send_response


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    middleware: tuple[Any, ...],
    debug: bool = False,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)

    async def dispatch(req: Request) -> Response:
        match = router.match(req.method, req.path)
        return await match.compiled.procedure(req.with_path_params(match.path_params))

    # Wrap middleware around the dispatch, first registered is outermost
    handler: Next = dispatch
    for mw in reversed(middleware):

        async def make_next(req: Request, _mw: Any = mw, _next: Next = handler) -> Response:
            return await _mw(req, _next)

        handler = make_next

    try:
        response = await handler(request)
    except HTTPError as exc:
        response = handle_http_error(exc, request)
    except Exception as exc:
        response = handle_internal_error(exc, request, debug)

    await send_response(response, send)
