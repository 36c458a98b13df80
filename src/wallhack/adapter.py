"""Handler adapter: turns a verified handler into a request procedure.

A procedure has the same shape as the middleware ``next`` callable::

    async def procedure(request: Request) -> Response: ...

Every invocation produces exactly one JSON document:

- the handler returned ``(value, None)`` → ``value`` encoded as JSON
- the handler returned ``(_, error)`` → ``{"Error": str(error)}``
- ``value`` could not be encoded → ``{"Error": <encoding error>}``

The status is left alone on handler errors unless an ``error_status``
policy is configured. Exceptions raised by the handler propagate to the
middleware chain (see ``wallhack.middleware.recovery``).
"""

import logging

from wallhack._internal.invoke import invoke
from wallhack.contract import HandlerContract
from wallhack.http.encoding import JSON_CONTENT_TYPE, ErrorEnvelope, encode
from wallhack.http.request import Request
from wallhack.http.response import Response, ResponseSink

logger = logging.getLogger("wallhack.server")


class HandlerAdapter:
    """Network-facing procedure around one verified handler.

    Usage::

        contract = verify_handler(list_items)
        procedure = HandlerAdapter(contract)
        response = await procedure(request)
    """

    __slots__ = ("contract", "error_status")

    def __init__(self, contract: HandlerContract, *, error_status: int | None = None) -> None:
        self.contract = contract
        self.error_status = error_status

    async def __call__(self, request: Request) -> Response:
        sink = ResponseSink()
        sink.set_header("Content-Type", JSON_CONTENT_TYPE)

        value, error = await invoke(self.contract.handler, sink, request)

        if error is not None:
            logger.debug(
                "%s %s: %s returned error: %s",
                request.method,
                request.path,
                self.contract.name,
                error,
            )
            if self.error_status is not None:
                sink.status = self.error_status
            return sink.to_response(ErrorEnvelope(str(error)).encode())

        try:
            body = encode(value)
        except (TypeError, ValueError, RecursionError) as exc:
            logger.debug("%s: response encoding failed: %s", self.contract.name, exc)
            body = ErrorEnvelope(str(exc)).encode()
        return sink.to_response(body)

    def __repr__(self) -> str:
        return f"HandlerAdapter({self.contract.name})"
