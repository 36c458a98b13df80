"""Panic recovery: unexpected handler failures become error envelopes.

Any exception escaping the rest of the chain is answered with
``{"Error": "PANIC: <exception>"}``. The status is left at its default;
the failure is logged with its traceback and stays confined to the
request that raised it.

``HTTPError`` is not a failure: it passes through so the server maps it
to its status code.
"""

import logging

from wallhack.errors import HTTPError
from wallhack.http.encoding import PANIC_PREFIX
from wallhack.http.request import Request
from wallhack.http.response import Response, error_response
from wallhack.middleware.protocol import Next

logger = logging.getLogger("wallhack.server")


class Recovery:
    """Catch exceptions from the wrapped procedure chain.

    Installed automatically as the outermost middleware unless
    ``AppConfig(recover_panics=False)``. Can also wrap a procedure
    directly::

        response = await Recovery()(request, procedure)
    """

    __slots__ = ()

    async def __call__(self, request: Request, next: Next) -> Response:
        try:
            return await next(request)
        except HTTPError:
            raise
        except Exception as exc:
            logger.exception("PANIC %s %s", request.method, request.path)
            return error_response(f"{PANIC_PREFIX}{exc}")
