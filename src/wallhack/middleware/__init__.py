"""Middleware: Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Built-in middleware:
    Recovery -- converts unexpected handler failures into error envelopes
"""

from wallhack.middleware.protocol import Middleware, Next
from wallhack.middleware.recovery import Recovery

__all__ = [
    "Middleware",
    "Next",
    "Recovery",
]
