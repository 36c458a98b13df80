"""Invoke helper: call sync or async handlers uniformly.

Handlers can be ``def`` or ``async def``. The adapter, the middleware chain,
and the test helpers all go through this single helper so the sync/async
check lives in exactly one place.
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *handler* and await the result if it is awaitable."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
