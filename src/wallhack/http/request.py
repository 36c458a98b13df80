"""Immutable HTTP request.

Frozen metadata with async body access. This is the second input of
every handler.
"""

from __future__ import annotations

import json as json_module
from collections.abc import AsyncIterator
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from wallhack._internal.asgi import Receive
from wallhack.http.headers import Headers
from wallhack.http.query import QueryParams

if TYPE_CHECKING:
    from wallhack.routing.params import ParamValue


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata is frozen at creation. The body is read lazily through
    ``await request.body()`` / ``.json()`` / ``.text()`` and cached, so
    middleware and the handler can both read it.
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    path_params: dict[str, ParamValue]
    http_version: str = "1.1"
    client: tuple[str, int] | None = None

    _receive: Receive | None = field(default=None, repr=False, compare=False)

    # Mutable cache behind a frozen field reference
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Path plus query string."""
        qs = self.query.raw
        if qs:
            return f"{self.path}?{qs.decode('latin-1')}"
        return self.path

    def with_path_params(self, path_params: dict[str, ParamValue]) -> Request:
        """Return a copy carrying the router's captured path parameters.

        The body cache is shared so a body read by middleware is not lost.
        """
        return replace(self, path_params=path_params, _cache=self._cache)

    # -- Async body access --

    async def stream(self) -> AsyncIterator[bytes]:
        """Stream the request body in chunks."""
        if self._receive is None:
            return
        while True:
            message = await self._receive()
            chunk = message.get("body", b"")
            if chunk:
                yield chunk
            if not message.get("more_body", False):
                break

    async def body(self) -> bytes:
        """Read the full body. The ASGI stream is consumed once."""
        if "body" not in self._cache:
            self._cache["body"] = b"".join([chunk async for chunk in self.stream()])
        return self._cache["body"]

    async def text(self) -> str:
        return (await self.body()).decode("utf-8")

    async def json(self) -> Any:
        """Parse the body as JSON."""
        return json_module.loads(await self.body())

    @classmethod
    def from_asgi(cls, scope: dict[str, Any], receive: Receive) -> Request:
        """Create a Request from an ASGI HTTP scope and receive callable."""
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            headers=Headers(tuple(scope.get("headers", ()))),
            query=QueryParams(scope.get("query_string", b"")),
            path_params={},
            http_version=scope.get("http_version", "1.1"),
            client=tuple(client) if client else None,
            _receive=receive,
        )
