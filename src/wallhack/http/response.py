"""HTTP response types.

``ResponseSink`` is the first input of every handler: a per-request,
mutable place to set status and headers. The body is never written
by the handler; the adapter serializes the handler's return value.

``Response`` is what the pipeline sends. It is immutable and built
through chainable ``.with_*()`` transformations.
"""

import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from wallhack.http.encoding import JSON_CONTENT_TYPE, ErrorEnvelope


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations."""

    body: str | bytes = ""
    status: int = 200
    content_type: str = JSON_CONTENT_TYPE
    headers: tuple[tuple[str, str], ...] = ()

    def with_status(self, status: int) -> "Response":
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> "Response":
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> "Response":
        return replace(self, headers=(*self.headers, *headers.items()))

    def with_content_type(self, content_type: str) -> "Response":
        return replace(self, content_type=content_type)

    @property
    def body_bytes(self) -> bytes:
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body

    @property
    def json(self) -> Any:
        """The body decoded as JSON."""
        return json_module.loads(self.body_bytes)

    def header(self, name: str) -> str | None:
        """First value of header *name* (case-insensitive), or None."""
        wanted = name.lower()
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return None


def error_response(message: str, *, status: int = 200) -> Response:
    """A response whose body is the error envelope ``{"Error": message}``."""
    return Response(body=ErrorEnvelope(message).encode(), status=status)


class ResponseSink:
    """Per-request response metadata a handler may adjust.

    Usage inside a handler::

        def create(response: ResponseSink, request: Request) -> tuple[Item, Exception | None]:
            response.status = 201
            response.set_header("Location", "/items/1")
            return item, None

    ``status`` stays ``None`` unless set, meaning "transport default" (200).
    """

    __slots__ = ("_headers", "status")

    def __init__(self) -> None:
        self.status: int | None = None
        self._headers: list[tuple[str, str]] = []

    @property
    def headers(self) -> tuple[tuple[str, str], ...]:
        return tuple(self._headers)

    def header(self, name: str) -> str | None:
        wanted = name.lower()
        for key, value in self._headers:
            if key.lower() == wanted:
                return value
        return None

    def set_header(self, name: str, value: str) -> None:
        """Set *name*, replacing any earlier values."""
        self.del_header(name)
        self._headers.append((name, value))

    def add_header(self, name: str, value: str) -> None:
        """Append a value for *name*, keeping earlier ones."""
        self._headers.append((name, value))

    def del_header(self, name: str) -> None:
        wanted = name.lower()
        self._headers = [(k, v) for k, v in self._headers if k.lower() != wanted]

    def to_response(self, body: str) -> Response:
        """Freeze the sink into a Response carrying *body*."""
        content_type = self.header("Content-Type") or JSON_CONTENT_TYPE
        headers = tuple((k, v) for k, v in self._headers if k.lower() != "content-type")
        return Response(
            body=body,
            status=self.status if self.status is not None else 200,
            content_type=content_type,
            headers=headers,
        )
