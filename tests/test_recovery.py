"""Tests for wallhack.middleware.recovery: panics become envelopes."""

import logging

import pytest

from wallhack.errors import NotFound
from wallhack.http.headers import Headers
from wallhack.http.query import QueryParams
from wallhack.http.request import Request
from wallhack.http.response import Response
from wallhack.middleware import Recovery


def make_request() -> Request:
    return Request(
        method="DELETE",
        path="/items",
        headers=Headers(),
        query=QueryParams(),
        path_params={},
    )


async def ok(request: Request) -> Response:
    return Response(body='{"ok": true}')


async def panics(request: Request) -> Response:
    raise RuntimeError("NOPE")


class TestRecovery:
    async def test_passes_through(self) -> None:
        response = await Recovery()(make_request(), ok)
        assert response.json == {"ok": True}

    async def test_panic_envelope(self) -> None:
        response = await Recovery()(make_request(), panics)
        assert response.status == 200
        assert response.text == '{"Error": "PANIC: NOPE"}'

    async def test_panic_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.ERROR, logger="wallhack.server"):
            await Recovery()(make_request(), panics)
        assert any("PANIC DELETE /items" in r.getMessage() for r in caplog.records)
        assert caplog.records[-1].exc_info is not None

    async def test_http_error_not_recovered(self) -> None:
        async def missing(request: Request) -> Response:
            raise NotFound()

        with pytest.raises(NotFound):
            await Recovery()(make_request(), missing)

    async def test_next_request_unaffected(self) -> None:
        recovery = Recovery()
        await recovery(make_request(), panics)
        response = await recovery(make_request(), ok)
        assert response.json == {"ok": True}
