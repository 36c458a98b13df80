"""Tests for the items example: success, handler errors, recovered panics."""

from wallhack.testing import TestClient


class TestGetItem:
    """GET /items: encoded value, no error field."""

    async def test_returns_item(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/items")
            assert response.status == 200
            assert response.content_type == "application/json"
            assert response.json == {
                "Name": "boop",
                "Value": 7,
                "Value8": 8,
                "Value16": 9,
                "Value32": 10,
                "Value64": 11,
                "Bool": True,
            }


class TestCreateItem:
    """POST /items: handler returns an error."""

    async def test_error_envelope(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.post("/items", json={"Name": "x"})
            assert response.status == 200
            assert response.json == {"Error": "stuff went wrong: 2354"}


class TestDeleteItem:
    """DELETE /items: handler raises, Recovery answers."""

    async def test_panic_envelope(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.delete("/items")
            assert response.status == 200
            assert response.json == {"Error": "PANIC: NOPE"}

    async def test_server_keeps_serving(self, example_app) -> None:
        async with TestClient(example_app) as client:
            await client.delete("/items")
            response = await client.get("/items")
            assert response.status == 200
            assert response.json["Name"] == "boop"


class TestFindItem:
    """GET /items/{name}: async handler with a path parameter."""

    async def test_found(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/items/boop")
            assert response.json["Value64"] == 11

    async def test_missing_sets_status(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/items/nope")
            assert response.status == 404
            assert response.json == {"Error": "no item named 'nope'"}


class TestRouting:
    async def test_unknown_path(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/nothing")
            assert response.status == 404
            assert "Error" in response.json

    async def test_wrong_method(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.put("/items")
            assert response.status == 405
            assert response.header("allow") == "DELETE, GET, POST"
            assert "Error" in response.json
