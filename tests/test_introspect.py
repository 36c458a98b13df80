"""Tests for wallhack.docs.introspect: zero values and endpoint records."""

import enum
import io
import json
from dataclasses import dataclass, field
from typing import Literal, NamedTuple, TypedDict

import pytest

from wallhack.docs.introspect import describe_route, dump, sample_response, zero_value
from wallhack.errors import ContractError
from wallhack.http.request import Request
from wallhack.http.response import ResponseSink
from wallhack.routing import Route, RouteTable


class Level(enum.Enum):
    LOW = 1
    HIGH = 2


class Point(NamedTuple):
    x: int
    y: float


class Movie(TypedDict):
    title: str
    year: int


@dataclass
class Item:
    name: str = field(default="", metadata={"json": "Name"})
    tags: list[str] = field(default_factory=list)
    level: Level = Level.HIGH
    parent: "Item | None" = None


@dataclass
class Sampled:
    value: int = 0

    def example(self, method: str, url: str, func_name: str) -> dict:
        return {"method": method, "url": url, "func": func_name}


class TestZeroValue:
    @pytest.mark.parametrize(
        ("tp", "expected"),
        [
            (int, 0),
            (float, 0.0),
            (str, ""),
            (bool, False),
            (list[int], []),
            (tuple[int, ...], []),
            (dict[str, int], {}),
            (set[str], []),
            (None, None),
            (int | None, None),
            (Literal["a", "b"], "a"),
        ],
    )
    def test_simple(self, tp, expected) -> None:
        assert zero_value(tp) == expected

    def test_dataclass(self) -> None:
        assert zero_value(Item) == Item(name="", tags=[], level=Level.LOW, parent=None)

    def test_enum_first_member(self) -> None:
        assert zero_value(Level) is Level.LOW

    def test_named_tuple(self) -> None:
        assert zero_value(Point) == Point(0, 0.0)

    def test_typed_dict(self) -> None:
        assert zero_value(Movie) == {"title": "", "year": 0}

    def test_plain_class(self) -> None:
        class Plain:
            pass

        assert isinstance(zero_value(Plain), Plain)

    def test_class_needing_arguments(self) -> None:
        class Needy:
            def __init__(self, x: int) -> None:
                self.x = x

        assert zero_value(Needy) is None

    def test_unresolvable_annotation_reported(self, capsys: pytest.CaptureFixture[str]) -> None:
        @dataclass
        class Orphan:
            owner: "Phantom" = None  # type: ignore[name-defined]  # noqa: F821

        assert zero_value(Orphan) == Orphan(owner=None)
        err = capsys.readouterr().err
        assert "cannot resolve annotations of" in err
        assert "Orphan" in err
        assert "Phantom" in err


class TestSampleResponse:
    def test_zero_without_example(self) -> None:
        assert sample_response(list[int], "GET", "/x", "f") == []

    def test_example_capability(self) -> None:
        assert sample_response(Sampled, "POST", "/s", "make") == {
            "method": "POST",
            "url": "/s",
            "func": "make",
        }


def get_item(response: ResponseSink, request: Request) -> tuple[Item, Exception | None]:
    return Item(), None


def make_sample(response: ResponseSink, request: Request) -> tuple[Sampled, Exception | None]:
    return Sampled(), None


def broken(request: Request) -> Item:
    return Item()


class TestDescribeRoute:
    def test_record(self) -> None:
        record = describe_route(Route("GET", "/items", get_item))
        assert record["Method"] == "GET"
        assert record["URL"] == "/items"
        assert record["Package"] == __name__
        assert record["Func"] == "get_item"
        assert record["Response"] == Item(level=Level.LOW)

    def test_example_gets_func_name(self) -> None:
        record = describe_route(Route("POST", "/samples", make_sample))
        assert record["Response"] == {"method": "POST", "url": "/samples", "func": "make_sample"}

    def test_contract_enforced(self) -> None:
        with pytest.raises(ContractError):
            describe_route(Route("GET", "/broken", broken))


class TestDump:
    def test_writes_json_array(self) -> None:
        out, err = io.StringIO(), io.StringIO()
        table = RouteTable(
            Route("GET", "/items", get_item),
            Route("POST", "/samples", make_sample),
        )
        assert dump(table, out, err) == 0

        records = json.loads(out.getvalue())
        assert [r["URL"] for r in records] == ["/items", "/samples"]
        assert records[0]["Response"] == {
            "Name": "",
            "tags": [],
            "level": 1,
            "parent": None,
        }
        assert "GET /items" in err.getvalue()

    def test_empty_table(self) -> None:
        out = io.StringIO()
        dump(RouteTable(), out, io.StringIO())
        assert out.getvalue() == "[]\n"
