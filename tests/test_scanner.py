"""Tests for wallhack.docs.scanner: finding route tables in source."""

import textwrap
from pathlib import Path

import pytest

from wallhack.docs.model import Endpoint
from wallhack.docs.scanner import (
    find_tables,
    import_bindings,
    locate_target,
    parse_module,
    scan,
)
from wallhack.errors import ProbeExitError, ScanError

FIXTURES = Path(__file__).parent / "fixtures"


class FakeOracle:
    """Returns canned endpoints and records every call."""

    def __init__(self, endpoints: dict[str, list[Endpoint]] | None = None) -> None:
        self.endpoints = endpoints or {}
        self.calls: list[tuple[str, str, str]] = []

    def run(self, import_path: str, alias: str, variable: str) -> list[Endpoint]:
        self.calls.append((import_path, alias, variable))
        return self.endpoints.get(variable, [])


class FailingOracle:
    def run(self, import_path: str, alias: str, variable: str) -> list[Endpoint]:
        raise ProbeExitError(1, "boom")


def write(root: Path, relative: str, source: str) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(source), encoding="utf-8")
    return path


def module_from(tmp_path: Path, source: str, name: str = "svc.api") -> list:
    path = write(tmp_path, name.replace(".", "/") + ".py", source)
    return find_tables(parse_module(name, path, False))


class TestLocateTarget:
    def test_package(self) -> None:
        found = locate_target("shop", [str(FIXTURES)])
        assert [name for name, _, _ in found] == [
            "shop",
            "shop.admin",
            "shop.decoy",
            "shop.storefront",
        ]
        assert found[0][2] is True

    def test_module(self) -> None:
        found = locate_target("shop.storefront", [str(FIXTURES)])
        assert found == [("shop.storefront", FIXTURES / "shop" / "storefront.py", False)]

    def test_first_search_path_wins(self, tmp_path: Path) -> None:
        write(tmp_path, "shop.py", "")
        found = locate_target("shop", [str(tmp_path), str(FIXTURES)])
        assert found == [("shop", tmp_path / "shop.py", False)]

    def test_missing(self, tmp_path: Path) -> None:
        with pytest.raises(ScanError, match="cannot find 'nowhere'"):
            locate_target("nowhere", [str(tmp_path)])

    def test_not_dotted_path(self) -> None:
        with pytest.raises(ScanError, match="not a dotted module path"):
            locate_target("shop/api", ["."])


class TestParseModule:
    def test_syntax_error(self, tmp_path: Path) -> None:
        path = write(tmp_path, "bad.py", "def broken(:\n")
        with pytest.raises(ScanError, match="bad.py:1"):
            parse_module("bad", path, False)

    def test_unreadable(self, tmp_path: Path) -> None:
        with pytest.raises(ScanError, match="cannot read"):
            parse_module("gone", tmp_path / "gone.py", False)


class TestImportBindings:
    def test_forms(self, tmp_path: Path) -> None:
        path = write(
            tmp_path,
            "svc/api.py",
            """
            import wallhack
            import wallhack.routing as routing
            import os.path
            from wallhack.routing import RouteTable as RT
            from . import helpers
            from ..common import Thing
            """,
        )
        bindings = import_bindings(parse_module("pkg.svc.api", path, False))
        assert bindings["wallhack"] == "wallhack"
        assert bindings["routing"] == "wallhack.routing"
        assert bindings["os"] == "os"
        assert bindings["RT"] == "wallhack.routing.RouteTable"
        assert bindings["helpers"] == "pkg.svc.helpers"
        assert bindings["Thing"] == "pkg.common.Thing"

    def test_relative_from_package_init(self, tmp_path: Path) -> None:
        path = write(tmp_path, "svc/__init__.py", "from .api import URLS\n")
        bindings = import_bindings(parse_module("svc", path, True))
        assert bindings["URLS"] == "svc.api.URLS"


class TestFindTables:
    def test_call_through_alias(self, tmp_path: Path) -> None:
        tables = module_from(
            tmp_path,
            """
            from wallhack.routing import RouteTable as RT

            URLS = RT()
            """,
        )
        assert [t.variable for t in tables] == ["URLS"]

    def test_module_attribute(self, tmp_path: Path) -> None:
        tables = module_from(
            tmp_path,
            """
            import wallhack

            URLS = wallhack.RouteTable()
            """,
        )
        assert [t.variable for t in tables] == ["URLS"]

    def test_annotation_only_value(self, tmp_path: Path) -> None:
        tables = module_from(
            tmp_path,
            """
            import wallhack.routing

            URLS: wallhack.routing.RouteTable = build_routes()
            """,
        )
        assert [t.variable for t in tables] == ["URLS"]

    def test_string_annotation(self, tmp_path: Path) -> None:
        tables = module_from(
            tmp_path,
            """
            from wallhack import RouteTable

            URLS: "RouteTable" = make()
            """,
        )
        assert [t.variable for t in tables] == ["URLS"]

    def test_unrelated_class_with_same_name(self, tmp_path: Path) -> None:
        tables = module_from(
            tmp_path,
            """
            from mylib import RouteTable

            class Other:
                pass

            URLS = RouteTable()
            MORE = Other()
            """,
        )
        assert tables == []

    def test_nested_assignments_ignored(self, tmp_path: Path) -> None:
        tables = module_from(
            tmp_path,
            """
            from wallhack import RouteTable

            def factory():
                URLS = RouteTable()
                return URLS
            """,
        )
        assert tables == []

    def test_attribute_docstring(self, tmp_path: Path) -> None:
        tables = module_from(
            tmp_path,
            '''
            from wallhack import RouteTable

            # ignored when a docstring follows
            URLS = RouteTable()
            """
            Public routes.

            Served under /v1.
            """
            ''',
        )
        assert tables[0].doc == "Public routes.\n\nServed under /v1."

    def test_comment_block(self, tmp_path: Path) -> None:
        tables = module_from(
            tmp_path,
            """
            from wallhack import RouteTable

            # not part of the block

            # Internal routes.
            #
            #   indented line
            URLS = RouteTable()
            """,
        )
        assert tables[0].doc == "Internal routes.\n\n  indented line"

    def test_no_doc(self, tmp_path: Path) -> None:
        tables = module_from(
            tmp_path,
            """
            from wallhack import RouteTable
            URLS = RouteTable()
            """,
        )
        assert tables[0].doc == ""

    def test_source_order(self, tmp_path: Path) -> None:
        tables = module_from(
            tmp_path,
            """
            from wallhack import RouteTable

            B = RouteTable()
            A = RouteTable()
            """,
        )
        assert [t.variable for t in tables] == ["B", "A"]


class TestScan:
    def test_fixture_package(self) -> None:
        oracle = FakeOracle()
        groups = scan("shop", oracle, [str(FIXTURES)])
        assert sorted(groups) == ["ADMIN", "STOREFRONT"]
        assert oracle.calls == [
            ("shop.admin", "admin", "ADMIN"),
            ("shop.storefront", "storefront", "STOREFRONT"),
        ]
        assert groups["ADMIN"].doc == "Administrative routes."
        assert groups["STOREFRONT"].doc == "Public storefront routes.\nRead-only except checkout."

    def test_docs_attached_by_identity(self) -> None:
        oracle = FakeOracle(
            {
                "STOREFRONT": [
                    Endpoint("GET", "/products", "shop.storefront", "list_products"),
                    Endpoint("POST", "/orders", "shop.storefront", "Checkout.place_order"),
                    Endpoint("GET", "/elsewhere", "other.module", "list_products"),
                ]
            }
        )
        groups = scan("shop.storefront", oracle, [str(FIXTURES)])
        endpoints = groups["STOREFRONT"].endpoints
        assert endpoints[0].doc == "List every product.\n\nPrices are in *cents*."
        assert endpoints[1].doc == "Place an order for the current basket."
        assert endpoints[2].doc == ""

    def test_endpoint_order_preserved(self, tmp_path: Path) -> None:
        write(tmp_path, "svc.py", "from wallhack import RouteTable\nURLS = RouteTable()\n")
        endpoints = [Endpoint("GET", f"/{n}", "svc", f"f{n}") for n in (3, 1, 2)]
        groups = scan("svc", FakeOracle({"URLS": endpoints}), [str(tmp_path)])
        assert [e.url for e in groups["URLS"].endpoints] == ["/3", "/1", "/2"]

    def test_duplicate_group_name(self, tmp_path: Path) -> None:
        write(tmp_path, "svc/__init__.py", "")
        write(tmp_path, "svc/a.py", "from wallhack import RouteTable\nURLS = RouteTable()\n")
        write(tmp_path, "svc/b.py", "from wallhack import RouteTable\nURLS = RouteTable()\n")
        with pytest.raises(ScanError, match="'URLS' declared in both svc.a and svc.b"):
            scan("svc", FakeOracle(), [str(tmp_path)])

    def test_syntax_error_aborts(self, tmp_path: Path) -> None:
        write(tmp_path, "svc/__init__.py", "")
        write(tmp_path, "svc/good.py", "from wallhack import RouteTable\nURLS = RouteTable()\n")
        write(tmp_path, "svc/bad.py", "def broken(:\n")
        oracle = FakeOracle()
        with pytest.raises(ScanError):
            scan("svc", oracle, [str(tmp_path)])
        assert oracle.calls == []

    def test_oracle_failure_propagates(self) -> None:
        with pytest.raises(ProbeExitError):
            scan("shop", FailingOracle(), [str(FIXTURES)])

    def test_no_tables(self, tmp_path: Path) -> None:
        write(tmp_path, "empty.py", "X = 1\n")
        assert scan("empty", FakeOracle(), [str(tmp_path)]) == {}
