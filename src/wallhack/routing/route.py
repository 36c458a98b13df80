"""Route declarations and compiled route records."""

from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any, overload

from wallhack.adapter import HandlerAdapter
from wallhack.contract import HandlerContract
from wallhack.routing.params import ParamValue


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Static:  ``/users``  (is_param=False)
    Param:   ``/{id}``   (is_param=True, param_name="id")
    Typed:   ``/{id:int}`` (is_param=True, param_name="id", param_type="int")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"


@dataclass(frozen=True, slots=True)
class Route:
    """A ``(method, path, handler)`` triple.

    The handler is referenced, not copied. Its contract is verified when
    the route is added to a ``Registry``.
    """

    method: str
    path: str
    handler: Callable[..., Any]


class RouteTable(Sequence[Route]):
    """An ordered, immutable collection of routes declared at module level.

    This is what the documentation scanner looks for, and what
    ``App.mount()`` registers::

        URLS = RouteTable(
            Route("GET", "/items", list_items),
            Route("POST", "/items", create_item),
        )

    Declaration order is preserved and becomes the endpoint order in the
    generated documentation.
    """

    __slots__ = ("_routes",)

    def __init__(self, *routes: Route | Iterable[Route]) -> None:
        flat: list[Route] = []
        for item in routes:
            if isinstance(item, Route):
                flat.append(item)
            else:
                flat.extend(item)
        for item in flat:
            if not isinstance(item, Route):
                msg = f"RouteTable entries must be Route, got {type(item).__name__}"
                raise TypeError(msg)
        self._routes: tuple[Route, ...] = tuple(flat)

    @overload
    def __getitem__(self, index: int) -> Route: ...
    @overload
    def __getitem__(self, index: slice) -> "RouteTable": ...
    def __getitem__(self, index: int | slice) -> "Route | RouteTable":
        if isinstance(index, slice):
            return RouteTable(self._routes[index])
        return self._routes[index]

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self) -> Iterator[Route]:
        return iter(self._routes)

    def __repr__(self) -> str:
        inner = ", ".join(f"{r.method} {r.path}" for r in self._routes)
        return f"RouteTable({inner})"


@dataclass(frozen=True, slots=True)
class CompiledRoute:
    """A registered route: its declaration, verified contract, and procedure."""

    route: Route
    contract: HandlerContract
    procedure: HandlerAdapter

    @property
    def method(self) -> str:
        return self.route.method

    @property
    def path(self) -> str:
        return self.route.path


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    compiled: CompiledRoute
    path_params: dict[str, ParamValue]
