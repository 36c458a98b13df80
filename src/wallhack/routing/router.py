"""Compiled router with trie-based path matching.

Routes are inserted while the registry is being built and frozen by
``compile()``. After that the trie is only read, so concurrent requests
need no locking.
"""

import re
from dataclasses import dataclass

from wallhack.errors import ConfigurationError, MethodNotAllowed, NotFound
from wallhack.routing.params import CONVERTERS, ParamValue, convert_param
from wallhack.routing.route import CompiledRoute, PathSegment, RouteMatch

_FLASK_PARAM = re.compile(r"<[^>]*>")


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path string into segments.

    Examples::

        "/users"          -> [PathSegment("users")]
        "/users/{id}"     -> [PathSegment("users"), PathSegment("{id}", is_param=True, ...)]
        "/users/{id:int}" -> [PathSegment("users"), PathSegment("{id:int}", ..., param_type="int")]
        "/files/{path:path}" -> [..., PathSegment("{path:path}", ..., param_type="path")]
    """
    if _FLASK_PARAM.search(path):
        msg = f"Route path {path!r} uses <param> syntax; wallhack expects {{param}}."
        raise ConfigurationError(msg)

    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("{") and part.endswith("}"):
            inner = part[1:-1]
            param_name, _, param_type = inner.partition(":")
            param_type = param_type or "str"
            if param_type not in CONVERTERS:
                msg = f"Route path {path!r}: unknown converter {param_type!r}."
                raise ConfigurationError(msg)
            segments.append(
                PathSegment(
                    value=part,
                    is_param=True,
                    param_name=param_name,
                    param_type=param_type,
                )
            )
        else:
            segments.append(PathSegment(value=part))
    return segments


def canonical_path(segments: list[PathSegment]) -> str:
    """The path as the router sees it: no trailing slash, unnamed params.

    ``/users/{id:int}/`` and ``/users/{uid:int}`` share one canonical form,
    since they would land on the same trie node.
    """
    parts = [f"{{:{s.param_type}}}" if s.is_param else s.value for s in segments]
    return "/" + "/".join(parts)


class _TrieNode:
    """A node in the route trie. Mutable during compilation only."""

    __slots__ = ("catch_all", "children", "param_child", "routes_by_method")

    def __init__(self) -> None:
        self.children: dict[str, _TrieNode] = {}
        # One parameter pattern per level
        self.param_child: _ParamEdge | None = None
        # Path converter: consumes the rest of the path
        self.catch_all: _CatchAllEdge | None = None
        self.routes_by_method: dict[str, CompiledRoute] = {}


@dataclass(slots=True)
class _ParamEdge:
    param_name: str
    param_type: str
    regex: re.Pattern[str]
    node: _TrieNode


@dataclass(slots=True)
class _CatchAllEdge:
    param_name: str
    routes_by_method: dict[str, CompiledRoute]


class Router:
    """Compiled router with trie-based path matching.

    Usage::

        router = Router()
        router.add(compiled_route)
        router.compile()
        match = router.match("GET", "/users/42")
    """

    __slots__ = ("_compiled", "_entries", "_root")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._entries: list[CompiledRoute] = []
        self._compiled = False

    def add(self, compiled: CompiledRoute) -> None:
        """Insert a route. Must be called before ``compile()``."""
        if self._compiled:
            msg = "Cannot add routes after the router has been compiled."
            raise ConfigurationError(msg)

        method = compiled.method
        node = self._root
        for seg in parse_path(compiled.path):
            if seg.is_param and seg.param_type == "path":
                if node.catch_all is None:
                    node.catch_all = _CatchAllEdge(seg.param_name or "path", {})
                elif node.catch_all.param_name != seg.param_name:
                    self._conflict(compiled.path, node.catch_all.param_name, seg)
                node.catch_all.routes_by_method[method] = compiled
                self._entries.append(compiled)
                return

            if seg.is_param:
                edge = node.param_child
                if edge is None:
                    pattern, _ = CONVERTERS[seg.param_type]
                    edge = _ParamEdge(
                        param_name=seg.param_name or "",
                        param_type=seg.param_type,
                        regex=re.compile(f"^{pattern}$"),
                        node=_TrieNode(),
                    )
                    node.param_child = edge
                elif (edge.param_name, edge.param_type) != (seg.param_name, seg.param_type):
                    self._conflict(compiled.path, f"{edge.param_name}:{edge.param_type}", seg)
                node = edge.node
            else:
                node = node.children.setdefault(seg.value, _TrieNode())

        node.routes_by_method[method] = compiled
        self._entries.append(compiled)

    @staticmethod
    def _conflict(path: str, existing: str, seg: PathSegment) -> None:
        msg = (
            f"Route path {path!r}: parameter {seg.value} conflicts with "
            f"{{{existing}}} already registered at the same position."
        )
        raise ConfigurationError(msg)

    @property
    def routes(self) -> list[CompiledRoute]:
        """All routes, in registration order."""
        return list(self._entries)

    @property
    def compiled(self) -> bool:
        return self._compiled

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request against the compiled routes.

        Raises ``NotFound`` if no route matches the path and
        ``MethodNotAllowed`` if the path matches but the method doesn't.
        """
        parts = [p for p in path.strip("/").split("/") if p]
        result = self._match_node(self._root, parts, 0, {})
        if result is None:
            raise NotFound(f"No route matches {method} {path!r}")

        routes_by_method, params = result
        if method in routes_by_method:
            return RouteMatch(compiled=routes_by_method[method], path_params=params)
        raise MethodNotAllowed(frozenset(routes_by_method))

    def _match_node(
        self,
        node: _TrieNode,
        parts: list[str],
        index: int,
        params: dict[str, ParamValue],
    ) -> tuple[dict[str, CompiledRoute], dict[str, ParamValue]] | None:
        if index == len(parts):
            if node.routes_by_method:
                return node.routes_by_method, params
            return None

        part = parts[index]

        # 1. Static child (exact match)
        if part in node.children:
            result = self._match_node(node.children[part], parts, index + 1, params)
            if result is not None:
                return result

        # 2. Parameter child
        edge = node.param_child
        if edge is not None and edge.regex.match(part):
            result = self._match_node(
                edge.node,
                parts,
                index + 1,
                {**params, edge.param_name: convert_param(part, edge.param_type)},
            )
            if result is not None:
                return result

        # 3. Catch-all
        if node.catch_all is not None:
            remaining = "/".join(parts[index:])
            return node.catch_all.routes_by_method, {
                **params,
                node.catch_all.param_name: remaining,
            }

        return None
