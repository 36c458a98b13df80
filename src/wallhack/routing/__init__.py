"""Routing: declarative route tables, the build-once registry, and the trie router."""

from wallhack.routing.registry import Registry
from wallhack.routing.route import CompiledRoute, Route, RouteMatch, RouteTable
from wallhack.routing.router import Router

__all__ = [
    "CompiledRoute",
    "Registry",
    "Route",
    "RouteMatch",
    "RouteTable",
    "Router",
]
