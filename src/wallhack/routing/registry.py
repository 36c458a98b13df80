"""Route registry: the explicit, build-once collection of routes.

``add()`` verifies each handler's contract immediately and rejects
duplicate ``(method, path)`` pairs. ``build()`` compiles the trie router
once; afterwards the registry is read-only.
"""

import logging
from collections.abc import Callable, Iterable
from typing import Any

from wallhack.adapter import HandlerAdapter
from wallhack.contract import verify_handler
from wallhack.errors import ConfigurationError, DuplicateRouteError
from wallhack.routing.route import CompiledRoute, Route
from wallhack.routing.router import Router, canonical_path, parse_path

logger = logging.getLogger("wallhack.server")


class Registry:
    """Collects routes, then builds an immutable dispatch table.

    Usage::

        registry = Registry()
        registry.add("GET", "/items", list_items)
        registry.add_all(URLS)
        router = registry.build()
    """

    __slots__ = ("_error_status", "_pending", "_router", "_seen")

    def __init__(self, *, error_status: int | None = None) -> None:
        self._error_status = error_status
        self._pending: list[CompiledRoute] = []
        self._seen: dict[tuple[str, str], Route] = {}
        self._router: Router | None = None

    def add(self, method: str, path: str, handler: Callable[..., Any]) -> CompiledRoute:
        """Register *handler* for ``(method, path)``.

        Raises:
            ContractError: *handler* does not satisfy the handler contract.
            DuplicateRouteError: ``(method, path)`` is already registered.
            ConfigurationError: the registry has already been built, or
                the path is malformed.
        """
        if self._router is not None:
            msg = "Cannot add routes after the registry has been built."
            raise ConfigurationError(msg)

        route = Route(method=method.upper(), path=path, handler=handler)
        key = (route.method, canonical_path(parse_path(path)))
        if key in self._seen:
            raise DuplicateRouteError(route.method, path)

        contract = verify_handler(handler)
        compiled = CompiledRoute(
            route=route,
            contract=contract,
            procedure=HandlerAdapter(contract, error_status=self._error_status),
        )
        self._seen[key] = route
        self._pending.append(compiled)
        return compiled

    def add_all(self, routes: Iterable[Route]) -> None:
        """Register every route of a ``RouteTable`` (or any iterable of routes)."""
        for route in routes:
            self.add(route.method, route.path, route.handler)

    @property
    def built(self) -> bool:
        return self._router is not None

    def __len__(self) -> int:
        return len(self._pending)

    def build(self) -> Router:
        """Compile the dispatch table. Later calls return the same router."""
        if self._router is not None:
            return self._router
        router = Router()
        for compiled in self._pending:
            router.add(compiled)
        router.compile()
        self._router = router
        logger.debug("registry built with %d routes", len(self._pending))
        return router
