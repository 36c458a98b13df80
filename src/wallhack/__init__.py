"""Wallhack: typed JSON handlers with generated API documentation.

Write a handler once; serve it over ASGI and document it from source.

Basic usage::

    from wallhack import App, Request, ResponseSink, Route, RouteTable

    def list_items(response: ResponseSink, request: Request) -> tuple[list[Item], Exception | None]:
        return ITEMS, None

    URLS = RouteTable(
        Route("GET", "/items", list_items),
    )

    app = App()
    app.mount(URLS)
    app.run()

Documentation::

    $ wallhack docs myservice.api -o API.md
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "AsyncHandler",
    "BuildPipelineError",
    "ConfigurationError",
    "ContractError",
    "DuplicateRouteError",
    "ErrorEnvelope",
    "HTTPError",
    "Handler",
    "MethodNotAllowed",
    "Middleware",
    "Next",
    "NotFound",
    "ProbeConfig",
    "Recovery",
    "Registry",
    "Request",
    "Response",
    "ResponseSink",
    "Route",
    "RouteTable",
    "WallhackError",
    "verify_handler",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wallhack`` fast; the doc-build child imports only
    what it needs.
    """
    if name == "App":
        from wallhack.app import App

        return App

    if name in ("AppConfig", "ProbeConfig"):
        from wallhack import config as _config

        return getattr(_config, name)

    if name == "Request":
        from wallhack.http.request import Request

        return Request

    if name in ("Response", "ResponseSink"):
        from wallhack.http import response as _resp

        return getattr(_resp, name)

    if name == "ErrorEnvelope":
        from wallhack.http.encoding import ErrorEnvelope

        return ErrorEnvelope

    if name in ("Handler", "AsyncHandler", "verify_handler"):
        from wallhack import contract as _contract

        return getattr(_contract, name)

    if name in ("Route", "RouteTable", "Registry"):
        from wallhack import routing as _routing

        return getattr(_routing, name)

    if name in ("Middleware", "Next", "Recovery"):
        from wallhack import middleware as _mw

        return getattr(_mw, name)

    if name in (
        "BuildPipelineError",
        "ConfigurationError",
        "ContractError",
        "DuplicateRouteError",
        "HTTPError",
        "MethodNotAllowed",
        "NotFound",
        "WallhackError",
    ):
        from wallhack import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
