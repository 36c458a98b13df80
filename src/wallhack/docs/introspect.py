"""Runtime half of the documentation probe.

Imported by the generated probe program inside the child interpreter.
For each route of a route table it recovers what cannot be read from
source: the handler's identity, its declared response type, and a
sample response (the type's zero value, or the result of the type's
``example()`` method when it has one).

The endpoint list is written to stdout as a single JSON array;
diagnostics go to stderr.
"""

import dataclasses
import enum
import sys
import types
from collections.abc import Iterable
from typing import (
    IO,
    Any,
    Literal,
    Protocol,
    Union,
    get_args,
    get_origin,
    get_type_hints,
    is_typeddict,
    runtime_checkable,
)

from wallhack.contract import handler_identity, unwrap_indirection, verify_handler
from wallhack.http.encoding import encode
from wallhack.routing.route import Route

_SCALAR_ZEROS: dict[Any, Any] = {
    bool: False,
    int: 0,
    float: 0.0,
    str: "",
    bytes: b"",
}

_SEQUENCE_ORIGINS = (list, tuple, set, frozenset)


@runtime_checkable
class Exampler(Protocol):
    """A response type that supplies its own documentation sample."""

    def example(self, method: str, url: str, func_name: str) -> Any: ...


def zero_value(tp: Any) -> Any:
    """Build the zero value of type *tp*.

    Optional types are None. Scalars map to their empty value, containers
    to empty containers, and enums to their first member. Dataclasses,
    ``NamedTuple`` and ``TypedDict`` types become an instance whose
    fields are all zero. Other classes are instantiated without
    arguments when possible; anything else is ``None``.
    """
    if _is_optional(tp):
        return None
    tp = unwrap_indirection(tp)

    if tp is None or tp is types.NoneType or tp is Any:
        return None
    if tp in _SCALAR_ZEROS:
        return _SCALAR_ZEROS[tp]

    origin = get_origin(tp)
    if origin is Literal:
        return get_args(tp)[0]
    if origin in (Union, types.UnionType):
        return zero_value(get_args(tp)[0])
    if origin is not None:
        if isinstance(origin, type) and issubclass(origin, dict):
            return {}
        if origin in _SEQUENCE_ORIGINS:
            return []
        tp = origin

    if not isinstance(tp, type):
        return None
    if issubclass(tp, enum.Enum):
        return next(iter(tp), None)
    if dataclasses.is_dataclass(tp):
        hints = _hints(tp)
        return tp(
            **{
                f.name: zero_value(hints.get(f.name, f.type))
                for f in dataclasses.fields(tp)
                if f.init
            }
        )
    if is_typeddict(tp):
        return {name: zero_value(hint) for name, hint in _hints(tp).items()}
    if issubclass(tp, tuple) and hasattr(tp, "_fields"):
        hints = _hints(tp)
        return tp(*(zero_value(hints.get(name, Any)) for name in tp._fields))
    if issubclass(tp, dict):
        return {}
    if issubclass(tp, _SEQUENCE_ORIGINS):
        return []
    try:
        return tp()
    except Exception:
        return None


def _is_optional(tp: Any) -> bool:
    return get_origin(tp) in (Union, types.UnionType) and types.NoneType in get_args(tp)


def _hints(tp: type) -> dict[str, Any]:
    try:
        return get_type_hints(tp)
    except Exception as exc:
        print(
            f"cannot resolve annotations of {tp.__module__}.{tp.__qualname__}: {exc}",
            file=sys.stderr,
        )
        return {}


def sample_response(response_type: Any, method: str, url: str, func_name: str) -> Any:
    """The documented response for a handler declared to return *response_type*."""
    value = zero_value(response_type)
    if isinstance(value, Exampler):
        return value.example(method, url, func_name)
    return value


def describe_route(route: Route) -> dict[str, Any]:
    """One endpoint record: ``{Method, URL, Package, Func, Response}``."""
    contract = verify_handler(route.handler)
    package, func = handler_identity(route.handler)
    return {
        "Method": route.method,
        "URL": route.path,
        "Package": package,
        "Func": func,
        "Response": sample_response(contract.response_type, route.method, route.path, func),
    }


def dump(
    routes: Iterable[Route],
    stdout: IO[str] | None = None,
    stderr: IO[str] | None = None,
) -> int:
    """Write the endpoint records of *routes* to *stdout* as one JSON array.

    Returns the process exit status.
    """
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    endpoints = []
    for route in routes:
        record = describe_route(route)
        print(f"{record['Method']} {record['URL']} -> {record['Package']}.{record['Func']}", file=stderr)
        endpoints.append(record)

    stdout.write(encode(endpoints))
    stdout.write("\n")
    stdout.flush()
    return 0
