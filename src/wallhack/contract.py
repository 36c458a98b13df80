"""Handler contract: the one shape every handler has.

A handler is any callable::

    def handler(response: ResponseSink, request: Request) -> tuple[T, Exception | None]: ...

or the ``async def`` equivalent. The first output is the value to encode
as JSON, the second is ``None`` on success or an error describing the
failure.

``Handler`` and ``AsyncHandler`` let a type checker enforce the shape
statically. Python does not enforce annotations at runtime, so
``verify_handler()`` checks the same contract once, when a handler is
registered or introspected, and raises ``ContractError`` naming the
offending position. It is never deferred to the first request.

The serving path and the documentation probe both call
``verify_handler()``, so they agree on what a handler's response type is.
"""

import functools
import inspect
import types
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import (
    Annotated,
    Any,
    NewType,
    Protocol,
    TypeAliasType,
    Union,
    get_args,
    get_origin,
)

from wallhack.errors import ContractError
from wallhack.http.request import Request
from wallhack.http.response import ResponseSink

_EXPECTED_SHAPE = "(ResponseSink, Request) -> tuple[T, Exception | None]"


class Handler[T](Protocol):
    """A synchronous handler returning ``(value, error_or_None)``."""

    def __call__(
        self, response: ResponseSink, request: Request, /
    ) -> tuple[T, Exception | None]: ...


class AsyncHandler[T](Protocol):
    """An ``async def`` handler returning ``(value, error_or_None)``."""

    def __call__(
        self, response: ResponseSink, request: Request, /
    ) -> Awaitable[tuple[T, Exception | None]]: ...


@dataclass(frozen=True, slots=True)
class HandlerContract:
    """The verified shape of one handler."""

    handler: Callable[..., Any]
    module: str
    qualname: str
    response_type: Any
    error_type: Any
    is_async: bool

    @property
    def name(self) -> str:
        return f"{self.module}.{self.qualname}" if self.module else self.qualname


def handler_identity(handler: Any) -> tuple[str, str]:
    """Return ``(module, qualname)`` of the function behind *handler*.

    Follows ``functools.wraps`` chains, partials, and bound methods. For a
    callable instance, the identity is its class's ``__call__``.
    """
    target = inspect.unwrap(handler)
    while isinstance(target, functools.partial):
        target = inspect.unwrap(target.func)
    if inspect.ismethod(target):
        target = target.__func__

    qualname = getattr(target, "__qualname__", None)
    if isinstance(qualname, str) and not isinstance(target, type):
        return getattr(target, "__module__", None) or "", qualname

    cls = target if isinstance(target, type) else type(target)
    return cls.__module__, f"{cls.__qualname__}.__call__"


def unwrap_indirection(annotation: Any) -> Any:
    """Strip wrappers around a declared type down to the concrete value type.

    Unwraps ``Annotated[X, ...]``, ``type`` aliases, ``NewType``, and
    ``X | None``. Unions of several real types are returned unchanged.
    """
    while True:
        if isinstance(annotation, TypeAliasType):
            annotation = annotation.__value__
        elif get_origin(annotation) is Annotated:
            annotation = get_args(annotation)[0]
        elif isinstance(annotation, NewType):
            annotation = annotation.__supertype__
        elif _is_union(annotation):
            arms = [a for a in get_args(annotation) if a is not types.NoneType]
            if len(arms) != 1:
                return annotation
            annotation = arms[0]
        else:
            return annotation


def verify_handler(handler: Any) -> HandlerContract:
    """Check *handler* against the contract and describe it.

    Checks, in order: exactly two inputs; input 1 accepts a
    ``ResponseSink``; input 2 accepts a ``Request``; exactly two declared
    outputs; output 2 is an error type. Unannotated inputs are treated as
    ``Any``. The return annotation is required, since it is the only
    place the outputs are declared.

    Raises:
        ContractError: On the first violated clause.
    """
    if not callable(handler):
        raise ContractError(repr(handler), "handler", "callable", type(handler).__name__)

    module, qualname = handler_identity(handler)
    name = f"{module}.{qualname}" if module else qualname

    try:
        sig = inspect.signature(handler, eval_str=True)
    except (NameError, SyntaxError, TypeError) as exc:
        raise ContractError(name, "annotations", "resolvable", str(exc)) from exc
    except ValueError as exc:
        raise ContractError(name, "signature", "inspectable", str(exc)) from exc

    params = list(sig.parameters.values())
    positional = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    if len(params) != 2 or any(p.kind not in positional for p in params):
        raise ContractError(
            name,
            "inputs",
            f"exactly 2 positional inputs {_EXPECTED_SHAPE}",
            f"({', '.join(str(p) for p in params)})",
        )

    sink, request = params
    if not _accepts(sink.annotation, ResponseSink):
        raise ContractError(
            name, "input 1", "a ResponseSink", _describe(sink.annotation)
        )
    if not _accepts(request.annotation, Request):
        raise ContractError(
            name, "input 2", "a Request", _describe(request.annotation)
        )

    returns = sig.return_annotation
    if returns is inspect.Signature.empty:
        raise ContractError(
            name, "outputs", "declared as tuple[T, Exception | None]", "no return annotation"
        )
    outputs = _strip_alias(returns)
    out_args = get_args(outputs)
    if get_origin(outputs) is not tuple or len(out_args) != 2 or out_args[1] is Ellipsis:
        raise ContractError(
            name, "outputs", "exactly 2 outputs tuple[T, Exception | None]", _describe(returns)
        )

    value_type, error_type = out_args
    if not _is_error_type(error_type):
        raise ContractError(
            name, "output 2", "an Exception type (optionally | None)", _describe(error_type)
        )

    return HandlerContract(
        handler=handler,
        module=module,
        qualname=qualname,
        response_type=unwrap_indirection(value_type),
        error_type=error_type,
        is_async=_is_async(handler),
    )


# -- Helpers --


def _is_union(annotation: Any) -> bool:
    return get_origin(annotation) in (Union, types.UnionType)


def _strip_alias(annotation: Any) -> Any:
    while True:
        if isinstance(annotation, TypeAliasType):
            annotation = annotation.__value__
        elif get_origin(annotation) is Annotated:
            annotation = get_args(annotation)[0]
        else:
            return annotation


def _accepts(annotation: Any, provided: type) -> bool:
    """Whether a parameter annotated *annotation* can receive a *provided* instance."""
    if annotation is inspect.Parameter.empty or annotation is Any or annotation is object:
        return True
    annotation = _strip_alias(annotation)
    if _is_union(annotation):
        return any(_accepts(arm, provided) for arm in get_args(annotation))
    if isinstance(annotation, type):
        try:
            return issubclass(provided, annotation)
        except TypeError:
            return False
    return False


def _is_error_type(annotation: Any) -> bool:
    annotation = _strip_alias(annotation)
    if _is_union(annotation):
        arms = [a for a in get_args(annotation) if a is not types.NoneType]
        return bool(arms) and all(_is_error_type(arm) for arm in arms)
    return isinstance(annotation, type) and issubclass(annotation, BaseException)


def _is_async(handler: Any) -> bool:
    target = inspect.unwrap(handler)
    while isinstance(target, functools.partial):
        target = inspect.unwrap(target.func)
    if inspect.iscoroutinefunction(target):
        return True
    call = getattr(type(target), "__call__", None)
    return inspect.iscoroutinefunction(call)


def _describe(annotation: Any) -> str:
    if annotation is inspect.Parameter.empty:
        return "no annotation"
    return inspect.formatannotation(annotation)
