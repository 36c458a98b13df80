"""JSON encoding shared by the handler adapter and the documentation probe.

The adapter (serving) and the probe (documentation) must produce the
same bytes for the same value, so both go through ``encode()``.

Beyond the types the ``json`` module handles natively, ``encode()``
understands dataclasses (field names can be overridden with
``field(metadata={"json": "Name"})``, or hidden with ``"-"``), enums,
``Decimal``, ``bytes`` (base64) and ``datetime`` values.

A ``Decimal`` is written as its exact number text, never through a
binary float, so ``decode_exact()`` gets back the same digits.
"""

import base64
import dataclasses
import json
import json.encoder
from collections.abc import Iterator
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any

JSON_CONTENT_TYPE = "application/json"
ERROR_KEY = "Error"
PANIC_PREFIX = "PANIC: "

_INFINITY = float("inf")


@dataclasses.dataclass(frozen=True, slots=True)
class ErrorEnvelope:
    """The one JSON shape used for every failure: ``{"Error": message}``."""

    message: str

    def to_dict(self) -> dict[str, str]:
        return {ERROR_KEY: self.message}

    def encode(self) -> str:
        return encode(self.to_dict())


def json_fields(obj: Any) -> dict[str, Any]:
    """Map a dataclass instance to its JSON object, honouring ``metadata["json"]``."""
    result: dict[str, Any] = {}
    for f in dataclasses.fields(obj):
        name = f.metadata.get("json", f.name)
        if name == "-":
            continue
        result[name] = getattr(obj, f.name)
    return result


def _default(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return json_fields(obj)
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, Decimal):
        return _DecimalNumber(obj)
    if isinstance(obj, (bytes, bytearray)):
        return base64.b64encode(obj).decode("ascii")
    if isinstance(obj, (datetime, date, time)):
        return obj.isoformat()
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    msg = f"Object of type {type(obj).__name__} is not JSON serializable"
    raise TypeError(msg)


class _DecimalNumber(float):
    """A finite ``Decimal`` travelling through the encoder's float branch.

    ``text`` is the exact number written to the document.
    """

    def __new__(cls, value: Decimal) -> "_DecimalNumber":
        if not value.is_finite():
            msg = f"Out of range decimal value is not JSON compliant: {value}"
            raise ValueError(msg)
        number = super().__new__(cls, float(value))
        number.text = str(value)
        return number


def _floatstr(o: float, allow_nan: bool = False) -> str:
    if isinstance(o, _DecimalNumber):
        return o.text
    if o != o or o in (_INFINITY, -_INFINITY):
        if not allow_nan:
            msg = f"Out of range float values are not JSON compliant: {o!r}"
            raise ValueError(msg)
        return "NaN" if o != o else ("Infinity" if o > 0 else "-Infinity")
    return float.__repr__(o)


class _Encoder(json.JSONEncoder):
    """``JSONEncoder`` that writes ``Decimal`` values as exact number text."""

    def default(self, o: Any) -> Any:
        return _default(o)

    def iterencode(self, o: Any, _one_shot: bool = False) -> Iterator[str]:
        markers: dict[int, Any] | None = {} if self.check_circular else None
        indent = self.indent
        if indent is not None and not isinstance(indent, str):
            indent = " " * indent
        string_encoder = (
            json.encoder.encode_basestring_ascii
            if self.ensure_ascii
            else json.encoder.encode_basestring
        )

        def floatstr(o: float) -> str:
            return _floatstr(o, self.allow_nan)

        return json.encoder._make_iterencode(
            markers,
            self.default,
            string_encoder,
            indent,
            floatstr,
            self.key_separator,
            self.item_separator,
            self.sort_keys,
            self.skipkeys,
            _one_shot,
        )


def encode(value: Any, *, indent: int | str | None = None) -> str:
    """Encode *value* as one JSON document.

    Raises ``TypeError`` or ``ValueError`` when the value cannot be
    represented (unknown types, NaN or infinite numbers, circular
    references).
    """
    return json.dumps(
        value,
        cls=_Encoder,
        ensure_ascii=False,
        allow_nan=False,
        indent=indent,
    )


def _reject_constant(name: str) -> Any:
    msg = f"non-standard JSON constant {name!r}"
    raise ValueError(msg)


def decode_exact(text: str | bytes) -> Any:
    """Decode JSON without losing numeric precision.

    Integers are arbitrary precision already; fractional numbers are kept
    as ``Decimal`` so the exact digits survive a round trip.
    """
    return json.loads(text, parse_float=Decimal, parse_constant=_reject_constant)
