"""Path parameter converters for segments like ``{id:int}``."""

type ParamValue = str | int | float

# (regex_pattern, python_type) for each supported converter
CONVERTERS: dict[str, tuple[str, type]] = {
    "str": (r"[^/]+", str),
    "int": (r"\d+", int),
    "float": (r"\d+(?:\.\d+)?", float),
    "path": (r".+", str),
}


def convert_param(value: str, param_type: str) -> ParamValue:
    """Convert a captured path parameter to its declared type.

    Raises ``ValueError`` if the string cannot be converted and
    ``KeyError`` if *param_type* is not a registered converter.
    """
    _, target_type = CONVERTERS[param_type]
    return target_type(value)
