"""
SAAS value validation: raw string tokens to typed values.

Kinds
- "i" integer, "b" boolean, "f" float, "s" string, "x" flag (no value).
- A leading "*" marks a variadic argument declaration ("*s"); it is ignored
  wherever only the value kind matters.

Rules
- integer: the trimmed token matches -?[0-9]+.
- float: exactly one ".", the left side is an integer (sign allowed) and the
  right side a non-negative integer. The number is rebuilt from both trimmed
  sides so "1.05" stays 1.05.
- boolean: true/false/yes/no/y/n in any case; true/yes/y are truthy.
- string: returned as given.
- a missing token (None) is "too few arguments".
"""
import re
from enum import StrEnum

from .faults import FaultCode, ValidationError


class Kind(StrEnum):
    INT = "i"
    BOOL = "b"
    FLOAT = "f"
    STR = "s"
    FLAG = "x"


TRUTHY = frozenset({"true", "yes", "y"})
BOOLEANS = TRUTHY | {"false", "no", "n"}

_typenames = {
    Kind.INT: "int",
    Kind.BOOL: "bool",
    Kind.FLOAT: "float",
    Kind.STR: "str",
}


def kindof(kind, /):
    """
    Split a kind declaration into (Kind, variadic).

    Raises
    - TypeError when kind is not a string.
    - ValueError when the letter is not a known kind.
    """
    if not isinstance(kind, str):
        raise TypeError("value kind must be a string")
    variadic = kind.startswith("*")
    try:
        return Kind(kind.removeprefix("*")), variadic
    except ValueError:
        raise ValueError(f"unknown value kind {kind!r}") from None


def typename(kind, /):
    """
    Type label used in manual pages: int, bool, float, str, or arg.
    """
    try:
        return _typenames[Kind(str(kind).removeprefix("*"))]
    except (KeyError, ValueError):
        return "arg"


def is_integer(value, /):
    return isinstance(value, str) and re.fullmatch(r"-?[0-9]+", value.strip()) is not None


def is_boolean(value, /):
    return isinstance(value, str) and value.lower() in BOOLEANS


def is_float(value, /):
    if not isinstance(value, str) or value.count(".") != 1:
        return False
    left, right = value.split(".")
    return is_integer(left) and re.fullmatch(r"[0-9]+", right.strip()) is not None


def validate(kind, value, /):
    """
    Convert value according to kind.

    Returns
    - int, bool, float or str.

    Raises
    - ValidationError when the value is missing or malformed.
    - ValueError when kind is a flag or unknown (a declaration mistake).
    """
    kind, _ = kindof(kind)
    if value is None:
        raise ValidationError("too few arguments", code=FaultCode.TOO_FEW_ARGUMENTS)
    match kind:
        case Kind.INT:
            if not is_integer(value):
                raise ValidationError(f"{value} is not an integer", value=value)
            return int(value.strip())
        case Kind.BOOL:
            if not is_boolean(value):
                raise ValidationError(f"{value} is not a boolean", value=value)
            return value.lower() in TRUTHY
        case Kind.FLOAT:
            if not is_float(value):
                raise ValidationError(f"{value} is not a float", value=value)
            left, right = value.split(".")
            return float(f"{left.strip()}.{right.strip()}")
        case Kind.STR:
            return value
    raise ValueError(f"kind {kind.value!r} does not carry a value")


def validate_values(kind, values, /, *indexes):
    """
    Validate values[index] in place for each index and return values.

    An index past the end counts as a missing value.
    """
    for index in indexes:
        values[index] = validate(kind, values[index] if index < len(values) else None)
    return values


def validate_range(bounds, /, *values):
    """
    Check that every value lies within bounds, inclusive.

    bounds is either a range (its last element is the upper bound) or a
    (lower, upper) pair.
    """
    if isinstance(bounds, range):
        lower, upper = bounds.start, bounds.stop - 1
    else:
        lower, upper = bounds
    for value in values:
        if not lower <= value <= upper:
            raise ValidationError(
                f"{value} not between {lower} and {upper}",
                code=FaultCode.OUT_OF_RANGE,
                value=value,
            )


__all__ = (
    "Kind",
    "TRUTHY",
    "kindof",
    "typename",
    "is_integer",
    "is_boolean",
    "is_float",
    "validate",
    "validate_values",
    "validate_range",
)
