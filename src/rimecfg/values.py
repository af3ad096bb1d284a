"""
Value model for configuration trees.

Configuration values are whatever the YAML safe loader produces: bool,
int, float, str, None, lists of values, and maps from str to values.
This module names that model and provides the coercion helpers used by
readers and the clean-up applied to numbers before they are written.

Note that ``bool`` is a subclass of ``int``; every check here looks for
``bool`` first so that ``True`` is never read as ``1``.
"""

from __future__ import annotations

import decimal as _decimal
import math as _math
import typing as _typing

import yaml as _yaml

import rimecfg.constants as constants

Scalar: _typing.TypeAlias = bool | int | float | str | None

if _typing.TYPE_CHECKING:
    Value: _typing.TypeAlias = Scalar | list["Value"] | dict[str, "Value"]
else:
    Value: _typing.TypeAlias = _typing.Any

_QUANTUM = _decimal.Decimal(1).scaleb(-constants.FLOAT_DECIMAL_PLACES)


def clean_number(value: Value) -> Value:
    """
    Apply the numeric write rule to a value.

    Floats are rounded to ``FLOAT_DECIMAL_PLACES`` places in decimal
    arithmetic and re-read from fixed-point text, so the YAML writer never
    emits scientific notation or binary noise like ``0.30000000000000004``.
    Integral results become ``int`` (``18.0`` is written as ``18``).
    Anything that is not a finite float is returned unchanged.

    Example:
        >>> clean_number(0.1 + 0.2)
        0.3
        >>> clean_number(18.0)
        18
    """
    if isinstance(value, bool) or not isinstance(value, float):
        return value
    if not _math.isfinite(value):
        return value

    try:
        rounded = _decimal.Decimal(repr(value)).quantize(
            _QUANTUM, rounding=_decimal.ROUND_HALF_UP
        )
    except _decimal.InvalidOperation:
        # Too many digits to quantize; only huge values get here
        return int(value) if value.is_integer() else value

    if rounded == rounded.to_integral_value():
        return int(rounded)
    return float(format(rounded.normalize(), "f"))


def clean_numbers(value: Value) -> Value:
    """Apply ``clean_number`` to a value and to everything nested in it."""
    if isinstance(value, dict):
        return {key: clean_numbers(item) for key, item in value.items()}
    if isinstance(value, list):
        return [clean_numbers(item) for item in value]
    return clean_number(value)


def as_int(value: Value) -> int | None:
    """
    Read a value as an int.

    Accepts ints, finite floats (truncated), and numeric strings.
    Returns None for anything else, including bools.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if _math.isfinite(value) else None
    if isinstance(value, str):
        number = _parse_number(value)
        if number is None:
            return None
        return as_int(number)
    return None


def as_float(value: Value) -> float | None:
    """
    Read a value as a float.

    Accepts ints, floats, and numeric strings. Returns None for anything
    else, including bools.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        number = _parse_number(value)
        return None if number is None else float(number)
    return None


def as_str(value: Value) -> str | None:
    """Return the value if it is a string, else None."""
    return value if isinstance(value, str) else None


def parse_scalar(text: str) -> Value:
    """
    Parse text typed by a user into a scalar.

    ``true``/``false`` (any case) become bools, then ints, then floats;
    anything else is kept as the original, untrimmed string.
    """
    trimmed = text.strip()
    if trimmed.lower() == "true":
        return True
    if trimmed.lower() == "false":
        return False
    number = _parse_number(trimmed)
    if number is not None:
        return number
    return text


def format_value(value: Value) -> str:
    """
    Render a value as editable text.

    Scalars use their plain form; lists and maps use YAML flow style.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value
    text = _yaml.safe_dump(
        value,
        default_flow_style=True,
        allow_unicode=True,
        width=float("inf"),
        sort_keys=False,
    )
    return text.strip()


def _parse_number(text: str) -> int | float | None:
    text = text.strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    return number if _math.isfinite(number) else None
