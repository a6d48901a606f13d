"""Argument coercion shared by the tool primitives."""

from __future__ import annotations

import math
from typing import Any, Mapping

__all__ = ["ArgumentError", "number_arg", "string_arg"]


class ArgumentError(ValueError):
    """A tool argument was present but could not be coerced."""


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def number_arg(args: Mapping[str, Any], key: str, default: float) -> float:
    """Return ``args[key]`` as a finite number, ``default`` when absent or blank."""
    value = args.get(key)
    if _is_blank(value):
        return default
    if isinstance(value, bool):
        raise ArgumentError(f"Invalid number for '{key}': {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ArgumentError(f"Invalid number for '{key}': {value!r}") from None
    if not math.isfinite(number):
        raise ArgumentError(f"Invalid number for '{key}': {value!r}")
    return int(number) if number.is_integer() else number


def string_arg(args: Mapping[str, Any], key: str, default: str = "") -> str:
    value = args.get(key)
    if value is None:
        return default
    return str(value)
