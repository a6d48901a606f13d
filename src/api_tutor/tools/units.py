"""
The ``convertUnits`` tool.

The table is directed: only the listed pairs convert. Extend it pair by pair.
"""
from __future__ import annotations

import math
from collections.abc import Callable
from typing import Any, Mapping

from api_tutor.types import ToolResult

from ._coerce import number_arg, string_arg

__all__ = [
    "CONVERSIONS",
    "ConversionOutOfRange",
    "SUPPORTED_UNITS",
    "UnsupportedConversion",
    "convert",
    "convert_units",
]

CONVERSIONS: dict[str, dict[str, Callable[[float], float]]] = {
    # Temperature
    "celsius": {
        "fahrenheit": lambda v: v * 9 / 5 + 32,
        "kelvin": lambda v: v + 273.15,
    },
    "fahrenheit": {
        "celsius": lambda v: (v - 32) * 5 / 9,
        "kelvin": lambda v: (v - 32) * 5 / 9 + 273.15,
    },
    # Length
    "meters": {
        "feet": lambda v: v * 3.28084,
        "kilometers": lambda v: v / 1000,
        "miles": lambda v: v * 0.000621371,
    },
    "feet": {
        "meters": lambda v: v / 3.28084,
        "inches": lambda v: v * 12,
        "yards": lambda v: v / 3,
    },
    # Weight
    "kilograms": {
        "pounds": lambda v: v * 2.20462,
        "grams": lambda v: v * 1000,
    },
    "pounds": {
        "kilograms": lambda v: v / 2.20462,
        "ounces": lambda v: v * 16,
    },
}

SUPPORTED_UNITS = (
    "temperature (celsius, fahrenheit, kelvin), "
    "length (meters, feet, kilometers, miles, inches, yards), "
    "weight (kilograms, pounds, grams, ounces)"
)


class UnsupportedConversion(ValueError):
    def __init__(self, from_unit: str, to_unit: str) -> None:
        super().__init__(
            f"Cannot convert from {from_unit} to {to_unit}. "
            f"Supported conversions: {SUPPORTED_UNITS}"
        )


class ConversionOutOfRange(ValueError):
    def __init__(self, value: float, from_unit: str, to_unit: str) -> None:
        super().__init__(
            f"Result out of range converting {value:g} {from_unit} to {to_unit}"
        )


def convert(value: float, from_unit: str, to_unit: str) -> float:
    """Convert ``value``; identical units return it unchanged."""
    from_unit, to_unit = from_unit.lower(), to_unit.lower()
    if from_unit == to_unit:
        return value
    converter = CONVERSIONS.get(from_unit, {}).get(to_unit)
    if converter is None:
        raise UnsupportedConversion(from_unit, to_unit)
    # whole numbers arrive as ints, which overflow instead of reaching inf
    try:
        converted = converter(value)
        finite = math.isfinite(converted)
    except OverflowError:
        finite = False
    if not finite:
        raise ConversionOutOfRange(value, from_unit, to_unit)
    return round(converted, 5)


def convert_units(args: Mapping[str, Any]) -> ToolResult:
    value = number_arg(args, "value", 0)
    from_unit = string_arg(args, "fromUnit").strip().lower()
    to_unit = string_arg(args, "toUnit").strip().lower()
    try:
        result = convert(value, from_unit, to_unit)
    except (UnsupportedConversion, ConversionOutOfRange) as exc:
        return {"error": str(exc)}
    return {"value": value, "fromUnit": from_unit, "toUnit": to_unit, "result": result}
