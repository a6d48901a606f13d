"""
Tool catalog and dispatcher.

Responsibilities:
  - CATALOG: the ordered tool descriptors sent to the model on every tool-enabled call
  - dispatch(): route a model-proposed ToolCall to its primitive

Adding a tool:
  1. Add a member to ToolName
  2. Implement the primitive in its own module, taking the arguments mapping
  3. Add its descriptor to CATALOG and an arm to dispatch()
"""
from __future__ import annotations

import logging
from typing import Any, Mapping

from api_tutor.types import ToolCall, ToolDescriptor, ToolName, ToolResult

from ._coerce import ArgumentError
from .calculator import calculate
from .clock import get_server_time
from .randomness import get_random_number
from .units import convert_units

__all__ = ["CATALOG", "dispatch", "openai_tools"]

logger = logging.getLogger(__name__)

# ─── CATALOG ─────────────────────────────────────────────────────────────────

CATALOG: tuple[ToolDescriptor, ...] = (
    ToolDescriptor(
        name=ToolName.GET_SERVER_TIME,
        description="Get the current server time in a given IANA time zone.",
        parameters={
            "type": "object",
            "properties": {
                "timeZone": {
                    "type": "string",
                    "description": "IANA time zone like 'America/Chicago' or 'UTC'.",
                },
            },
            "required": ["timeZone"],
            "additionalProperties": False,
        },
    ),
    ToolDescriptor(
        name=ToolName.CALCULATE,
        description="Perform basic mathematical calculations.",
        parameters={
            "type": "object",
            "properties": {
                "expression": {
                    "type": "string",
                    "description": (
                        "Arithmetic expression to evaluate, e.g. '2 + 2', '10 * 5', "
                        "'2 ^ 8' or 'sqrt(16)'. Supports + - * / % ^, parentheses, "
                        "sqrt, abs, pow, round, floor, ceil, min, max, log, log10, "
                        "exp, sin, cos, tan, pi and e."
                    ),
                },
            },
            "required": ["expression"],
            "additionalProperties": False,
        },
    ),
    ToolDescriptor(
        name=ToolName.GET_RANDOM_NUMBER,
        description="Generate a random integer within a specified range.",
        parameters={
            "type": "object",
            "properties": {
                "min": {"type": "number", "description": "Minimum value (inclusive)."},
                "max": {"type": "number", "description": "Maximum value (inclusive)."},
            },
            "required": ["min", "max"],
            "additionalProperties": False,
        },
    ),
    ToolDescriptor(
        name=ToolName.CONVERT_UNITS,
        description="Convert between different units of measurement.",
        parameters={
            "type": "object",
            "properties": {
                "value": {"type": "number", "description": "The value to convert."},
                "fromUnit": {
                    "type": "string",
                    "description": (
                        "The unit to convert from (e.g., 'celsius', 'fahrenheit', "
                        "'meters', 'feet')."
                    ),
                },
                "toUnit": {"type": "string", "description": "The unit to convert to."},
            },
            "required": ["value", "fromUnit", "toUnit"],
            "additionalProperties": False,
        },
    ),
)


def openai_tools() -> list[dict[str, Any]]:
    """The catalog in the shape the Responses API expects."""
    return [descriptor.to_openai() for descriptor in CATALOG]


# ─── Dispatcher ──────────────────────────────────────────────────────────────

def _run(name: ToolName, args: Mapping[str, Any]) -> ToolResult:
    match name:
        case ToolName.GET_SERVER_TIME:
            return get_server_time(args)
        case ToolName.CALCULATE:
            return calculate(args)
        case ToolName.GET_RANDOM_NUMBER:
            return get_random_number(args)
        case ToolName.CONVERT_UNITS:
            return convert_units(args)


def dispatch(call: ToolCall) -> ToolResult:
    """
    Execute ``call`` and return its result. Never raises.

    Every failure comes back as ``{"error": message}`` so it can be handed
    to the model like any other result.
    """
    try:
        name = ToolName(call.name)
    except ValueError:
        logger.warning("Model requested unknown tool %r", call.name)
        return {"error": f"Unknown tool: {call.name}"}

    if not isinstance(call.arguments, Mapping):
        logger.warning("Malformed arguments for %s: %r", name, call.arguments)
        return {"error": f"Malformed arguments for {name}: {call.arguments}"}

    logger.info("Running tool %s with %s", name, dict(call.arguments))
    try:
        result = _run(name, call.arguments)
    except ArgumentError as exc:
        result = {"error": str(exc)}
    except Exception as exc:
        logger.exception("Tool %s raised", name)
        result = {"error": f"{name} failed: {exc}"}

    if "error" in result:
        logger.warning("Tool %s failed: %s", name, result["error"])
    return result
