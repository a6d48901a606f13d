"""
Dataclasses for the fixed server-side tool set.

The catalog itself lives in ``api_tutor.tools``; these are only the shapes.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Mapping

__all__ = ["ToolName", "ToolDescriptor", "ToolCall", "ToolResult", "ToolExchange"]

# Success payloads are tool specific; failures are exactly {"error": str}.
ToolResult = dict[str, Any]


class ToolName(StrEnum):
    """Every tool the service can execute. Adding a tool means adding a member here."""

    GET_SERVER_TIME = "getServerTime"
    CALCULATE = "calculate"
    GET_RANDOM_NUMBER = "getRandomNumber"
    CONVERT_UNITS = "convertUnits"


@dataclass(frozen=True, slots=True)
class ToolDescriptor:
    """A tool as advertised to the model."""

    name: ToolName
    description: str
    parameters: Mapping[str, Any]

    def to_openai(self) -> dict[str, Any]:
        """Responses API function-tool shape."""
        return {
            "type": "function",
            "name": self.name.value,
            "description": self.description,
            "parameters": dict(self.parameters),
        }


@dataclass(slots=True)
class ToolCall:
    """A model-proposed call to one catalog entry.

    ``arguments`` holds the raw string when the model's JSON did not parse.
    """

    name: str
    arguments: dict[str, Any] | str = field(default_factory=dict)
    call_id: str | None = None

    def ensure_call_id(self) -> str:
        if not self.call_id:
            self.call_id = f"call_{uuid.uuid4().hex}"
        return self.call_id

    def as_dict(self) -> dict[str, Any]:
        return {"name": self.name, "arguments": self.arguments, "id": self.call_id}


@dataclass(slots=True)
class ToolExchange:
    """A call together with the result it produced."""

    call: ToolCall
    result: ToolResult
