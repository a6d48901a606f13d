from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from api_tutor.types import ToolCall


@dataclass
class ChatResponse:
    """Result of a buffered (non-streaming) model call."""

    content: str
    model: Optional[str] = None
    tool_call: Optional[ToolCall] = None
    raw: Any = None

    @property
    def wants_tool(self) -> bool:
        return self.tool_call is not None
