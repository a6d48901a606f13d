"""Conversation and request-option types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Optional

from api_tutor.types.tool import ToolExchange

__all__ = [
    "ChatMessage",
    "ConversationTurn",
    "ModelTier",
    "ReasoningEffort",
    "RequestOptions",
]

# Type alias for Responses API input items
ChatMessage = dict[str, Any]

# Model ids starting with one of these take a reasoning effort instead of a temperature.
# The o-series is included alongside gpt-5 because it rejects temperature as well.
REASONING_PREFIXES: tuple[str, ...] = ("gpt-5", "o1", "o3", "o4")


class ReasoningEffort(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ModelTier(StrEnum):
    """Which sampling control a model accepts."""

    REASONING = "reasoning"
    LEGACY = "legacy"

    @classmethod
    def for_model(cls, model: str) -> "ModelTier":
        if any(model.startswith(prefix) for prefix in REASONING_PREFIXES):
            return cls.REASONING
        return cls.LEGACY


@dataclass(slots=True)
class RequestOptions:
    """Per-request knobs. ``tier`` is resolved once from ``model``."""

    model: str
    json_mode: bool = False
    reasoning_effort: ReasoningEffort = ReasoningEffort.MEDIUM
    temperature: Optional[float] = None
    tier: ModelTier = field(init=False)

    def __post_init__(self) -> None:
        self.reasoning_effort = ReasoningEffort(self.reasoning_effort)
        self.tier = ModelTier.for_model(self.model)


@dataclass(slots=True)
class ConversationTurn:
    """One user turn, optionally extended with the tool exchange it triggered."""

    system_prompt: str
    user_prompt: str
    tool_exchange: Optional[ToolExchange] = None

    def messages(self) -> list[ChatMessage]:
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": self.user_prompt},
        ]

    def with_exchange(self, exchange: ToolExchange) -> "ConversationTurn":
        return ConversationTurn(self.system_prompt, self.user_prompt, exchange)
