from .chat import ChatMessage, ConversationTurn, ModelTier, ReasoningEffort, RequestOptions
from .tool import ToolCall, ToolDescriptor, ToolExchange, ToolName, ToolResult

__all__ = [
    "ChatMessage",
    "ConversationTurn",
    "ModelTier",
    "ReasoningEffort",
    "RequestOptions",
    "ToolCall",
    "ToolDescriptor",
    "ToolExchange",
    "ToolName",
    "ToolResult",
]
