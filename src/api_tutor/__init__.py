"""
api-tutor - explore the OpenAI Responses API with an optional fixed tool set.
"""

from ._exceptions import InvalidRequestError, TransportError, TutorError
from .client import ResponsesClient
from .config import Settings
from .orchestrator import Orchestrator
from .response import ChatResponse
from .tools import CATALOG, dispatch
from .types import (
    ConversationTurn,
    ModelTier,
    ReasoningEffort,
    RequestOptions,
    ToolCall,
    ToolExchange,
    ToolName,
)

__version__ = "0.1.0"

__all__ = [
    "CATALOG",
    "ChatResponse",
    "ConversationTurn",
    "InvalidRequestError",
    "ModelTier",
    "Orchestrator",
    "ReasoningEffort",
    "RequestOptions",
    "ResponsesClient",
    "Settings",
    "ToolCall",
    "ToolExchange",
    "ToolName",
    "TransportError",
    "TutorError",
    "dispatch",
]
