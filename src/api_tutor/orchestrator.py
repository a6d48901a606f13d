"""
Tool-augmented conversation orchestration.

One user turn becomes at most two model round-trips:

1. detect()            buffered call offering the tool catalog
2. continue_with_tool() runs the proposed tool locally, then streams the
                        model's answer with the tool output appended

Without tools, respond_once() / respond_stream() make a single call.
answer() picks the right path from a ``tools_enabled`` flag.
"""

from __future__ import annotations

import logging
from contextlib import aclosing
from typing import AsyncGenerator, Callable, Optional

from api_tutor._exceptions import InvalidRequestError
from api_tutor.client import ResponsesClient
from api_tutor.params import build_request
from api_tutor.response import ChatResponse
from api_tutor.tools import dispatch, openai_tools
from api_tutor.types import (
    ChatMessage,
    ConversationTurn,
    RequestOptions,
    ToolCall,
    ToolExchange,
    ToolResult,
)

__all__ = ["Orchestrator"]


class Orchestrator:
    """Runs the detect / continue / direct-respond phases against one client."""

    def __init__(
        self,
        client: ResponsesClient,
        *,
        dispatcher: Callable[[ToolCall], ToolResult] = dispatch,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> None:
        self.client = client
        self.dispatcher = dispatcher
        self.logger = logger or logging.getLogger(__name__)
        self.name = name if name is not None else self.__class__.__name__

    def _input(self, turn: ConversationTurn) -> list[ChatMessage]:
        if not turn.user_prompt:
            raise InvalidRequestError("User prompt is required")
        messages = turn.messages()
        if turn.tool_exchange is not None:
            messages.extend(self.client.adapter.tool_exchange_items(turn.tool_exchange))
        return messages

    # --- tool path ---------------------------------------------------------
    async def detect(self, turn: ConversationTurn, options: RequestOptions) -> ChatResponse:
        """
        Ask the model whether the turn needs a tool.

        Returns a ChatResponse whose ``tool_call`` is set when the model
        proposed one; otherwise ``content`` is the final answer.
        """
        request = build_request(self._input(turn), options, tools=openai_tools())
        response = await self.client.create(request, tools_offered=True)
        if response.tool_call is not None:
            self._log(f"Model proposed tool {response.tool_call.name}")
        else:
            self._log("Model answered without a tool")
        return response

    def run_tool(self, call: ToolCall) -> ToolExchange:
        return ToolExchange(call=call, result=self.dispatcher(call))

    async def continue_with_tool(
        self, turn: ConversationTurn, call: ToolCall, options: RequestOptions
    ) -> AsyncGenerator[str, None]:
        """
        Execute ``call`` and stream the model's answer given its result.

        A failed tool is not fatal: its ``{"error": ...}`` result is passed
        to the model, which can explain the failure. A second tool request
        from the model in this round is not followed and yields no text.
        """
        exchange = self.run_tool(call)
        request = build_request(
            self._input(turn.with_exchange(exchange)),
            options,
            tools=openai_tools(),
            stream=True,
        )
        async with aclosing(self.client.stream(request)) as deltas:
            async for delta in deltas:
                yield delta

    # --- direct path -------------------------------------------------------
    async def respond_once(self, turn: ConversationTurn, options: RequestOptions) -> ChatResponse:
        request = build_request(self._input(turn), options)
        return await self.client.create(request)

    async def respond_stream(
        self, turn: ConversationTurn, options: RequestOptions
    ) -> AsyncGenerator[str, None]:
        request = build_request(self._input(turn), options, stream=True)
        async with aclosing(self.client.stream(request)) as deltas:
            async for delta in deltas:
                yield delta

    # --- unified entry point ----------------------------------------------
    async def answer(
        self,
        turn: ConversationTurn,
        options: RequestOptions,
        *,
        tools_enabled: bool,
    ) -> AsyncGenerator[str, None]:
        """Stream the answer to ``turn``, going through tool detection when enabled."""
        if not tools_enabled:
            async with aclosing(self.respond_stream(turn, options)) as deltas:
                async for delta in deltas:
                    yield delta
            return

        detected = await self.detect(turn, options)
        if detected.tool_call is None:
            if detected.content:
                yield detected.content
            return

        resumed = self.continue_with_tool(turn, detected.tool_call, options)
        async with aclosing(resumed) as deltas:
            async for delta in deltas:
                yield delta

    def _log(self, message: str, level: int = logging.INFO) -> None:
        self.logger.log(level, f"[{self.name}] {message}")
