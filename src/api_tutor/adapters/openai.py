"""OpenAI Responses API adapter for pure request/response transformations."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from api_tutor.response import ChatResponse
from api_tutor.types import ChatMessage, ToolCall, ToolExchange

_logger = logging.getLogger(__name__)
_logger.addHandler(logging.NullHandler())

TEXT_DELTA_EVENT = "response.output_text.delta"
FUNCTION_CALL_TYPE = "function_call"


def _get(obj: Any, key: str, default: Any = None) -> Any:
    """Read ``key`` from an SDK model or a plain dict."""
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


def parse_arguments(raw_args: Any) -> dict[str, Any] | str:
    """Decode a function-call argument string, keeping it verbatim if it is not JSON."""
    if isinstance(raw_args, dict):
        return raw_args
    if raw_args is None or (isinstance(raw_args, str) and not raw_args.strip()):
        return {}
    try:
        parsed = json.loads(raw_args)
    except (TypeError, json.JSONDecodeError):
        _logger.warning("Bad JSON in tool call arguments: %r", raw_args)
        return raw_args
    if not isinstance(parsed, dict):
        _logger.warning("Tool call arguments are not an object: %r", raw_args)
        return raw_args
    return parsed


class ResponsesAdapter:
    """Adapter between the service's types and the Responses API payloads."""

    def to_response(self, raw: Any, *, tools_offered: bool = False) -> ChatResponse:
        """Convert a buffered Responses API result to a ChatResponse."""
        return ChatResponse(
            content=self.extract_text(raw),
            model=_get(raw, "model"),
            tool_call=self.extract_tool_call(raw) if tools_offered else None,
            raw=raw,
        )

    def extract_text(self, raw: Any) -> str:
        """Prefer the consolidated ``output_text``; otherwise join per-item text."""
        text = _get(raw, "output_text")
        if text is not None:
            return text
        return "".join(self._item_text(item) for item in _get(raw, "output") or [])

    def _item_text(self, item: Any) -> str:
        parts = []
        for part in _get(item, "content") or []:
            text = _get(part, "text")
            # older payloads nest the string one level deeper
            if text is not None and not isinstance(text, str):
                text = _get(text, "value")
            if isinstance(text, str):
                parts.append(text)
        return "".join(parts)

    def extract_tool_call(self, raw: Any) -> Optional[ToolCall]:
        """Return the proposed tool call, if any. When several are present the last wins."""
        tool_call: Optional[ToolCall] = None
        for item in _get(raw, "output") or []:
            candidates = [item, *(_get(item, "content") or [])]
            for candidate in candidates:
                if _get(candidate, "type") != FUNCTION_CALL_TYPE:
                    continue
                name = _get(candidate, "name")
                if not name:
                    continue
                tool_call = ToolCall(
                    name=name,
                    arguments=parse_arguments(_get(candidate, "arguments")),
                    call_id=_get(candidate, "call_id"),
                )
        return tool_call

    def stream_text(self, event: Any) -> Optional[str]:
        """Text of a delta event; ``None`` for every other event kind.

        Reasoning summaries and tool-call argument deltas arrive here too and
        are dropped for now.
        """
        if _get(event, "type") == TEXT_DELTA_EVENT:
            return _get(event, "delta") or ""
        return None

    def dump_raw(self, raw: Any) -> Any:
        """JSON-safe form of a raw provider payload."""
        dump = getattr(raw, "model_dump", None)
        if callable(dump):
            return dump(mode="json")
        return raw

    def tool_exchange_items(self, exchange: ToolExchange) -> list[ChatMessage]:
        """Replay a tool call and its output as Responses API input items."""
        call = exchange.call
        call_id = call.ensure_call_id()
        arguments = (
            call.arguments
            if isinstance(call.arguments, str)
            else json.dumps(call.arguments)
        )
        return [
            {
                "type": FUNCTION_CALL_TYPE,
                "call_id": call_id,
                "name": call.name,
                "arguments": arguments,
            },
            {
                "type": "function_call_output",
                "call_id": call_id,
                "output": json.dumps(exchange.result),
            },
        ]
