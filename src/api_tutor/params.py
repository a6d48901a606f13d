"""
Outbound request building for the Responses API.

Contract
- ``build_request`` returns the keyword arguments for ``client.responses.create``.
- The model tier on ``RequestOptions`` decides the sampling control:
    REASONING -> reasoning={"effort": ...}
    LEGACY    -> temperature=... (only when the caller supplied one)
  The two are never both present.
- ``json_mode`` maps to text={"format": {"type": "json_object"}}.
- With ``tools`` the catalog is attached with automatic selection and at
  most one call per response.

Example
-------
>>> build_request(
...     [{"role": "user", "content": "hi"}],
...     RequestOptions(model="gpt-5-mini", reasoning_effort="low"),
... )
{'model': 'gpt-5-mini', 'input': [{'role': 'user', 'content': 'hi'}],
 'reasoning': {'effort': 'low'}}
"""

from __future__ import annotations

from typing import Any, Sequence

from api_tutor.types import ChatMessage, ModelTier, RequestOptions

__all__ = ["build_request"]


def build_request(
    messages: Sequence[ChatMessage],
    options: RequestOptions,
    *,
    tools: Sequence[dict[str, Any]] | None = None,
    stream: bool = False,
) -> dict[str, Any]:
    request: dict[str, Any] = {
        "model": options.model,
        "input": list(messages),
    }

    if tools:
        request["tools"] = list(tools)
        request["tool_choice"] = "auto"
        request["parallel_tool_calls"] = False

    if options.json_mode:
        request["text"] = {"format": {"type": "json_object"}}

    if options.tier is ModelTier.REASONING:
        request["reasoning"] = {"effort": options.reasoning_effort.value}
    elif options.temperature is not None:
        request["temperature"] = options.temperature

    if stream:
        request["stream"] = True

    return request
