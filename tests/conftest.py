"""
Shared fixtures: a scripted stand-in for the Responses API.

``FakeResponses`` replaces ``AsyncOpenAI.responses`` on a real client
instance. Queue one reply per expected call: a dict payload for buffered
calls, a list of events (or a ``FakeEventStream``) for streaming calls, or
an exception to raise.
"""

import random
from typing import Any

import pytest
from openai import AsyncOpenAI

from api_tutor.client import ResponsesClient
from api_tutor.orchestrator import Orchestrator

TEXT_DELTA = "response.output_text.delta"


class FakeEventStream:
    """Async iterable of stream events that records whether it was closed."""

    def __init__(self, events: list[Any]) -> None:
        self._events = list(events)
        self.consumed = 0
        self.closed = False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for event in self._events:
            if isinstance(event, Exception):
                raise event
            self.consumed += 1
            yield event

    async def close(self) -> None:
        self.closed = True


class FakeResponses:
    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.streams: list[FakeEventStream] = []
        self._replies: list[Any] = []

    def queue(self, *replies: Any) -> None:
        self._replies.extend(replies)

    async def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        reply = self._replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if kwargs.get("stream"):
            stream = reply if isinstance(reply, FakeEventStream) else FakeEventStream(reply)
            self.streams.append(stream)
            return stream
        return reply


# ─── Payload builders ────────────────────────────────────────────────────────

def text_events(*chunks: str) -> list[dict[str, Any]]:
    events: list[dict[str, Any]] = [{"type": "response.created"}]
    events += [{"type": TEXT_DELTA, "delta": chunk} for chunk in chunks]
    events.append({"type": "response.completed"})
    return events


def message_response(text: str, model: str = "gpt-4.1-mini") -> dict[str, Any]:
    return {
        "id": "resp_1",
        "model": model,
        "output_text": text,
        "output": [
            {
                "type": "message",
                "role": "assistant",
                "content": [{"type": "output_text", "text": text}],
            }
        ],
    }


def function_call_response(
    name: str, arguments: str, call_id: str = "call_1", model: str = "gpt-4.1-mini"
) -> dict[str, Any]:
    return {
        "id": "resp_2",
        "model": model,
        "output_text": "",
        "output": [
            {
                "type": "function_call",
                "call_id": call_id,
                "name": name,
                "arguments": arguments,
            }
        ],
    }


def seeded_chunks(text: str, seed: int) -> list[str]:
    """Split ``text`` into random-length chunks, reproducibly."""
    rng = random.Random(seed)
    chunks, start = [], 0
    while start < len(text):
        end = start + rng.randint(1, 7)
        chunks.append(text[start:end])
        start = end
    return chunks


# ─── Fixtures ────────────────────────────────────────────────────────────────

@pytest.fixture
def fake_responses():
    return FakeResponses()


@pytest.fixture
def client(fake_responses):
    openai_client = AsyncOpenAI(api_key="sk-test")
    openai_client.responses = fake_responses
    return ResponsesClient.from_client(openai_client)


@pytest.fixture
def orchestrator(client):
    return Orchestrator(client)
