"""Tests for the detect / continue / direct-respond flows against a scripted remote."""

import asyncio
import json

import httpx
import openai
import pytest

from api_tutor._exceptions import InvalidRequestError, TransportError
from api_tutor.types import ConversationTurn, RequestOptions, ToolCall

from conftest import (
    TEXT_DELTA,
    FakeEventStream,
    function_call_response,
    message_response,
    seeded_chunks,
    text_events,
)

pytestmark = pytest.mark.asyncio

TOKYO_TURN = ConversationTurn("You are a helpful API tutor.", "What time is it in Tokyo?")
OPTIONS = RequestOptions(model="gpt-4.1-mini")


async def collect(deltas):
    return [delta async for delta in deltas]


class StalledStream(FakeEventStream):
    """Delivers one delta and then waits forever."""

    def __init__(self) -> None:
        super().__init__([])

    async def _iterate(self):
        self.consumed += 1
        yield {"type": TEXT_DELTA, "delta": "first"}
        await asyncio.Event().wait()
        yield {"type": TEXT_DELTA, "delta": "never"}


class TestDetect:
    async def test_tool_proposed(self, orchestrator, fake_responses):
        """The Tokyo question comes back as a getServerTime call."""
        fake_responses.queue(
            function_call_response("getServerTime", '{"timeZone": "Asia/Tokyo"}', call_id="call_t")
        )

        response = await orchestrator.detect(TOKYO_TURN, OPTIONS)

        assert response.tool_call == ToolCall("getServerTime", {"timeZone": "Asia/Tokyo"}, "call_t")
        request = fake_responses.calls[0]
        assert request["stream"] is False
        assert request["tool_choice"] == "auto"
        assert request["parallel_tool_calls"] is False
        assert len(request["tools"]) == 4
        assert request["input"] == TOKYO_TURN.messages()

    async def test_no_tool_needed(self, orchestrator, fake_responses):
        fake_responses.queue(message_response("Hello! How can I help?"))

        response = await orchestrator.detect(ConversationTurn("sys", "Say hi"), OPTIONS)

        assert response.tool_call is None
        assert response.content == "Hello! How can I help?"
        assert response.model == "gpt-4.1-mini"

    async def test_malformed_arguments_kept_raw(self, orchestrator, fake_responses):
        fake_responses.queue(function_call_response("calculate", '{"expression": '))

        response = await orchestrator.detect(ConversationTurn("sys", "2+2?"), OPTIONS)

        assert response.tool_call.arguments == '{"expression": '

    async def test_empty_user_prompt(self, orchestrator, fake_responses):
        """An empty prompt is rejected before any remote call."""
        with pytest.raises(InvalidRequestError):
            await orchestrator.detect(ConversationTurn("sys", ""), OPTIONS)
        assert fake_responses.calls == []

    async def test_transport_error(self, orchestrator, fake_responses):
        fake_responses.queue(openai.APIConnectionError(request=httpx.Request("POST", "https://x")))

        with pytest.raises(TransportError, match="Connection problem"):
            await orchestrator.detect(TOKYO_TURN, OPTIONS)


class TestContinueWithTool:
    async def test_replays_exchange_and_streams(self, orchestrator, fake_responses):
        """The tool result is appended to the input and the answer is streamed in order."""
        fake_responses.queue(text_events("In Tokyo ", "it is ", "9 PM."))
        call = ToolCall("getServerTime", {"timeZone": "Asia/Tokyo"}, "call_t")

        deltas = await collect(orchestrator.continue_with_tool(TOKYO_TURN, call, OPTIONS))

        assert deltas == ["In Tokyo ", "it is ", "9 PM."]
        request = fake_responses.calls[0]
        assert request["stream"] is True
        assert len(request["tools"]) == 4
        system, user, call_item, output_item = request["input"]
        assert (system["role"], user["role"]) == ("system", "user")
        assert call_item["type"] == "function_call"
        assert call_item["call_id"] == output_item["call_id"] == "call_t"
        result = json.loads(output_item["output"])
        assert result["timeZone"] == "Asia/Tokyo"
        assert result["humanFormatted"].endswith("JST")

    async def test_unknown_tool_still_streams(self, orchestrator, fake_responses):
        """A failed tool is reported to the model rather than aborting the turn."""
        fake_responses.queue(text_events("Sorry, that tool does not exist."))
        call = ToolCall("launchRockets", {})

        deltas = await collect(orchestrator.continue_with_tool(TOKYO_TURN, call, OPTIONS))

        assert "".join(deltas) == "Sorry, that tool does not exist."
        output_item = fake_responses.calls[0]["input"][-1]
        assert json.loads(output_item["output"]) == {"error": "Unknown tool: launchRockets"}

    async def test_custom_dispatcher(self, client, fake_responses):
        from api_tutor.orchestrator import Orchestrator

        seen = []

        def dispatcher(call):
            seen.append(call.name)
            return {"ok": 1}

        fake_responses.queue(text_events("done"))
        orchestrator = Orchestrator(client, dispatcher=dispatcher)

        await collect(orchestrator.continue_with_tool(TOKYO_TURN, ToolCall("calculate"), OPTIONS))

        assert seen == ["calculate"]

    async def test_second_tool_request_yields_nothing(self, orchestrator, fake_responses):
        fake_responses.queue(
            [
                {"type": "response.created"},
                {"type": "response.function_call_arguments.delta", "delta": '{"min"'},
                {"type": "response.completed"},
            ]
        )

        deltas = await collect(
            orchestrator.continue_with_tool(TOKYO_TURN, ToolCall("getRandomNumber", {}), OPTIONS)
        )

        assert deltas == []


class TestStreaming:
    async def test_non_text_events_ignored(self, orchestrator, fake_responses):
        fake_responses.queue(
            [
                {"type": "response.created"},
                {"type": TEXT_DELTA, "delta": "a"},
                {"type": "response.reasoning_summary_text.delta", "delta": "thinking"},
                {"type": TEXT_DELTA, "delta": ""},
                {"type": TEXT_DELTA, "delta": "b"},
                {"type": "response.completed"},
            ]
        )

        deltas = await collect(orchestrator.respond_stream(TOKYO_TURN, OPTIONS))

        assert deltas == ["a", "b"]

    @pytest.mark.parametrize("seed", range(5))
    async def test_stream_matches_buffered(self, orchestrator, fake_responses, seed):
        """Concatenated deltas equal the buffered answer for the same reply."""
        text = "The quick brown fox jumps over the lazy dog, twice. 🦊"
        fake_responses.queue(message_response(text), text_events(*seeded_chunks(text, seed)))

        buffered = await orchestrator.respond_once(TOKYO_TURN, OPTIONS)
        streamed = await collect(orchestrator.respond_stream(TOKYO_TURN, OPTIONS))

        assert "".join(streamed) == buffered.content == text

    async def test_closing_early_closes_upstream(self, orchestrator, fake_responses):
        stream = FakeEventStream(text_events("one", "two", "three", "four"))
        fake_responses.queue(stream)

        deltas = orchestrator.respond_stream(TOKYO_TURN, OPTIONS)
        assert await anext(deltas) == "one"
        await deltas.aclose()

        assert stream.closed
        assert stream.consumed < 6

    async def test_cancelling_task_closes_upstream(self, orchestrator, fake_responses):
        stream = StalledStream()
        fake_responses.queue(stream)
        received = []

        async def consume():
            async for delta in orchestrator.respond_stream(TOKYO_TURN, OPTIONS):
                received.append(delta)

        task = asyncio.create_task(consume())
        while not received:
            await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert received == ["first"]
        assert stream.closed

    async def test_upstream_failure_before_first_delta(self, orchestrator, fake_responses):
        response = httpx.Response(429, request=httpx.Request("POST", "https://x"))
        fake_responses.queue(openai.RateLimitError("slow down", response=response, body=None))

        with pytest.raises(TransportError, match="Rate-limit"):
            await collect(orchestrator.respond_stream(TOKYO_TURN, OPTIONS))

    async def test_upstream_failure_mid_stream(self, orchestrator, fake_responses):
        stream = FakeEventStream(
            [{"type": TEXT_DELTA, "delta": "partial"}, ConnectionResetError("reset by peer")]
        )
        fake_responses.queue(stream)
        received = []

        with pytest.raises(TransportError, match="reset by peer"):
            async for delta in orchestrator.respond_stream(TOKYO_TURN, OPTIONS):
                received.append(delta)

        assert received == ["partial"]
        assert stream.closed


class TestRespondOnce:
    async def test_no_tools_offered(self, orchestrator, fake_responses):
        fake_responses.queue(message_response("4"))

        response = await orchestrator.respond_once(
            ConversationTurn("sys", "2+2?"), RequestOptions(model="gpt-5-mini", reasoning_effort="low")
        )

        assert response.content == "4"
        request = fake_responses.calls[0]
        assert "tools" not in request
        assert request["reasoning"] == {"effort": "low"}
        assert request["stream"] is False


class TestAnswer:
    async def test_tools_disabled_streams_directly(self, orchestrator, fake_responses):
        fake_responses.queue(text_events("Hi", " there"))

        deltas = await collect(orchestrator.answer(TOKYO_TURN, OPTIONS, tools_enabled=False))

        assert deltas == ["Hi", " there"]
        assert len(fake_responses.calls) == 1
        assert "tools" not in fake_responses.calls[0]

    async def test_no_tool_returns_detected_text(self, orchestrator, fake_responses):
        fake_responses.queue(message_response("No tool needed."))

        deltas = await collect(orchestrator.answer(TOKYO_TURN, OPTIONS, tools_enabled=True))

        assert deltas == ["No tool needed."]
        assert len(fake_responses.calls) == 1

    async def test_tool_round_trip(self, orchestrator, fake_responses):
        fake_responses.queue(
            function_call_response("calculate", '{"expression": "6 * 7"}'),
            text_events("The answer ", "is 42."),
        )

        deltas = await collect(orchestrator.answer(TOKYO_TURN, OPTIONS, tools_enabled=True))

        assert "".join(deltas) == "The answer is 42."
        first, second = fake_responses.calls
        assert first["stream"] is False and second["stream"] is True
        assert json.loads(second["input"][-1]["output"])["result"] == 42
