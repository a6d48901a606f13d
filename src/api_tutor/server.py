"""
HTTP surface for the api-tutor service.

Routes:
    POST /api/respond          buffered answer, no tools
    POST /api/respond/stream   streamed answer, no tools
    POST /api/tools/detect     ask the model whether a tool is needed
    POST /api/tools/continue   run the tool and stream the final answer
    GET  /api/tools            the tool catalog

Errors are JSON ``{"ok": false, "error": ...}`` with status 400. Streaming
routes report failures as JSON only when they happen before the first
delta; afterwards the body is simply cut off.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from api_tutor._exceptions import InvalidRequestError, TutorError
from api_tutor.client import ResponsesClient
from api_tutor.config import DEFAULT_SYSTEM_PROMPT, Settings
from api_tutor.orchestrator import Orchestrator
from api_tutor.tools import openai_tools
from api_tutor.types import ConversationTurn, ReasoningEffort, RequestOptions, ToolCall

logger = logging.getLogger(__name__)

STREAM_HEADERS = {"Cache-Control": "no-cache"}
STREAM_MEDIA_TYPE = "text/plain; charset=utf-8"


# ─── Request bodies ──────────────────────────────────────────────────────────

class TurnBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    system: str = DEFAULT_SYSTEM_PROMPT
    user: str = Field(min_length=1)
    json_mode: bool = Field(default=False, alias="json")
    reasoning_effort: ReasoningEffort = Field(
        default=ReasoningEffort.MEDIUM, alias="reasoningEffort"
    )
    model: Optional[str] = None

    def turn(self) -> ConversationTurn:
        return ConversationTurn(system_prompt=self.system, user_prompt=self.user)

    def options(self, default_model: str) -> RequestOptions:
        return RequestOptions(
            model=self.model or default_model,
            json_mode=self.json_mode,
            reasoning_effort=self.reasoning_effort,
        )


class RespondBody(TurnBody):
    # only honoured for non-reasoning models
    temperature: Optional[float] = Field(default=None, ge=0, le=2)

    def options(self, default_model: str) -> RequestOptions:
        options = super().options(default_model)
        options.temperature = self.temperature
        return options


class ToolCallBody(BaseModel):
    name: str
    arguments: dict[str, Any]
    id: Optional[str] = None

    def to_call(self) -> ToolCall:
        return ToolCall(name=self.name, arguments=self.arguments, call_id=self.id)


class ContinueBody(TurnBody):
    tool_call: ToolCallBody = Field(alias="toolCall")


# ─── Helpers ─────────────────────────────────────────────────────────────────

def _error(message: str, status_code: int = 400) -> JSONResponse:
    return JSONResponse({"ok": False, "error": message}, status_code=status_code)


def _describe_validation(exc: RequestValidationError) -> str:
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{location}: {err.get('msg')}" if location else err.get("msg", ""))
    return "; ".join(messages) or "Invalid request body"


async def _stream_response(deltas: AsyncGenerator[str, None]) -> StreamingResponse:
    """
    Pull the first delta before committing to a 200 so that failures of the
    initial call still surface as a JSON error.
    """
    try:
        first = await anext(deltas)
    except StopAsyncIteration:
        first = None

    async def body() -> AsyncIterator[str]:
        try:
            if first is not None:
                yield first
            async for delta in deltas:
                yield delta
        except TutorError as exc:
            logger.error("Stream aborted: %s", exc)
            raise
        finally:
            await deltas.aclose()

    return StreamingResponse(body(), media_type=STREAM_MEDIA_TYPE, headers=STREAM_HEADERS)


# ─── Application ─────────────────────────────────────────────────────────────

def create_app(
    settings: Optional[Settings] = None,
    *,
    client: Optional[ResponsesClient] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Configuration; read from the environment when omitted.
        client: Pre-built client. When omitted one is created from
            ``settings`` (which then requires ``OPENAI_API_KEY``).
    """
    settings = settings or Settings.from_env()
    if client is None:
        client = ResponsesClient(
            api_key=settings.require_api_key(),
            timeout=settings.timeout,
            max_retries=settings.max_retries,
            base_url=settings.base_url,
        )
    orchestrator = Orchestrator(client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await client.aclose()

    app = FastAPI(title="api-tutor", lifespan=lifespan)
    app.state.settings = settings
    app.state.orchestrator = orchestrator

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        error = InvalidRequestError(_describe_validation(exc), exc)
        logger.info("Rejected %s: %s", request.url.path, error)
        return _error(str(error))

    @app.exception_handler(TutorError)
    async def tutor_error_handler(request: Request, exc: TutorError) -> JSONResponse:
        logger.error("%s failed: %s", request.url.path, exc)
        return _error(str(exc))

    @app.post("/api/respond")
    async def respond(body: RespondBody) -> dict[str, Any]:
        options = body.options(settings.default_model)
        response = await orchestrator.respond_once(body.turn(), options)
        return {
            "ok": True,
            "model": options.model,
            "text": response.content,
            "raw": client.adapter.dump_raw(response.raw),
        }

    @app.post("/api/respond/stream")
    async def respond_stream(body: TurnBody) -> StreamingResponse:
        options = body.options(settings.default_model)
        return await _stream_response(orchestrator.respond_stream(body.turn(), options))

    @app.post("/api/tools/detect")
    async def detect_tool(body: TurnBody) -> dict[str, Any]:
        options = body.options(settings.default_model)
        response = await orchestrator.detect(body.turn(), options)
        return {
            "ok": True,
            "model": options.model,
            "toolCall": response.tool_call.as_dict() if response.tool_call else None,
            "text": response.content,
            "raw": client.adapter.dump_raw(response.raw),
        }

    @app.post("/api/tools/continue")
    async def continue_with_tool(body: ContinueBody) -> StreamingResponse:
        options = body.options(settings.default_model)
        deltas = orchestrator.continue_with_tool(
            body.turn(), body.tool_call.to_call(), options
        )
        return await _stream_response(deltas)

    @app.get("/api/tools")
    async def list_tools() -> dict[str, Any]:
        return {"ok": True, "tools": openai_tools()}

    return app
