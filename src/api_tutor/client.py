"""
Async client for the OpenAI Responses API with create() and stream() methods.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncGenerator, Optional, Self

from openai import AsyncOpenAI

from api_tutor._exceptions import classify_error
from api_tutor.adapters import ResponsesAdapter
from api_tutor.response import ChatResponse

__all__ = ["ResponsesClient"]


class ResponsesClient:
    """
    Thin async wrapper around ``AsyncOpenAI.responses``.

    Use ``ResponsesClient.from_client`` when you already have an ``AsyncOpenAI`` instance.
    """

    def __init__(
        self,
        *,
        api_key: str,
        timeout: float = 60.0,
        max_retries: int = 2,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self.name = name if name is not None else self.__class__.__name__
        self._client = AsyncOpenAI(
            api_key=api_key,
            timeout=timeout,
            max_retries=max_retries,
            base_url=base_url,
        )
        self._adapter = ResponsesAdapter()

    # Alternate constructor
    @classmethod
    def from_client(
        cls,
        client: AsyncOpenAI,
        *,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> Self:
        """
        Build a ``ResponsesClient`` around an already-configured ``AsyncOpenAI`` client.
        """
        if not isinstance(client, AsyncOpenAI):
            raise TypeError(
                f"ResponsesClient.from_client expects AsyncOpenAI; got {type(client).__name__}"
            )

        self = cls.__new__(cls)  # bypass __init__
        self.logger = logger or logging.getLogger(__name__)
        self.name = name if name is not None else cls.__name__
        self._client = client
        self._adapter = ResponsesAdapter()
        return self

    @property
    def adapter(self) -> ResponsesAdapter:
        return self._adapter

    async def create(
        self, request: dict[str, Any], *, tools_offered: bool = False
    ) -> ChatResponse:
        """
        Send a buffered request and return a single response.

        Raises:
            TransportError: the call failed.
        """
        request = {**request, "stream": False}
        self._log(f"Sending request to model {request['model']} (Stream: False)")
        try:
            raw = await self._client.responses.create(**request)
        except Exception as exc:
            raise classify_error(exc, self.logger) from exc
        return self._adapter.to_response(raw, tools_offered=tools_offered)

    async def stream(self, request: dict[str, Any]) -> AsyncGenerator[str, None]:
        """
        Send a streaming request and yield text deltas in the order they arrive.

        Closing the generator (or cancelling the task driving it) tears down
        the upstream connection; nothing further is yielded.

        Raises:
            TransportError: the call failed or the stream broke mid-flight.
        """
        request = {**request, "stream": True}
        self._log(f"Sending request to model {request['model']} (Stream: True)")
        try:
            events = await self._client.responses.create(**request)
        except Exception as exc:
            raise classify_error(exc, self.logger) from exc

        delivered = 0
        try:
            async for event in events:
                delta = self._adapter.stream_text(event)
                if delta:
                    delivered += 1
                    yield delta
        except (asyncio.CancelledError, GeneratorExit):
            self._log(f"Stream cancelled after {delivered} deltas", logging.DEBUG)
            raise
        except Exception as exc:
            raise classify_error(exc, self.logger) from exc
        finally:
            close = getattr(events, "close", None)
            if close is not None:
                await close()
        self._log(f"Stream finished after {delivered} deltas", logging.DEBUG)

    def _log(self, message: str, level: int = logging.INFO) -> None:
        self.logger.log(level, f"[{self.name}] {message}")

    # --- lifecycle ---------------------------------------------------------
    async def aclose(self) -> None:
        """
        Close the underlying HTTP client. Safe to call multiple times.
        """
        await self._client.close()

    async def __aenter__(self) -> "ResponsesClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
