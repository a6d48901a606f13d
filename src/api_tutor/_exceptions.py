"""
Translate noisy SDK tracebacks into the service's own error types, while
preserving the original exception for full tracebacks.

Tool failures are never exceptions; see ``api_tutor.tools.dispatch``.
Cancellation (``asyncio.CancelledError``) is not wrapped either.
"""

from __future__ import annotations

import logging
from typing import Final, Optional, Type

import openai

__all__: tuple[str, ...] = (
    "TutorError",
    "InvalidRequestError",
    "TransportError",
    "classify_error",
)


class TutorError(RuntimeError):
    """Public service-level exception.

    Attributes:
        original_exc: The underlying exception, if any.
    """

    original_exc: Optional[Exception]

    def __init__(self, message: str, original_exc: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.original_exc = original_exc
        if original_exc is not None:
            self.__cause__ = original_exc


class InvalidRequestError(TutorError):
    """A request field was missing or malformed. Never retried."""


class TransportError(TutorError):
    """The remote model call failed or its stream broke mid-flight."""


RATE_LIMIT_ERRORS: Final[tuple[Type[Exception], ...]] = (openai.RateLimitError,)

CONN_ERRORS: Final[tuple[Type[Exception], ...]] = (
    openai.APIConnectionError,
    TimeoutError,
    ConnectionError,
)

API_ERRORS: Final[tuple[Type[Exception], ...]] = (openai.APIError,)


def classify_error(
    exc: Exception,
    logger: Optional[logging.Logger] = None,
) -> TransportError:
    """Wrap an SDK exception in TransportError with a friendly, concise message."""
    log = logger or logging.getLogger("api_tutor.exceptions")

    if isinstance(exc, TransportError):
        return exc
    # order matters: the first two are APIError subclasses
    if isinstance(exc, RATE_LIMIT_ERRORS):
        msg = "Rate-limit exceeded, please retry later"
    elif isinstance(exc, CONN_ERRORS):
        msg = "Connection problem, unable to reach the model provider"
    elif isinstance(exc, openai.APIStatusError):
        msg = f"Provider rejected the request ({exc.status_code})"
    elif isinstance(exc, API_ERRORS):
        msg = "Provider reported an internal error"
    else:
        msg = exc.__class__.__name__

    log.warning("Wrapping provider exception: %s", exc)
    return TransportError(f"{msg}: {exc}", exc)
