"""
Error classification.

Maps arbitrary exceptions raised while preparing or streaming a chat
response onto a small fixed taxonomy. Each kind carries exactly one short,
user-facing message. Checks run in a fixed order and the first match wins,
so a message mentioning both "rate limit" and "token limit" is always a
rate limit.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

from .exceptions import (
    AuthenticationError,
    CoreError,
    InvalidRequestError,
    SegmentBudgetExceededError,
)

logger = logging.getLogger(__name__)

UNKNOWN_PROVIDER = "unknown"


class ErrorKind(str, Enum):
    AUTHENTICATION = "authentication"
    INVALID_REQUEST = "invalid_request"
    INVALID_MODEL = "invalid_model"
    INVALID_RESPONSE = "invalid_response"
    RATE_LIMIT = "rate_limit"
    TOKEN_LIMIT = "token_limit"
    NETWORK = "network"
    SEGMENT_BUDGET = "segment_budget"
    UNKNOWN = "unknown"


USER_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.AUTHENTICATION: "Invalid or missing API key. Please check your API key configuration.",
    ErrorKind.INVALID_MODEL: (
        "Invalid model selected. Please check that the model name is correct and available."
    ),
    ErrorKind.INVALID_RESPONSE: (
        "The AI service returned an invalid response. This may be due to an invalid model name, "
        "API rate limiting, or server issues. Try selecting a different model or check your API key."
    ),
    ErrorKind.RATE_LIMIT: "API rate limit exceeded. Please wait a moment before trying again.",
    ErrorKind.TOKEN_LIMIT: (
        "Token limit exceeded. The conversation is too long for the selected model. "
        "Try using a model with larger context window or start a new conversation."
    ),
    ErrorKind.NETWORK: "Network error. Please check your internet connection and try again.",
    ErrorKind.SEGMENT_BUDGET: (
        "The response was too long to finish. Try asking for a smaller change."
    ),
}

RETRYABLE: dict[ErrorKind, bool] = {
    ErrorKind.AUTHENTICATION: False,
    ErrorKind.INVALID_REQUEST: False,
    ErrorKind.INVALID_MODEL: False,
    ErrorKind.INVALID_RESPONSE: True,
    ErrorKind.RATE_LIMIT: True,
    ErrorKind.TOKEN_LIMIT: True,
    ErrorKind.NETWORK: True,
    ErrorKind.SEGMENT_BUDGET: False,
}


@dataclass
class ClassifiedError:
    """Deterministic, client-safe description of a failure."""

    kind: ErrorKind
    message: str
    status_code: int
    is_retryable: bool
    provider: str

    def to_payload(self) -> dict[str, Any]:
        """Render the JSON body used for pre-stream HTTP error responses."""
        return {
            "error": True,
            "message": self.message,
            "statusCode": self.status_code,
            "isRetryable": self.is_retryable,
            "provider": self.provider,
        }


def _status_of(error: BaseException) -> int | None:
    for attr in ("status_code", "statusCode", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    return None


def _detect_kind(error: BaseException) -> ErrorKind:
    if isinstance(error, SegmentBudgetExceededError):
        return ErrorKind.SEGMENT_BUDGET
    if isinstance(error, AuthenticationError):
        return ErrorKind.AUTHENTICATION
    if isinstance(error, InvalidRequestError):
        return ErrorKind.INVALID_REQUEST

    text = str(error).lower()
    status = _status_of(error)

    if (
        "api key" in text
        or "unauthorized" in text
        or "authentication" in text
        or status in (401, 403)
    ):
        return ErrorKind.AUTHENTICATION
    if "model" in text and "not found" in text:
        return ErrorKind.INVALID_MODEL
    if "invalid json response" in text:
        return ErrorKind.INVALID_RESPONSE
    if "rate limit" in text or "429" in text or status == 429:
        return ErrorKind.RATE_LIMIT
    if "token" in text and "limit" in text:
        return ErrorKind.TOKEN_LIMIT
    if (
        "network" in text
        or "timeout" in text
        or isinstance(error, (httpx.TransportError, asyncio.TimeoutError, ConnectionError))
    ):
        return ErrorKind.NETWORK
    return ErrorKind.UNKNOWN


def classify_error(error: BaseException, provider: str | None = None) -> ClassifiedError:
    """
    Classify an exception into the fixed error taxonomy.

    Args:
        error: The exception to classify
        provider: Provider name to report when the error does not carry one

    Returns:
        ClassifiedError with a user-facing message and HTTP status code
    """
    kind = _detect_kind(error)
    provider_name = getattr(error, "provider", None) or provider or UNKNOWN_PROVIDER

    if kind is ErrorKind.UNKNOWN or kind is ErrorKind.INVALID_REQUEST:
        message = str(error) or "An unexpected error occurred"
    else:
        message = USER_MESSAGES[kind]

    if kind is ErrorKind.AUTHENTICATION:
        status_code = 401
    elif isinstance(error, CoreError):
        status_code = error.status_code
    else:
        status_code = _status_of(error) or 500

    if kind is ErrorKind.UNKNOWN:
        # Retryable unless the error explicitly says otherwise
        is_retryable = getattr(error, "is_retryable", True) is not False
    else:
        is_retryable = RETRYABLE[kind]

    logger.debug("Classified %s as %s", type(error).__name__, kind.value)
    return ClassifiedError(
        kind=kind,
        message=message,
        status_code=status_code,
        is_retryable=is_retryable,
        provider=provider_name,
    )
