"""
Chat endpoint with streaming.
"""

import dataclasses
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sse_starlette.sse import EventSourceResponse

from config import get_config
from config.providers import get_provider_catalog
from core import ChatSession, CoreError, ErrorKind, ModelResolver, ToolCallMediator, classify_error
from core.exceptions import InvalidRequestError
from core.logging_config import log_timing

from ..cookies import credential_store_from_cookie
from ..requests import ChatRequest
from ..state import get_chat_model, get_tool_registry

logger = logging.getLogger(__name__)


router = APIRouter()


def error_response(error: Exception, provider: str | None = None) -> JSONResponse:
    """JSON error body for failures before the stream opens."""
    classified = classify_error(error, provider)
    status_code = 401 if classified.kind is ErrorKind.AUTHENTICATION else 500
    classified = dataclasses.replace(classified, status_code=status_code)
    return JSONResponse(status_code=status_code, content=classified.to_payload())


async def _build_session(request: Request) -> ChatSession:
    try:
        body = ChatRequest.model_validate(await request.json())
    except (ValueError, ValidationError) as e:
        raise InvalidRequestError(f"Invalid chat request: {e}") from e

    chat_model = get_chat_model()
    if chat_model is None:
        raise CoreError("Chat model not configured")

    catalog = get_provider_catalog()
    settings = get_config().chat
    store = credential_store_from_cookie(request.headers.get("cookie"), catalog)
    session = ChatSession(
        chat_model=chat_model,
        resolver=ModelResolver(catalog, store, settings),
        tools=ToolCallMediator(get_tool_registry()),
        settings=settings,
        messages=body.messages,
        files=body.files,
        context_optimization=body.contextOptimization,
        chat_mode=body.chatMode,
        design_scheme=body.designScheme,
        supabase=body.supabase,
        prompt_id=body.promptId,
    )
    with log_timing(logger, "Model resolution"):
        session.prepare()
    return session


@router.post("/api/chat", response_model=None)
async def chat(request: Request) -> EventSourceResponse | JSONResponse:
    """Stream a chat response via SSE."""
    try:
        session = await _build_session(request)
    except Exception as e:
        logger.exception("Chat request failed before streaming")
        return error_response(e, getattr(e, "provider", None))

    async def stream_response() -> AsyncGenerator[dict, None]:
        async for event in session.run():
            yield {"event": event.type, "data": event.model_dump_json()}

    return EventSourceResponse(stream_response())
