"""
ChatModel implementation on the Pydantic AI direct model request API.
"""
import logging
from typing import Any, AsyncIterator

from pydantic_ai.direct import model_request, model_request_stream
from pydantic_ai.messages import (
    ModelMessage,
    PartDeltaEvent,
    PartStartEvent,
    TextPartDelta,
    ToolCallPart,
)
from pydantic_ai.messages import TextPart as ModelTextPart
from pydantic_ai.models import Model, ModelRequestParameters
from pydantic_ai.settings import ModelSettings
from pydantic_ai.tools import ToolDefinition as ModelToolDefinition

from core.generation import (
    FINISH_ERROR,
    FINISH_LENGTH,
    FINISH_STOP,
    FINISH_TOOL_CALLS,
    Completion,
    GenerationRequest,
    SegmentChunk,
    TextChunk,
    ToolCallChunk,
)
from core.tools import ToolCall, ToolDefinition

from .messages import to_model_messages
from .models import build_model

logger = logging.getLogger(__name__)

# Pydantic AI finish reasons -> stream finish reasons
FINISH_REASONS = {
    "stop": FINISH_STOP,
    "length": FINISH_LENGTH,
    "tool_call": FINISH_TOOL_CALLS,
    "content_filter": "content-filter",
    "error": FINISH_ERROR,
}


def _request_parameters(tools: list[ToolDefinition]) -> ModelRequestParameters:
    return ModelRequestParameters(
        function_tools=[
            ModelToolDefinition(
                name=tool.name,
                description=tool.description,
                parameters_json_schema=tool.parameters,
            )
            for tool in tools
        ]
    )


def _finish_reason(response: Any) -> str:
    reason = getattr(response, "finish_reason", None)
    if reason is None:
        return FINISH_STOP
    return FINISH_REASONS.get(reason, reason)


class PydanticAISegment:
    """
    One streamed model call.

    The request is sent when iteration starts. Text is yielded as it
    arrives; tool calls are yielded once the response is complete so their
    arguments are whole.
    """

    def __init__(
        self,
        model: Model,
        messages: list[ModelMessage],
        settings: ModelSettings,
        parameters: ModelRequestParameters,
    ) -> None:
        self._model = model
        self._messages = messages
        self._settings = settings
        self._parameters = parameters
        self.finish_reason: str | None = None
        self.usage: Any = None

    async def __aiter__(self) -> AsyncIterator[SegmentChunk]:
        async with model_request_stream(
            self._model,
            self._messages,
            model_settings=self._settings,
            model_request_parameters=self._parameters,
        ) as stream:
            async for event in stream:
                if isinstance(event, PartStartEvent) and isinstance(event.part, ModelTextPart):
                    if event.part.content:
                        yield TextChunk(text=event.part.content)
                elif isinstance(event, PartDeltaEvent) and isinstance(event.delta, TextPartDelta):
                    if event.delta.content_delta:
                        yield TextChunk(text=event.delta.content_delta)
            response = stream.get()

        for part in response.parts:
            if isinstance(part, ToolCallPart):
                yield ToolCallChunk(
                    call=ToolCall(
                        tool_call_id=part.tool_call_id,
                        tool_name=part.tool_name,
                        input=part.args_as_dict(),
                    )
                )

        self.usage = response.usage
        self.finish_reason = _finish_reason(response)
        logger.debug("Segment finished with reason %s", self.finish_reason)


class PydanticAIChatModel:
    """Talks to every catalog provider through Pydantic AI models."""

    def _prepare(
        self, request: GenerationRequest
    ) -> tuple[Model, list[ModelMessage], ModelSettings, ModelRequestParameters]:
        model = build_model(request.provider, request.model.name, request.credentials)
        messages = to_model_messages(request.messages, request.system)
        settings = ModelSettings()
        if request.max_tokens:
            settings["max_tokens"] = request.max_tokens
        return model, messages, settings, _request_parameters(request.tools)

    async def generate(self, request: GenerationRequest) -> PydanticAISegment:
        """Open a streamed call; the request is sent on first iteration."""
        model, messages, settings, parameters = self._prepare(request)
        logger.debug(
            "Streaming %s/%s with %d messages", request.provider.name, request.model.name, len(messages)
        )
        return PydanticAISegment(model, messages, settings, parameters)

    async def complete(self, request: GenerationRequest) -> Completion:
        """Run a non-streamed call and return its text."""
        model, messages, settings, parameters = self._prepare(request)
        response = await model_request(
            model, messages, model_settings=settings, model_request_parameters=parameters
        )
        text = "".join(part.content for part in response.parts if isinstance(part, ModelTextPart))
        return Completion(text=text, usage=response.usage)
