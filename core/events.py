"""
Chat event types and the per-request EventWriter.

Every event sent to the client is one member of the closed ``ChatEvent``
union, discriminated by ``type``. Core code writes events into an
EventWriter; the orchestrator drains it at each suspension point and the
server layer encodes each event as one SSE message.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from .models.usage import Usage

ProgressStatus = Literal["in-progress", "complete"]


class ProgressEvent(BaseModel):
    """Ordered pipeline phase transition shown to the user."""

    type: Literal["progress"] = "progress"
    label: str
    status: ProgressStatus
    order: int
    message: str


class UsageEvent(BaseModel):
    type: Literal["usage"] = "usage"
    completionTokens: int
    promptTokens: int
    totalTokens: int


class ChatSummaryEvent(BaseModel):
    type: Literal["chatSummary"] = "chatSummary"
    summary: str
    chatId: str | None = None


class CodeContextEvent(BaseModel):
    type: Literal["codeContext"] = "codeContext"
    files: list[str]


class TextDeltaEvent(BaseModel):
    type: Literal["text-delta"] = "text-delta"
    delta: str


class ToolCallEvent(BaseModel):
    """A tool call issued by the model, passed through as generated."""

    type: Literal["tool-call"] = "tool-call"
    toolCallId: str
    toolName: str
    input: dict[str, Any] = Field(default_factory=dict)


class ToolCallAnnotationEvent(BaseModel):
    """Describes a registered tool call so the client can ask for approval."""

    type: Literal["toolCallAnnotation"] = "toolCallAnnotation"
    toolCallId: str
    serverName: str
    toolName: str
    toolDescription: str


class ToolResultEvent(BaseModel):
    type: Literal["toolResult"] = "toolResult"
    toolCallId: str
    toolName: str
    result: Any = None


class FinishEvent(BaseModel):
    type: Literal["finish"] = "finish"
    finishReason: str
    segments: int


class ErrorEvent(BaseModel):
    """Terminal in-band error."""

    type: Literal["error"] = "error"
    kind: str
    message: str
    statusCode: int
    isRetryable: bool
    provider: str


ChatEvent = Annotated[
    Union[
        ProgressEvent,
        UsageEvent,
        ChatSummaryEvent,
        CodeContextEvent,
        TextDeltaEvent,
        ToolCallEvent,
        ToolCallAnnotationEvent,
        ToolResultEvent,
        FinishEvent,
        ErrorEvent,
    ],
    Field(discriminator="type"),
]

_chat_event_adapter: TypeAdapter[ChatEvent] = TypeAdapter(ChatEvent)


def parse_event(data: str | bytes | dict[str, Any]) -> ChatEvent:
    """Decode one wire event (JSON text or dict) into its ChatEvent type."""
    if isinstance(data, dict):
        return _chat_event_adapter.validate_python(data)
    return _chat_event_adapter.validate_json(data)


def usage_event(usage: Usage) -> UsageEvent:
    return UsageEvent(
        completionTokens=usage.completion_tokens,
        promptTokens=usage.prompt_tokens,
        totalTokens=usage.total_tokens,
    )


class EventWriter:
    """
    Buffer of events for one chat response.

    Progress ``order`` values start at 1 and strictly increase for the
    lifetime of the writer.
    """

    def __init__(self) -> None:
        self._pending: list[ChatEvent] = []
        self._progress_counter = 1

    def write(self, event: ChatEvent) -> None:
        self._pending.append(event)

    def progress(self, label: str, status: ProgressStatus, message: str) -> ProgressEvent:
        """Write a progress event with the next order value."""
        event = ProgressEvent(
            label=label, status=status, order=self._progress_counter, message=message
        )
        self._progress_counter += 1
        self._pending.append(event)
        return event

    def drain(self) -> list[ChatEvent]:
        """Remove and return all buffered events in write order."""
        events, self._pending = self._pending, []
        return events
