"""
Model generation contract.

The chat pipeline talks to every vendor through ``ChatModel``: ``generate``
opens one streamed model call (a segment) and ``complete`` runs one
non-streamed call for the summary and file selection sub-calls. The
concrete implementation lives in the ``llm`` package.
"""

from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Protocol, runtime_checkable

from config.providers import ModelInfo, ModelProvider

from .credentials import ProviderCredentials
from .models import Message
from .tools import ToolCall, ToolDefinition

FINISH_STOP = "stop"
FINISH_LENGTH = "length"
FINISH_TOOL_CALLS = "tool-calls"
FINISH_ERROR = "error"


@dataclass
class GenerationRequest:
    """Everything needed for one model call."""

    messages: list[Message]
    provider: ModelProvider
    model: ModelInfo
    credentials: ProviderCredentials = field(default_factory=ProviderCredentials)
    system: str | None = None
    max_tokens: int | None = None
    tools: list[ToolDefinition] = field(default_factory=list)


@dataclass
class TextChunk:
    text: str


@dataclass
class ToolCallChunk:
    call: ToolCall


SegmentChunk = TextChunk | ToolCallChunk


@runtime_checkable
class StreamSegment(Protocol):
    """
    Output of one streamed model call.

    ``finish_reason`` and ``usage`` are available once iteration ends.
    ``usage`` may use any provider field spelling; see normalize_usage.
    """

    finish_reason: str | None
    usage: Any

    def __aiter__(self) -> AsyncIterator[SegmentChunk]: ...


@dataclass
class Completion:
    text: str
    usage: Any = None


class ChatModel(Protocol):
    """Uniform model capability, regardless of vendor."""

    async def generate(self, request: GenerationRequest) -> StreamSegment:
        """Open a streamed model call."""
        ...

    async def complete(self, request: GenerationRequest) -> Completion:
        """Run a non-streamed model call."""
        ...
