"""
Core business logic package.

This package contains the transport-agnostic chat pipeline.
The server package provides HTTP bindings around these core operations.
"""

from .chat import ChatSession, ChatState, ModelResolver, ModelTarget
from .context import ContextBudgeter, ContextResult
from .credentials import CredentialStore, ProviderCredentials, ProviderSettings
from .errors import ClassifiedError, ErrorKind, classify_error
from .events import ChatEvent, EventWriter, parse_event
from .exceptions import (
    AuthenticationError,
    ContextSelectionError,
    CoreError,
    InvalidRequestError,
    SegmentBudgetExceededError,
    StreamingError,
)
from .generation import ChatModel, Completion, GenerationRequest, StreamSegment, TextChunk, ToolCallChunk
from .models import FileMap, Message, Usage, UsageAccumulator
from .recovery import MonitorState, StreamRecoveryMonitor
from .streaming import SwitchableStream
from .tools import ToolCall, ToolCallMediator, ToolRegistry

__all__ = [
    # Exceptions
    "CoreError",
    "AuthenticationError",
    "InvalidRequestError",
    "ContextSelectionError",
    "SegmentBudgetExceededError",
    "StreamingError",
    # Error classification
    "ErrorKind",
    "ClassifiedError",
    "classify_error",
    # Events
    "ChatEvent",
    "EventWriter",
    "parse_event",
    # Models
    "Message",
    "FileMap",
    "Usage",
    "UsageAccumulator",
    # Credentials
    "CredentialStore",
    "ProviderCredentials",
    "ProviderSettings",
    # Generation contract
    "ChatModel",
    "GenerationRequest",
    "StreamSegment",
    "Completion",
    "TextChunk",
    "ToolCallChunk",
    # Pipeline components
    "ContextBudgeter",
    "ContextResult",
    "SwitchableStream",
    "StreamRecoveryMonitor",
    "MonitorState",
    "ToolRegistry",
    "ToolCall",
    "ToolCallMediator",
    # Orchestration
    "ChatSession",
    "ChatState",
    "ModelResolver",
    "ModelTarget",
]
