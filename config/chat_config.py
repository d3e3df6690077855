"""Chat pipeline configuration model."""

from pydantic import BaseModel, Field

from .defaults import (
    CONTEXT_OPTIMIZATION_THRESHOLD,
    DEFAULT_MODEL,
    DEFAULT_PROVIDER,
    MAX_RESPONSE_SEGMENTS,
    MAX_TOKENS,
    MESSAGE_SLICE_KEEP,
    STREAM_MAX_RETRIES,
    STREAM_TIMEOUT_SECONDS,
)
from .providers import ModelInfo


class ChatSettings(BaseModel):
    """Settings for the chat streaming pipeline."""

    default_provider: str = Field(
        default=DEFAULT_PROVIDER,
        description="Provider used when a message carries no provider directive",
    )
    default_model: str = Field(
        default=DEFAULT_MODEL,
        description="Model used when a message carries no model directive",
    )
    max_tokens: int = Field(
        default=MAX_TOKENS,
        gt=0,
        description="Completion-token ceiling for a single model call",
    )
    max_response_segments: int = Field(
        default=MAX_RESPONSE_SEGMENTS,
        ge=0,
        description="Continuations allowed when a response is cut off by the length limit",
    )
    stream_timeout_seconds: float = Field(
        default=STREAM_TIMEOUT_SECONDS,
        gt=0,
        description="Silence after which an in-flight stream is considered stalled",
    )
    stream_max_retries: int = Field(
        default=STREAM_MAX_RETRIES,
        ge=0,
        description="Stall detections tolerated before recovery gives up",
    )
    context_optimization_threshold: int = Field(
        default=CONTEXT_OPTIMIZATION_THRESHOLD,
        ge=0,
        description="Estimated prompt tokens below which context optimization is skipped",
    )
    message_slice_keep: int = Field(
        default=MESSAGE_SLICE_KEEP,
        ge=1,
        description="Messages kept verbatim when a chat summary is in use",
    )

    def completion_token_limit(self, model: ModelInfo) -> int:
        """Completion-token ceiling for one call to ``model``, within its own limit."""
        if model.maxCompletionTokens:
            return min(self.max_tokens, model.maxCompletionTokens)
        return self.max_tokens
