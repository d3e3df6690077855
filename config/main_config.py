"""Main Config model."""

from typing import Any

from pydantic import BaseModel, Field

from .chat_config import ChatSettings


class Config(BaseModel):
    """Main configuration model."""

    chat: ChatSettings = Field(
        default_factory=ChatSettings,
        description="Chat streaming pipeline settings",
    )
    model_providers: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="Additional model providers by name, merged over the defaults",
    )
