"""ChatRequest model."""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from core.models import FileMap, Message, normalize_file_map


class ChatRequest(BaseModel):
    messages: list[Message]
    files: FileMap = Field(default_factory=dict)
    promptId: str | None = None
    contextOptimization: bool = False
    chatMode: Literal["discuss", "build"] = "build"
    designScheme: dict[str, Any] | None = None
    supabase: dict[str, Any] | None = None

    @field_validator("files", mode="before")
    @classmethod
    def _normalize_files(cls, value: Any) -> FileMap:
        return normalize_file_map(value)
