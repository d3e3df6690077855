"""Message models."""

import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .part import Part, TextPart, ToolInvocationPart, parse_part

MODEL_REGEX = re.compile(r"^\[Model: (.*?)\]\n\n")
PROVIDER_REGEX = re.compile(r"\[Provider: (.*?)\]\n\n")

Role = Literal["user", "assistant", "system"]


class Message(BaseModel):
    """
    One chat message.

    Messages are immutable; derived conversations are built from copies.
    Accepts both the ``parts`` form and the legacy ``content`` form (a
    string or a list of content parts).
    """

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    role: Role
    parts: list[Part] = Field(default_factory=list)
    annotations: list[dict[str, Any]] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _normalize_content(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        content = data.pop("content", None)
        if not data.get("parts") and content is not None:
            if isinstance(content, str):
                data["parts"] = [{"type": "text", "text": content}]
            elif isinstance(content, list):
                data["parts"] = content
        # The v5 client keeps annotations in metadata
        metadata = data.pop("metadata", None)
        if not data.get("annotations") and isinstance(metadata, dict):
            annotations = metadata.get("annotations")
            if isinstance(annotations, list):
                data["annotations"] = annotations
        return data

    @field_validator("parts", mode="before")
    @classmethod
    def _parse_parts(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        parsed = (parse_part(part) for part in value)
        return [part for part in parsed if part is not None]

    @field_validator("annotations", mode="before")
    @classmethod
    def _keep_dict_annotations(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict)]

    @property
    def text(self) -> str:
        """Concatenated text parts, newline separated."""
        return "\n".join(part.text for part in self.parts if isinstance(part, TextPart))

    @property
    def tool_invocations(self) -> list[ToolInvocationPart]:
        return [part for part in self.parts if isinstance(part, ToolInvocationPart)]

    def with_parts(self, parts: list[Part]) -> "Message":
        """Return a copy of this message with different parts."""
        return self.model_copy(update={"parts": parts})

    def annotation(self, annotation_type: str) -> dict[str, Any] | None:
        """Return the last annotation of the given type, if any."""
        for item in reversed(self.annotations):
            if item.get("type") == annotation_type:
                return item
        return None


def text_message(role: Role, text: str) -> Message:
    """Build a single-text-part message."""
    return Message(role=role, parts=[TextPart(text=text)])


def extract_properties_from_message(
    message: Message, default_model: str, default_provider: str
) -> tuple[str, str, str]:
    """
    Split a user message into its model directive and remaining text.

    User messages may start with ``[Model: X]\\n\\n[Provider: Y]\\n\\n`` to pin
    the model chosen in the client at the time the message was sent.

    Args:
        message: The message to inspect
        default_model: Model to report when no directive is present
        default_provider: Provider to report when no directive is present

    Returns:
        Tuple of (model, provider, content without directives)
    """
    text = message.text
    model_match = MODEL_REGEX.search(text)
    provider_match = PROVIDER_REGEX.search(text)
    model = model_match.group(1) if model_match else default_model
    provider = provider_match.group(1) if provider_match else default_provider
    return model, provider, strip_directives(text)


def strip_directives(text: str) -> str:
    """Remove model and provider directives from message text."""
    return PROVIDER_REGEX.sub("", MODEL_REGEX.sub("", text))


def last_user_message(messages: list[Message]) -> Message | None:
    for message in reversed(messages):
        if message.role == "user":
            return message
    return None
