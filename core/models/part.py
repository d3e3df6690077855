"""Part models."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, model_validator

# Legacy tool states from older client payloads
_LEGACY_TOOL_STATES = {
    "partial-call": "input-streaming",
    "call": "input-available",
    "result": "output-available",
}

ToolInvocationState = Literal[
    "input-streaming", "input-available", "output-available", "output-error"
]


class TextPart(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str


class ReasoningPart(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["reasoning"] = "reasoning"
    text: str


class FilePart(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["file"] = "file"
    url: str
    mediaType: str
    filename: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _accept_mime(cls, data: Any) -> Any:
        if isinstance(data, dict) and "mediaType" not in data and "mime" in data:
            data = {**data, "mediaType": data["mime"]}
        return data


class ToolInvocationPart(BaseModel):
    """
    A tool call issued by the model, optionally with its result.

    Clients have sent the call arguments as either ``input`` or ``args`` and
    the result as either ``output`` or ``result``; both spellings are folded
    into ``input``/``output`` here.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["tool-invocation"] = "tool-invocation"
    toolCallId: str
    toolName: str
    state: ToolInvocationState = "input-available"
    input: dict[str, Any] = {}
    output: Any = None

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        # Flattened from {"type": "tool-invocation", "toolInvocation": {...}}
        nested = data.pop("toolInvocation", None)
        if isinstance(nested, dict):
            data = {**nested, **data}
        # AI SDK v5 encodes the tool name in the part type: "tool-<name>"
        part_type = data.get("type", "")
        if part_type == "tool-result":
            data.setdefault("state", "output-available")
        elif part_type.startswith("tool-") and part_type not in ("tool-invocation", "tool-call"):
            data.setdefault("toolName", part_type[len("tool-"):])
        data["type"] = "tool-invocation"
        if "input" not in data and "args" in data:
            data["input"] = data.pop("args")
        if "output" not in data and "result" in data:
            data["output"] = data.pop("result")
        if data.get("input") is None:
            data["input"] = {}
        state = data.get("state")
        if state in _LEGACY_TOOL_STATES:
            data["state"] = _LEGACY_TOOL_STATES[state]
        return data


Part = TextPart | ReasoningPart | FilePart | ToolInvocationPart


def parse_part(data: Any) -> Part | None:
    """Parse a raw part payload, returning None for unsupported part types."""
    if isinstance(data, BaseModel):
        return data  # type: ignore[return-value]
    if not isinstance(data, dict):
        return None
    part_type = data.get("type")
    if part_type == "text":
        return TextPart.model_validate(data)
    if part_type == "reasoning":
        return ReasoningPart.model_validate(data)
    if part_type in ("file", "image"):
        if part_type == "image":
            data = {
                "type": "file",
                "url": data.get("image") or data.get("url", ""),
                "mediaType": data.get("mimeType") or data.get("mediaType") or "image/png",
            }
        return FilePart.model_validate(data)
    if isinstance(part_type, str) and part_type.startswith("tool-"):
        return ToolInvocationPart.model_validate(data)
    return None
