"""
Conversion from chat messages to Pydantic AI model messages.
"""
import base64
import json
from typing import Any

from pydantic_ai.messages import (
    BinaryContent,
    DocumentUrl,
    ImageUrl,
    ModelMessage,
    ModelRequest,
    ModelResponse,
    SystemPromptPart,
    ToolCallPart,
    ToolReturnPart,
    UserContent,
    UserPromptPart,
)
from pydantic_ai.messages import TextPart as ModelTextPart

from core.models import FilePart, Message, TextPart, ToolInvocationPart

DATA_URL_PREFIX = "data:"


def file_content(part: FilePart) -> UserContent:
    """Attachment content for a file part; data URLs are sent inline."""
    if part.url.startswith(DATA_URL_PREFIX):
        header, _, payload = part.url.partition(",")
        if header.endswith(";base64"):
            data = base64.b64decode(payload)
        else:
            data = payload.encode()
        return BinaryContent(data=data, media_type=part.mediaType)
    if part.mediaType.startswith("image/"):
        return ImageUrl(url=part.url)
    return DocumentUrl(url=part.url)


def _tool_output(output: Any) -> Any:
    if isinstance(output, (str, int, float, bool)) or output is None:
        return output
    try:
        return json.loads(json.dumps(output))
    except (TypeError, ValueError):
        return str(output)


def _user_request(message: Message) -> ModelRequest | None:
    content: list[UserContent] = []
    for part in message.parts:
        if isinstance(part, TextPart) and part.text:
            content.append(part.text)
        elif isinstance(part, FilePart):
            content.append(file_content(part))
    if not content:
        return None
    if len(content) == 1 and isinstance(content[0], str):
        return ModelRequest(parts=[UserPromptPart(content=content[0])])
    return ModelRequest(parts=[UserPromptPart(content=content)])


def _assistant_messages(message: Message) -> list[ModelMessage]:
    response_parts: list[Any] = []
    returns: list[ToolReturnPart] = []
    for part in message.parts:
        if isinstance(part, TextPart) and part.text:
            response_parts.append(ModelTextPart(content=part.text))
        elif isinstance(part, ToolInvocationPart):
            response_parts.append(
                ToolCallPart(tool_name=part.toolName, args=part.input, tool_call_id=part.toolCallId)
            )
            if part.state == "output-available":
                returns.append(
                    ToolReturnPart(
                        tool_name=part.toolName,
                        content=_tool_output(part.output),
                        tool_call_id=part.toolCallId,
                    )
                )
    if not response_parts:
        return []
    converted: list[ModelMessage] = [ModelResponse(parts=response_parts)]
    if returns:
        converted.append(ModelRequest(parts=returns))
    return converted


def to_model_messages(messages: list[Message], system: str | None = None) -> list[ModelMessage]:
    """
    Convert a conversation into Pydantic AI message history.

    Assistant tool invocations become tool calls on the model response,
    followed by a request carrying the results that are already known.
    Reasoning parts are not replayed.

    Args:
        messages: Conversation, oldest first
        system: System prompt placed before the conversation

    Returns:
        List of ModelRequest and ModelResponse messages
    """
    converted: list[ModelMessage] = []
    if system:
        converted.append(ModelRequest(parts=[SystemPromptPart(content=system)]))

    for message in messages:
        if message.role == "system":
            if message.text:
                converted.append(ModelRequest(parts=[SystemPromptPart(content=message.text)]))
        elif message.role == "user":
            request = _user_request(message)
            if request is not None:
                converted.append(request)
        else:
            converted.extend(_assistant_messages(message))
    return converted
