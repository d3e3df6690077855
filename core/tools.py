"""
Tool registry and tool-call mediation.

Tools are offered to the model without their executors: when the model
issues a call, the client shows it to the user, and the user's approval or
rejection comes back as the invocation's output on the next request. Before
replaying the conversation, ``process_tool_invocations`` turns approved
calls into real results and rejected calls into denial messages.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from .events import EventWriter, ToolCallAnnotationEvent, ToolResultEvent
from .models import Message, ToolInvocationPart

logger = logging.getLogger(__name__)

APPROVAL_YES = "Yes, approved."
APPROVAL_NO = "No, rejected."

TOOL_NO_EXECUTE_FUNCTION = "Error: No execute function found on tool"
TOOL_EXECUTION_DENIED = "Error: User denied access to tool execution"
TOOL_EXECUTION_ERROR = "Error: An error occured while calling tool"

DEFAULT_SERVER_NAME = "local"
NO_DESCRIPTION = "No description available"

ToolExecutor = Callable[..., Any]


@dataclass
class ToolSpec:
    """A tool the model may call."""

    name: str
    description: str = NO_DESCRIPTION
    parameters: dict[str, Any] = field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )
    server_name: str = DEFAULT_SERVER_NAME
    execute: ToolExecutor | None = None


@dataclass
class ToolDefinition:
    """Tool schema offered to the model, without an executor."""

    name: str
    description: str
    parameters: dict[str, Any]


@dataclass
class ToolCall:
    """A tool call issued by the model mid-stream."""

    tool_call_id: str
    tool_name: str
    input: dict[str, Any] = field(default_factory=dict)


class ToolRegistry:
    """Tools available to the model, grouped by the server that provides them."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolSpec] = {}

    def register(
        self,
        name: str,
        description: str = NO_DESCRIPTION,
        parameters: dict[str, Any] | None = None,
        execute: ToolExecutor | None = None,
        server_name: str = DEFAULT_SERVER_NAME,
    ) -> ToolSpec:
        spec = ToolSpec(
            name=name,
            description=description,
            parameters=parameters or {"type": "object", "properties": {}},
            server_name=server_name,
            execute=execute,
        )
        self._tools[name] = spec
        logger.debug("Registered tool %s from server %s", name, server_name)
        return spec

    def get(self, name: str) -> ToolSpec | None:
        return self._tools.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def definitions(self) -> list[ToolDefinition]:
        """Tool schemas for the model; executors are never exposed."""
        return [
            ToolDefinition(name=spec.name, description=spec.description, parameters=spec.parameters)
            for spec in self._tools.values()
        ]

    def availability(self) -> dict[str, dict[str, Any]]:
        """Tools per server, with whether each can be executed here."""
        servers: dict[str, dict[str, Any]] = {}
        for spec in self._tools.values():
            server = servers.setdefault(spec.server_name, {"status": "available", "tools": {}})
            server["tools"][spec.name] = {
                "description": spec.description,
                "executable": spec.execute is not None,
            }
        return servers


class ToolCallMediator:
    """Resolves approved tool calls and surfaces new ones as events."""

    def __init__(self, registry: ToolRegistry) -> None:
        self.registry = registry

    async def process_tool_invocations(
        self, messages: list[Message], writer: EventWriter
    ) -> list[Message]:
        """
        Resolve approved or rejected tool calls in the last message.

        Returns a new message list; the input list and its messages are
        left untouched. A toolResult event is written for each resolved call.

        Args:
            messages: Conversation as received from the client
            writer: Event writer for toolResult events

        Returns:
            Conversation with resolved tool outputs in the last message
        """
        if not messages:
            return []

        last_message = messages[-1]
        changed = False
        processed_parts = []
        for part in last_message.parts:
            if isinstance(part, ToolInvocationPart):
                resolved = await self._resolve(part, writer)
                changed = changed or resolved is not part
                processed_parts.append(resolved)
            else:
                processed_parts.append(part)

        if not changed:
            return list(messages)
        return [*messages[:-1], last_message.with_parts(processed_parts)]

    async def _resolve(
        self, part: ToolInvocationPart, writer: EventWriter
    ) -> ToolInvocationPart:
        spec = self.registry.get(part.toolName)
        if spec is None or part.state != "output-available":
            return part

        if part.output == APPROVAL_YES:
            if spec.execute is None:
                result: Any = TOOL_NO_EXECUTE_FUNCTION
            else:
                logger.debug("Calling tool %s with input %s", part.toolName, part.input)
                try:
                    if inspect.iscoroutinefunction(spec.execute):
                        result = await spec.execute(**part.input)
                    else:
                        # Blocking executors run off the event loop
                        result = await asyncio.to_thread(spec.execute, **part.input)
                        if inspect.isawaitable(result):
                            result = await result
                except Exception:
                    logger.exception("Error while calling tool %s", part.toolName)
                    result = TOOL_EXECUTION_ERROR
        elif part.output == APPROVAL_NO:
            result = TOOL_EXECUTION_DENIED
        else:
            return part

        writer.write(ToolResultEvent(toolCallId=part.toolCallId, toolName=part.toolName, result=result))
        return part.model_copy(update={"output": result})

    def process_tool_call(self, call: ToolCall, writer: EventWriter) -> None:
        """
        Annotate a model-issued tool call for the client.

        Only registered tools are annotated; unknown tool names are logged
        and otherwise left to the passthrough tool-call event.
        """
        spec = self.registry.get(call.tool_name)
        if spec is None:
            logger.warning("Model called unregistered tool %s", call.tool_name)
            return
        writer.write(
            ToolCallAnnotationEvent(
                toolCallId=call.tool_call_id,
                serverName=spec.server_name,
                toolName=call.tool_name,
                toolDescription=spec.description or NO_DESCRIPTION,
            )
        )
