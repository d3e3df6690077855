"""
Tests for the tool registry and tool-call mediation.
"""
import threading

from core.events import EventWriter, ToolCallAnnotationEvent, ToolResultEvent
from core.models import Message, TextPart, ToolInvocationPart, text_message
from core.tools import (
    APPROVAL_NO,
    APPROVAL_YES,
    TOOL_EXECUTION_DENIED,
    TOOL_EXECUTION_ERROR,
    TOOL_NO_EXECUTE_FUNCTION,
    ToolCall,
)


def pending_call(tool_name: str, output, input=None) -> Message:
    return Message(
        role="assistant",
        parts=[
            TextPart(text="Let me check."),
            ToolInvocationPart(
                toolCallId="call_1",
                toolName=tool_name,
                state="output-available",
                input=input or {},
                output=output,
            ),
        ],
    )


class TestToolRegistry:
    """Test tool registration."""

    def test_definitions_hide_executors(self, tool_registry):
        """Test that definitions carry schema but no executor."""
        tool_registry.register("search", "Search the web", {"type": "object"}, execute=lambda: "x")

        [definition] = tool_registry.definitions()

        assert definition.name == "search"
        assert definition.description == "Search the web"
        assert not hasattr(definition, "execute")

    def test_availability_groups_by_server(self, tool_registry):
        """Test that availability reports tools per server."""
        tool_registry.register("search", "Search", server_name="web")
        tool_registry.register("read", "Read", execute=lambda path: path, server_name="fs")

        availability = tool_registry.availability()

        assert set(availability) == {"web", "fs"}
        assert availability["web"]["tools"]["search"]["executable"] is False
        assert availability["fs"]["tools"]["read"]["executable"] is True

    def test_contains_and_len(self, tool_registry):
        """Test membership helpers."""
        tool_registry.register("search")

        assert "search" in tool_registry
        assert "missing" not in tool_registry
        assert len(tool_registry) == 1


class TestProcessToolInvocations:
    """Test resolution of approved and rejected tool calls."""

    async def test_approved_call_executes(self, tool_registry, mediator):
        """Test that an approved call runs and its result replaces the approval."""
        tool_registry.register("add", execute=lambda a, b: a + b)
        messages = [text_message("user", "add"), pending_call("add", APPROVAL_YES, {"a": 2, "b": 3})]
        writer = EventWriter()

        processed = await mediator.process_tool_invocations(messages, writer)

        assert processed[-1].tool_invocations[0].output == 5
        assert writer.drain() == [ToolResultEvent(toolCallId="call_1", toolName="add", result=5)]

    async def test_async_executor(self, tool_registry, mediator):
        """Test that coroutine executors are awaited."""

        async def fetch(url):
            return f"fetched {url}"

        tool_registry.register("fetch", execute=fetch)
        messages = [pending_call("fetch", APPROVAL_YES, {"url": "https://example.com"})]

        processed = await mediator.process_tool_invocations(messages, EventWriter())

        assert processed[-1].tool_invocations[0].output == "fetched https://example.com"

    async def test_sync_executor_runs_off_event_loop(self, tool_registry, mediator):
        """Test that blocking executors run in a worker thread."""
        loop_thread = threading.get_ident()
        tool_registry.register("whoami", execute=threading.get_ident)
        messages = [pending_call("whoami", APPROVAL_YES)]

        processed = await mediator.process_tool_invocations(messages, EventWriter())

        assert processed[-1].tool_invocations[0].output != loop_thread

    async def test_rejected_call(self, tool_registry, mediator):
        """Test that a rejected call yields the denial message."""
        tool_registry.register("delete", execute=lambda: "deleted")
        writer = EventWriter()

        processed = await mediator.process_tool_invocations([pending_call("delete", APPROVAL_NO)], writer)

        assert processed[-1].tool_invocations[0].output == TOOL_EXECUTION_DENIED
        [event] = writer.drain()
        assert event.result == TOOL_EXECUTION_DENIED

    async def test_missing_executor(self, tool_registry, mediator):
        """Test that a tool without an executor reports it."""
        tool_registry.register("remote")

        processed = await mediator.process_tool_invocations(
            [pending_call("remote", APPROVAL_YES)], EventWriter()
        )

        assert processed[-1].tool_invocations[0].output == TOOL_NO_EXECUTE_FUNCTION

    async def test_executor_error_is_observable(self, tool_registry, mediator):
        """Test that a failing executor produces an error result event."""

        def broken():
            raise RuntimeError("disk on fire")

        tool_registry.register("broken", execute=broken)
        writer = EventWriter()

        processed = await mediator.process_tool_invocations([pending_call("broken", APPROVAL_YES)], writer)

        assert processed[-1].tool_invocations[0].output == TOOL_EXECUTION_ERROR
        assert writer.drain()[0].result == TOOL_EXECUTION_ERROR

    async def test_input_is_not_mutated(self, tool_registry, mediator):
        """Test that the caller's messages are left untouched."""
        tool_registry.register("add", execute=lambda a, b: a + b)
        original = pending_call("add", APPROVAL_YES, {"a": 1, "b": 1})
        messages = [original]

        processed = await mediator.process_tool_invocations(messages, EventWriter())

        assert messages[0] is original
        assert original.tool_invocations[0].output == APPROVAL_YES
        assert processed is not messages

    async def test_unrelated_messages_pass_through(self, mediator):
        """Test that messages without pending calls are returned unchanged."""
        messages = [text_message("user", "hello")]
        writer = EventWriter()

        processed = await mediator.process_tool_invocations(messages, writer)

        assert processed == messages
        assert writer.drain() == []

    async def test_unregistered_tool_left_alone(self, mediator):
        """Test that outputs for unknown tools are not touched."""
        message = pending_call("unknown", APPROVAL_YES)

        processed = await mediator.process_tool_invocations([message], EventWriter())

        assert processed[-1] == message


class TestProcessToolCall:
    """Test annotation of model-issued tool calls."""

    def test_registered_tool_is_annotated(self, tool_registry, mediator):
        """Test that a registered call becomes an annotation event."""
        tool_registry.register("search", "Search the web", server_name="web")
        writer = EventWriter()

        mediator.process_tool_call(ToolCall("call_9", "search", {"q": "x"}), writer)

        assert writer.drain() == [
            ToolCallAnnotationEvent(
                toolCallId="call_9",
                serverName="web",
                toolName="search",
                toolDescription="Search the web",
            )
        ]

    def test_unknown_tool_is_not_annotated(self, mediator):
        """Test that unknown tools produce no annotation."""
        writer = EventWriter()

        mediator.process_tool_call(ToolCall("call_9", "missing"), writer)

        assert writer.drain() == []
