"""
Tests for message, part, file map and usage models.
"""
import pytest
from pydantic import ValidationError

from core.models import (
    FilePart,
    Message,
    ReasoningPart,
    TextPart,
    ToolInvocationPart,
    Usage,
    UsageAccumulator,
    extract_properties_from_message,
    last_user_message,
    normalize_file_map,
    normalize_usage,
    strip_directives,
    text_message,
)


class TestMessage:
    """Test message parsing and normalization."""

    def test_legacy_content_string(self):
        """Test that a content string becomes a single text part."""
        message = Message.model_validate({"role": "user", "content": "hello"})

        assert message.parts == [TextPart(text="hello")]
        assert message.text == "hello"

    def test_legacy_content_list(self):
        """Test that a content list is parsed as parts."""
        message = Message.model_validate(
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": "look at this"},
                    {"type": "image", "image": "https://example.com/a.png", "mimeType": "image/png"},
                ],
            }
        )

        assert isinstance(message.parts[0], TextPart)
        assert isinstance(message.parts[1], FilePart)
        assert message.parts[1].url == "https://example.com/a.png"

    def test_unknown_parts_are_dropped(self):
        """Test that unsupported part types are ignored."""
        message = Message.model_validate(
            {"role": "assistant", "parts": [{"type": "step-start"}, {"type": "text", "text": "hi"}]}
        )

        assert message.parts == [TextPart(text="hi")]

    def test_annotations_from_metadata(self):
        """Test that annotations stored in metadata are picked up."""
        message = Message.model_validate(
            {
                "role": "assistant",
                "parts": [],
                "metadata": {"annotations": [{"type": "chatSummary", "summary": "s"}, "junk"]},
            }
        )

        assert message.annotations == [{"type": "chatSummary", "summary": "s"}]
        assert message.annotation("chatSummary") == {"type": "chatSummary", "summary": "s"}
        assert message.annotation("codeContext") is None

    def test_messages_are_frozen(self):
        """Test that messages cannot be mutated."""
        message = text_message("user", "hello")

        with pytest.raises(ValidationError):
            message.role = "assistant"

    def test_with_parts_returns_copy(self):
        """Test that with_parts leaves the original untouched."""
        message = text_message("user", "hello")
        updated = message.with_parts([TextPart(text="bye")])

        assert message.text == "hello"
        assert updated.text == "bye"

    def test_text_skips_reasoning(self):
        """Test that text only joins text parts."""
        message = Message(
            role="assistant", parts=[ReasoningPart(text="thinking"), TextPart(text="answer")]
        )

        assert message.text == "answer"

    def test_last_user_message(self):
        """Test finding the most recent user message."""
        messages = [
            text_message("user", "first"),
            text_message("assistant", "reply"),
            text_message("user", "second"),
            text_message("assistant", "reply"),
        ]

        assert last_user_message(messages).text == "second"
        assert last_user_message([text_message("assistant", "x")]) is None


class TestModelDirectives:
    """Test model and provider directives in user text."""

    def test_extract_properties(self):
        """Test that directives are read and removed."""
        message = text_message("user", "[Model: gpt-4o]\n\n[Provider: OpenAI]\n\nWrite a todo app")

        model, provider, content = extract_properties_from_message(message, "default-model", "Default")

        assert model == "gpt-4o"
        assert provider == "OpenAI"
        assert content == "Write a todo app"

    def test_extract_properties_defaults(self):
        """Test that defaults are used when no directive is present."""
        message = text_message("user", "Write a todo app")

        model, provider, content = extract_properties_from_message(message, "default-model", "Default")

        assert (model, provider, content) == ("default-model", "Default", "Write a todo app")

    def test_strip_directives(self):
        """Test removing directives from text."""
        assert strip_directives("[Model: m]\n\n[Provider: p]\n\nhello") == "hello"
        assert strip_directives("hello") == "hello"


class TestToolInvocationPart:
    """Test normalization of the historical tool call shapes."""

    def test_args_and_result_fold_into_input_and_output(self):
        """Test that args/result are accepted as input/output."""
        part = ToolInvocationPart.model_validate(
            {
                "type": "tool-invocation",
                "toolCallId": "call_1",
                "toolName": "search",
                "args": {"q": "python"},
                "result": "Yes, approved.",
                "state": "result",
            }
        )

        assert part.input == {"q": "python"}
        assert part.output == "Yes, approved."
        assert part.state == "output-available"

    def test_input_shape_is_equivalent(self):
        """Test that the input shape produces the same part as the args shape."""
        with_args = ToolInvocationPart.model_validate(
            {"toolCallId": "c", "toolName": "t", "args": {"a": 1}, "state": "call"}
        )
        with_input = ToolInvocationPart.model_validate(
            {"toolCallId": "c", "toolName": "t", "input": {"a": 1}, "state": "input-available"}
        )

        assert with_args == with_input

    def test_nested_tool_invocation(self):
        """Test the nested toolInvocation form."""
        message = Message.model_validate(
            {
                "role": "assistant",
                "parts": [
                    {
                        "type": "tool-invocation",
                        "toolInvocation": {
                            "toolCallId": "call_2",
                            "toolName": "read_file",
                            "args": {"path": "a.txt"},
                            "state": "call",
                        },
                    }
                ],
            }
        )

        [part] = message.tool_invocations
        assert part.toolName == "read_file"
        assert part.input == {"path": "a.txt"}
        assert part.state == "input-available"

    def test_tool_name_from_part_type(self):
        """Test the tool-<name> part type form."""
        message = Message.model_validate(
            {
                "role": "assistant",
                "parts": [
                    {"type": "tool-weather", "toolCallId": "call_3", "input": {"city": "Oslo"}}
                ],
            }
        )

        [part] = message.tool_invocations
        assert part.toolName == "weather"
        assert part.input == {"city": "Oslo"}


class TestFileMap:
    """Test file map normalization."""

    def test_keeps_text_files(self):
        """Test that strings and file entries are kept."""
        files = normalize_file_map(
            {
                "/home/project/a.ts": "const a = 1",
                "/home/project/b.ts": {"type": "file", "content": "const b = 2", "isBinary": False},
            }
        )

        assert files == {"/home/project/a.ts": "const a = 1", "/home/project/b.ts": "const b = 2"}

    def test_drops_folders_and_binaries(self):
        """Test that folders and binary files are removed."""
        files = normalize_file_map(
            {
                "/home/project/src": {"type": "folder"},
                "/home/project/logo.png": {"type": "file", "content": "", "isBinary": True},
                "/home/project/weird": 42,
            }
        )

        assert files == {}

    def test_non_mapping(self):
        """Test that a missing file map is empty."""
        assert normalize_file_map(None) == {}


class TestUsage:
    """Test usage normalization and accumulation."""

    @pytest.mark.parametrize(
        "raw",
        [
            {"promptTokens": 7, "completionTokens": 3},
            {"inputTokens": 7, "outputTokens": 3},
            {"prompt_tokens": 7, "completion_tokens": 3},
            {"input_tokens": 7, "output_tokens": 3},
        ],
    )
    def test_field_spellings(self, raw):
        """Test that every known spelling normalizes to the same usage."""
        assert normalize_usage(raw) == Usage(prompt_tokens=7, completion_tokens=3, total_tokens=10)

    def test_reported_total_taken_verbatim(self):
        """Test that a provider total is not recomputed."""
        usage = normalize_usage({"promptTokens": 7, "completionTokens": 3, "totalTokens": 12})

        assert usage.total_tokens == 12

    def test_object_usage(self):
        """Test reading usage from attributes."""

        class ProviderUsage:
            input_tokens = 4
            output_tokens = 6

        assert normalize_usage(ProviderUsage()) == Usage(4, 6, 10)

    def test_missing_usage(self):
        """Test that no report yields None."""
        assert normalize_usage(None) is None

    def test_accumulator_is_additive(self):
        """Test that totals are sums over every recorded call, in call order."""
        accumulator = UsageAccumulator()
        accumulator.add("summary", {"promptTokens": 100, "completionTokens": 20})
        accumulator.add("context", {"inputTokens": 50, "outputTokens": 10, "totalTokens": 65})
        accumulator.add("segment 1", {"prompt_tokens": 30, "completion_tokens": 40})
        accumulator.add("segment 2", None)

        assert [label for label, _ in accumulator.records] == ["summary", "context", "segment 1"]
        assert accumulator.total() == Usage(
            prompt_tokens=180, completion_tokens=70, total_tokens=120 + 65 + 70
        )
