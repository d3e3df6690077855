"""
Tests for the Pydantic AI model provider.
Uses Pydantic AI's FunctionModel in place of a vendor API.
"""
import base64

import pytest
from pydantic_ai.messages import (
    BinaryContent,
    ImageUrl,
    ModelRequest,
    ModelResponse,
    SystemPromptPart,
    ToolCallPart,
    ToolReturnPart,
    UserPromptPart,
)
from pydantic_ai.messages import TextPart as ModelTextPart
from pydantic_ai.models import ModelRequestParameters
from pydantic_ai.models.anthropic import AnthropicModel
from pydantic_ai.models.function import DeltaToolCall, FunctionModel
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.settings import ModelSettings

from core.credentials import ProviderCredentials, ProviderSettings
from core.generation import GenerationRequest, TextChunk, ToolCallChunk
from core.models import FilePart, Message, TextPart, ToolInvocationPart, normalize_usage, text_message
from llm import PydanticAIChatModel, PydanticAISegment, build_model, to_model_messages


class TestToModelMessages:
    """Test conversion to Pydantic AI message history."""

    def test_system_and_text(self):
        """Test that the system prompt comes first and text maps to prompts."""
        converted = to_model_messages(
            [text_message("user", "hi"), text_message("assistant", "hello")], system="be helpful"
        )

        [system] = converted[0].parts
        assert isinstance(system, SystemPromptPart)
        assert system.content == "be helpful"
        assert isinstance(converted[1], ModelRequest)
        assert converted[1].parts[0].content == "hi"
        assert isinstance(converted[2], ModelResponse)
        assert converted[2].parts[0].content == "hello"

    def test_attachments(self):
        """Test that data URLs are inlined and other URLs referenced."""
        payload = base64.b64encode(b"png-bytes").decode()
        message = Message(
            role="user",
            parts=[
                TextPart(text="what is this?"),
                FilePart(url=f"data:image/png;base64,{payload}", mediaType="image/png"),
                FilePart(url="https://example.com/cat.jpg", mediaType="image/jpeg"),
            ],
        )

        [request] = to_model_messages([message])

        [prompt] = request.parts
        assert isinstance(prompt, UserPromptPart)
        text, inline, remote = prompt.content
        assert text == "what is this?"
        assert isinstance(inline, BinaryContent)
        assert (inline.data, inline.media_type) == (b"png-bytes", "image/png")
        assert isinstance(remote, ImageUrl)

    def test_tool_invocations(self):
        """Test that resolved tool invocations become a call and its return."""
        message = Message(
            role="assistant",
            parts=[
                TextPart(text="Adding."),
                ToolInvocationPart(
                    toolCallId="call_1", toolName="add", state="output-available", input={"a": 1}, output=2
                ),
            ],
        )

        response, returns = to_model_messages([message])

        assert isinstance(response.parts[1], ToolCallPart)
        assert response.parts[1].args == {"a": 1}
        [tool_return] = returns.parts
        assert isinstance(tool_return, ToolReturnPart)
        assert (tool_return.tool_call_id, tool_return.content) == ("call_1", 2)

    def test_pending_tool_call_has_no_return(self):
        """Test that unresolved calls are replayed without a result."""
        message = Message(
            role="assistant",
            parts=[ToolInvocationPart(toolCallId="call_1", toolName="add", input={})],
        )

        converted = to_model_messages([message])

        assert len(converted) == 1

    def test_empty_messages_skipped(self):
        """Test that messages with nothing to send are dropped."""
        assert to_model_messages([Message(role="user", parts=[]), Message(role="assistant", parts=[])]) == []


class TestBuildModel:
    """Test model construction per provider kind."""

    def test_anthropic(self, catalog):
        """Test the native Anthropic client."""
        model = build_model(catalog.get("Anthropic"), "claude-sonnet-4-20250514", ProviderCredentials(api_key="k"))

        assert isinstance(model, AnthropicModel)
        assert model.model_name == "claude-sonnet-4-20250514"

    def test_google(self, catalog):
        """Test the native Google client."""
        model = build_model(catalog.get("Google"), "gemini-2.5-flash", ProviderCredentials(api_key="k"))

        assert isinstance(model, GoogleModel)

    def test_openai_compatible_base_url_override(self, catalog):
        """Test that client settings override the base URL of local providers."""
        credentials = ProviderCredentials(settings=ProviderSettings(baseUrl="http://gpu:11434/v1"))

        model = build_model(catalog.get("Ollama"), "llama3.2", credentials)

        assert isinstance(model, OpenAIChatModel)
        assert "gpu:11434" in model.base_url


class TestPydanticAISegment:
    """Test streaming through a function model."""

    async def test_text_stream(self):
        """Test that text deltas become text chunks."""

        async def stream(messages, info):
            yield "Hello"
            yield " world"

        segment = PydanticAISegment(
            FunctionModel(stream_function=stream),
            to_model_messages([text_message("user", "hi")]),
            ModelSettings(),
            ModelRequestParameters(),
        )

        chunks = [chunk async for chunk in segment]

        assert "".join(chunk.text for chunk in chunks if isinstance(chunk, TextChunk)) == "Hello world"
        assert segment.finish_reason == "stop"
        assert normalize_usage(segment.usage) is not None

    async def test_tool_call(self):
        """Test that completed tool calls are yielded after the text."""

        async def stream(messages, info):
            yield {0: DeltaToolCall(name="search", json_args='{"q": "python"}', tool_call_id="call_1")}

        segment = PydanticAISegment(
            FunctionModel(stream_function=stream),
            to_model_messages([text_message("user", "find python")]),
            ModelSettings(),
            ModelRequestParameters(),
        )

        chunks = [chunk async for chunk in segment]

        [tool_chunk] = [chunk for chunk in chunks if isinstance(chunk, ToolCallChunk)]
        assert tool_chunk.call.tool_name == "search"
        assert tool_chunk.call.tool_call_id == "call_1"
        assert tool_chunk.call.input == {"q": "python"}


class TestPydanticAIChatModel:
    """Test the ChatModel implementation."""

    @pytest.fixture
    def request_for(self, catalog):
        def factory(messages, system=None):
            provider, model = catalog.resolve_model("Anthropic", "claude-sonnet-4-20250514")
            return GenerationRequest(
                messages=messages,
                provider=provider,
                model=model,
                credentials=ProviderCredentials(api_key="k"),
                system=system,
                max_tokens=100,
            )

        return factory

    async def test_complete(self, request_for, monkeypatch):
        """Test a non-streamed call returns text and usage."""
        seen = []

        def respond(messages, info):
            seen.extend(messages)
            return ModelResponse(parts=[ModelTextPart(content="A summary")])

        monkeypatch.setattr("llm.provider.build_model", lambda *args: FunctionModel(respond))

        completion = await PydanticAIChatModel().complete(
            request_for([text_message("user", "summarize")], system="You summarize")
        )

        assert completion.text == "A summary"
        assert normalize_usage(completion.usage) is not None
        assert isinstance(seen[0].parts[0], SystemPromptPart)

    async def test_generate(self, request_for, monkeypatch):
        """Test that generate returns a segment that streams on iteration."""

        async def stream(messages, info):
            yield "streamed"

        monkeypatch.setattr(
            "llm.provider.build_model", lambda *args: FunctionModel(stream_function=stream)
        )

        segment = await PydanticAIChatModel().generate(request_for([text_message("user", "hi")]))
        chunks = [chunk async for chunk in segment]

        assert chunks == [TextChunk(text="streamed")]
