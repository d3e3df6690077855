"""
Chat session orchestration.

Provides ChatSession, which drives one chat request from the received
conversation to a finished (or errored) response: tool-call resolution,
optional context optimization, and a continuation-aware generation stream
observed by a stall monitor. Events are yielded in the order they happen;
the server layer only encodes them.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncGenerator

from config.chat_config import ChatSettings
from config.providers import ModelInfo, ModelProvider, ProviderCatalog

from .context import ContextBudgeter, ContextResult, create_files_context
from .credentials import CredentialStore, ProviderCredentials
from .errors import classify_error
from .events import (
    ChatEvent,
    ErrorEvent,
    EventWriter,
    FinishEvent,
    TextDeltaEvent,
    ToolCallEvent,
    usage_event,
)
from .exceptions import AuthenticationError, InvalidRequestError
from .generation import ChatModel, GenerationRequest, StreamSegment, TextChunk, ToolCallChunk
from .models import (
    FileMap,
    Message,
    TextPart,
    UsageAccumulator,
    extract_properties_from_message,
    last_user_message,
    strip_directives,
)
from .prompts import (
    chat_summary_section,
    context_buffer_section,
    database_section,
    design_scheme_section,
    get_system_prompt,
)
from .recovery import StreamRecoveryMonitor
from .streaming import SwitchableStream
from .tools import ToolCallMediator

logger = logging.getLogger(__name__)


class ChatState(str, Enum):
    RECEIVED = "received"
    CONTEXT_OPTIMIZING = "context-optimizing"
    GENERATING = "generating"
    CONTINUING = "continuing"
    FINISHED = "finished"
    ERRORED = "errored"


@dataclass
class ModelTarget:
    """Provider, model and credentials chosen for a request."""

    provider: ModelProvider
    model: ModelInfo
    credentials: ProviderCredentials


class ModelResolver:
    """Turns the model directive of a conversation into a ModelTarget."""

    def __init__(
        self,
        catalog: ProviderCatalog,
        credential_store: CredentialStore,
        settings: ChatSettings,
    ) -> None:
        self.catalog = catalog
        self.credential_store = credential_store
        self.settings = settings

    def resolve(self, messages: list[Message]) -> ModelTarget:
        """
        Resolve the model for the latest user message.

        Args:
            messages: Conversation, oldest first

        Returns:
            ModelTarget for the directive on the last user message, or the
            configured defaults when there is none

        Raises:
            InvalidRequestError: If there are no messages or the provider is disabled
            AuthenticationError: If a remote provider has no API key
        """
        if not messages:
            raise InvalidRequestError("No messages provided")

        model_name, provider_name = self.settings.default_model, self.settings.default_provider
        last_user = last_user_message(messages)
        if last_user is not None:
            model_name, provider_name, _ = extract_properties_from_message(
                last_user, model_name, provider_name
            )

        try:
            provider, model = self.catalog.resolve_model(provider_name, model_name)
        except ValueError as e:
            raise InvalidRequestError(str(e), provider_name) from e

        credentials = self.credential_store.lookup(provider.name)
        if not credentials.settings.enabled:
            raise InvalidRequestError(f"Provider {provider.name} is disabled", provider.name)
        if not provider.is_local() and not credentials.api_key:
            raise AuthenticationError(f"Missing API key for {provider.name} provider", provider.name)
        return ModelTarget(provider=provider, model=model, credentials=credentials)


def _without_directives(message: Message) -> Message:
    if message.role != "user":
        return message
    parts = [
        TextPart(text=strip_directives(part.text)) if isinstance(part, TextPart) else part
        for part in message.parts
    ]
    return message.with_parts(parts)


def message_slice_id(messages: list[Message], keep: int) -> int:
    """Index of the first message kept verbatim when a summary is in use."""
    if len(messages) > keep:
        return len(messages) - keep
    return 0


class ChatSession:
    """
    One chat request, from received conversation to final event.

    Attributes:
        state: Current ChatState
        usage: Cumulative usage for every model call made for this request
        stream: The SwitchableStream, once generation has started
    """

    def __init__(
        self,
        chat_model: ChatModel,
        resolver: ModelResolver,
        tools: ToolCallMediator,
        settings: ChatSettings,
        messages: list[Message],
        files: FileMap | None = None,
        context_optimization: bool = False,
        chat_mode: str = "build",
        design_scheme: dict[str, Any] | None = None,
        supabase: dict[str, Any] | None = None,
        prompt_id: str | None = None,
        monitor: StreamRecoveryMonitor | None = None,
    ) -> None:
        self.chat_model = chat_model
        self.resolver = resolver
        self.tools = tools
        self.settings = settings
        self.messages = list(messages)
        self.files = dict(files or {})
        self.context_optimization = context_optimization
        self.chat_mode = chat_mode
        self.design_scheme = design_scheme
        self.supabase = supabase
        self.prompt_id = prompt_id
        self.monitor = monitor or StreamRecoveryMonitor(
            timeout=settings.stream_timeout_seconds,
            max_retries=settings.stream_max_retries,
            on_timeout=self._on_stall,
        )
        self.state = ChatState.RECEIVED
        self.usage = UsageAccumulator()
        self.writer = EventWriter()
        self.target: ModelTarget | None = None
        self.context: ContextResult | None = None
        self.stream: SwitchableStream | None = None
        self._slice_id = 0

    def prepare(self) -> ModelTarget:
        """
        Resolve the target model before any event is sent.

        Failures here happen before the response stream opens, so callers
        report them as HTTP errors.
        """
        if self.target is None:
            self.target = self.resolver.resolve(self.messages)
            logger.info(
                "Chat request for %s/%s (%d messages, %d files)",
                self.target.provider.name,
                self.target.model.name,
                len(self.messages),
                len(self.files),
            )
        return self.target

    def _on_stall(self) -> None:
        logger.warning("Stream timeout - attempting recovery")

    def _drain(self) -> list[ChatEvent]:
        return self.writer.drain()

    async def run(self) -> AsyncGenerator[ChatEvent, None]:
        """
        Produce the response events for this request.

        Errors after the first event are yielded as a terminal error event.
        Cancellation stops the monitor and propagates without an error event.

        Yields:
            Chat events in emission order
        """
        start_time = time.perf_counter()
        self.monitor.start_monitoring()
        try:
            target = self.prepare()
            messages = await self.tools.process_tool_invocations(self.messages, self.writer)
            for event in self._drain():
                yield event

            # With a summary in play only the tail of the conversation is sent; short
            # chats keep just the latest message plus any continuation messages
            self._slice_id = message_slice_id(messages, self.settings.message_slice_keep) or max(
                len(messages) - 1, 0
            )

            budgeter = ContextBudgeter(
                self.chat_model, target.provider, target.model, target.credentials, self.settings
            )
            if budgeter.should_optimize(self.context_optimization, messages, self.files):
                self.state = ChatState.CONTEXT_OPTIMIZING
                async for event in budgeter.optimize(messages, self.files, self.writer, self.usage):
                    self.monitor.update_activity()
                    yield event
                self.context = budgeter.result

            self.writer.progress("response", "in-progress", "Generating Response")
            for event in self._drain():
                yield event

            self.state = ChatState.GENERATING
            self.stream = SwitchableStream(
                self._open_segment,
                messages,
                self.usage,
                max_segments=self.settings.max_response_segments,
                default_model=self.settings.default_model,
                default_provider=self.settings.default_provider,
            )
            async for chunk in self.stream.stream():
                self.monitor.update_activity()
                if isinstance(chunk, TextChunk):
                    yield TextDeltaEvent(delta=chunk.text)
                elif isinstance(chunk, ToolCallChunk):
                    call = chunk.call
                    yield ToolCallEvent(
                        toolCallId=call.tool_call_id, toolName=call.tool_name, input=call.input
                    )
                    self.tools.process_tool_call(call, self.writer)
                    for event in self._drain():
                        yield event

            yield usage_event(self.usage.total())
            self.writer.progress("response", "complete", "Response Generated")
            for event in self._drain():
                yield event
            yield FinishEvent(
                finishReason=self.stream.finish_reason or "stop", segments=self.stream.segments
            )
            self.state = ChatState.FINISHED
            logger.info(
                "Chat response finished in %.1fms (%d segments, %d tokens)",
                (time.perf_counter() - start_time) * 1000,
                self.stream.segments,
                self.usage.total_tokens,
            )
        except (asyncio.CancelledError, GeneratorExit):
            logger.info("Chat request aborted by client")
            raise
        except Exception as e:
            self.state = ChatState.ERRORED
            provider = self.target.provider.name if self.target else None
            logger.exception("Chat request failed")
            # Events already written still reach the client ahead of the error
            for event in self._drain():
                yield event
            classified = classify_error(e, provider)
            yield ErrorEvent(
                kind=classified.kind.value,
                message=classified.message,
                statusCode=classified.status_code,
                isRetryable=classified.is_retryable,
                provider=classified.provider,
            )
        finally:
            self.monitor.stop()

    async def _open_segment(self, conversation: list[Message]) -> StreamSegment:
        if self.stream is not None and self.stream.segments > 0:
            self.state = ChatState.CONTINUING
        target = self.resolver.resolve(conversation)
        request = GenerationRequest(
            messages=self._segment_messages(conversation),
            provider=target.provider,
            model=target.model,
            credentials=target.credentials,
            system=self._system_prompt(),
            max_tokens=self.settings.completion_token_limit(target.model),
            tools=self.tools.registry.definitions(),
        )
        logger.debug(
            "Opening segment with %d messages for %s", len(request.messages), target.model.name
        )
        return await self.chat_model.generate(request)

    def _segment_messages(self, conversation: list[Message]) -> list[Message]:
        messages = [_without_directives(message) for message in conversation]
        if self.context is not None:
            messages = messages[self._slice_id:]
        return messages

    def _system_prompt(self) -> str:
        prompt = get_system_prompt(self.chat_mode)
        prompt += design_scheme_section(self.design_scheme)
        prompt += database_section(self.supabase)
        if self.context is not None:
            prompt += context_buffer_section(create_files_context(self.context.files))
            prompt += chat_summary_section(self.context.summary)
        return prompt
