"""
Continuation of length-truncated responses.

A SwitchableStream presents several model calls as one logical output.
When a segment stops because it hit the output length limit, the partial
assistant text and a continuation directive are appended to the
conversation and a new segment is opened. Segments run strictly one after
another, and the number of continuations is bounded.
"""

import logging
from typing import AsyncGenerator, Awaitable, Callable

from .exceptions import SegmentBudgetExceededError, StreamingError
from .generation import (
    FINISH_ERROR,
    FINISH_LENGTH,
    FINISH_STOP,
    SegmentChunk,
    StreamSegment,
    TextChunk,
)
from .models import Message, UsageAccumulator, extract_properties_from_message, last_user_message, text_message
from .prompts import CONTINUE_PROMPT

logger = logging.getLogger(__name__)

SegmentOpener = Callable[[list[Message]], Awaitable[StreamSegment]]


def continuation_directive(model: str, provider: str) -> str:
    """User message text asking the pinned model to continue its answer."""
    return f"[Model: {model}]\n\n[Provider: {provider}]\n\n{CONTINUE_PROMPT}"


class SwitchableStream:
    """
    One logical response spanning up to ``max_segments + 1`` model calls.

    Attributes:
        switches: Continuations issued so far; checked against max_segments
        segments: Segments opened so far
        finish_reason: Finish reason of the final segment, once finished
        text: Assistant text across all segments
    """

    def __init__(
        self,
        open_segment: SegmentOpener,
        messages: list[Message],
        usage: UsageAccumulator,
        max_segments: int,
        default_model: str,
        default_provider: str,
    ) -> None:
        self._open_segment = open_segment
        self._messages = list(messages)
        self._usage = usage
        self._max_segments = max_segments
        self._default_model = default_model
        self._default_provider = default_provider
        self.switches = 0
        self.segments = 0
        self.finish_reason: str | None = None
        self.text = ""

    async def stream(self) -> AsyncGenerator[SegmentChunk, None]:
        """
        Yield chunks from every segment in order.

        Raises:
            SegmentBudgetExceededError: If a segment is truncated after the
                continuation budget is spent
            StreamingError: If a segment reports an error finish
        """
        conversation = list(self._messages)

        while True:
            segment = await self._open_segment(conversation)
            self.segments += 1
            segment_text: list[str] = []

            async for chunk in segment:
                if isinstance(chunk, TextChunk):
                    segment_text.append(chunk.text)
                yield chunk

            content = "".join(segment_text)
            self.text += content
            self._usage.add(f"segment {self.segments}", segment.usage)

            finish_reason = segment.finish_reason or FINISH_STOP
            if finish_reason == FINISH_ERROR:
                raise StreamingError("Model stream ended with an error")
            if finish_reason != FINISH_LENGTH:
                self.finish_reason = finish_reason
                return

            if self.switches >= self._max_segments:
                raise SegmentBudgetExceededError(self._max_segments)

            self.switches += 1
            logger.info(
                "Reached max token limit: Continuing message (%d switches left)",
                self._max_segments - self.switches,
            )
            conversation = self._continue(conversation, content)

    def _continue(self, conversation: list[Message], content: str) -> list[Message]:
        # Pin the model the user selected, not the request default
        model, provider = self._default_model, self._default_provider
        last_user = last_user_message(self._messages)
        if last_user is not None:
            model, provider, _ = extract_properties_from_message(
                last_user, self._default_model, self._default_provider
            )
        return [
            *conversation,
            text_message("assistant", content),
            text_message("user", continuation_directive(model, provider)),
        ]
