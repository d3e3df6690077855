"""
Context optimization.

On projects with files, each request can first summarize the conversation
and then ask the model which workspace files matter for the latest user
message. Only the summary, the selected files and the most recent messages
are then sent to the generation call. Neither step changes the
conversation itself; both produce advisory context.
"""

import logging
import re
from dataclasses import dataclass
from fnmatch import fnmatch
from typing import AsyncGenerator

from config.chat_config import ChatSettings
from config.defaults import IGNORE_PATTERNS, WORK_DIR
from config.providers import ModelInfo, ModelProvider

from .credentials import ProviderCredentials
from .events import ChatEvent, ChatSummaryEvent, CodeContextEvent, EventWriter
from .exceptions import ContextSelectionError
from .generation import ChatModel, GenerationRequest
from .logging_config import timed
from .models import FileMap, Message, UsageAccumulator, strip_directives, text_message
from .prompts import (
    SELECT_CONTEXT_SYSTEM_PROMPT,
    SELECT_CONTEXT_USER_PROMPT,
    SUMMARY_SYSTEM_PROMPT,
    SUMMARY_USER_PROMPT,
)

logger = logging.getLogger(__name__)

THINK_REGEX = re.compile(r"<think>.*?</think>", re.DOTALL)
FILE_ACTION_REGEX = re.compile(
    r'(<boltAction[^>]*type="file"[^>]*>)(.*?)(</boltAction>)', re.DOTALL
)
UPDATE_BUFFER_REGEX = re.compile(r"<updateContextBuffer>(.*?)</updateContextBuffer>", re.DOTALL)
INCLUDE_FILE_REGEX = re.compile(r'<includeFile path="(.*?)"')
EXCLUDE_FILE_REGEX = re.compile(r'<excludeFile path="(.*?)"')

NO_PREVIOUS_SUMMARY = "no summary yet"


def estimate_tokens(text: str) -> int:
    """
    Estimate token count for text.

    Uses a simple heuristic of ~4 characters per token.
    """
    return len(text) // 4


def relative_path(path: str) -> str:
    """Workspace path relative to WORK_DIR."""
    if path.startswith(WORK_DIR):
        path = path[len(WORK_DIR):]
    return path.lstrip("/")


def _is_ignored(path: str) -> bool:
    for pattern in IGNORE_PATTERNS:
        if fnmatch(path, pattern):
            return True
        if pattern.startswith("**/") and fnmatch(path, pattern[3:]):
            return True
    return False


def get_file_paths(files: FileMap) -> list[str]:
    """Relative paths of workspace files eligible for context selection."""
    paths = (relative_path(path) for path in files)
    return [path for path in paths if path and not _is_ignored(path)]


def create_files_context(files: FileMap, use_relative_path: bool = True) -> str:
    """Render files as a single artifact the model can read."""
    actions = []
    for path, content in files.items():
        shown = relative_path(path) if use_relative_path else path
        actions.append(f'<boltAction type="file" filePath="{shown}">{content}</boltAction>')
    body = "\n".join(actions)
    return f'<boltArtifact id="code-content" title="Code Content" >\n{body}\n</boltArtifact>'


def simplify_message_text(text: str) -> str:
    """Drop reasoning blocks and file bodies that would bloat a transcript."""
    text = THINK_REGEX.sub("", text)
    text = FILE_ACTION_REGEX.sub(r"\1...\3", text)
    return strip_directives(text).strip()


def format_transcript(messages: list[Message]) -> str:
    """
    Format messages as text for the summary and selection prompts.

    Args:
        messages: Messages to render

    Returns:
        Transcript with one ``[role]: text`` block per message
    """
    blocks = []
    for message in messages:
        if message.role == "system":
            continue
        blocks.append(f"---\n[{message.role}]: {simplify_message_text(message.text)}\n---")
    return "\n".join(blocks)


def previous_summary(messages: list[Message]) -> tuple[str | None, int]:
    """
    Find the most recent chat summary carried by an assistant message.

    Returns:
        Tuple of (summary or None, index of the first message not covered)
    """
    for index in range(len(messages) - 1, -1, -1):
        message = messages[index]
        if message.role != "assistant":
            continue
        annotation = message.annotation("chatSummary")
        if annotation and annotation.get("summary"):
            return annotation["summary"], index
    return None, 0


def current_context_files(messages: list[Message]) -> list[str]:
    """Relative paths in the context buffer reported on the last assistant message."""
    for message in reversed(messages):
        if message.role != "assistant":
            continue
        annotation = message.annotation("codeContext")
        if annotation:
            return [relative_path(path) for path in annotation.get("files", [])]
        return []
    return []


@dataclass
class ContextResult:
    """Advisory context produced by optimization."""

    summary: str
    files: FileMap

    @property
    def file_paths(self) -> list[str]:
        return [relative_path(path) for path in self.files]


class ContextBudgeter:
    """Summarizes the conversation and selects relevant files."""

    def __init__(
        self,
        chat_model: ChatModel,
        provider: ModelProvider,
        model: ModelInfo,
        credentials: ProviderCredentials,
        settings: ChatSettings,
    ) -> None:
        self.chat_model = chat_model
        self.provider = provider
        self.model = model
        self.credentials = credentials
        self.settings = settings
        self.result: ContextResult | None = None

    def should_optimize(self, enabled: bool, messages: list[Message], files: FileMap) -> bool:
        """
        Decide whether to run summary and selection for this request.

        Skipped when the flag is off, when no files are eligible, or when
        the estimated prompt size is under the configured threshold.
        """
        if not enabled or not get_file_paths(files):
            return False
        threshold = self.settings.context_optimization_threshold
        if threshold <= 0:
            return True
        estimated = estimate_tokens(format_transcript(messages)) + sum(
            estimate_tokens(content) for content in files.values()
        )
        if estimated < threshold:
            logger.debug("Skipping context optimization: ~%d tokens < %d", estimated, threshold)
            return False
        return True

    async def optimize(
        self,
        messages: list[Message],
        files: FileMap,
        writer: EventWriter,
        usage: UsageAccumulator,
    ) -> AsyncGenerator[ChatEvent, None]:
        """
        Summarize the chat and select context files, reporting progress.

        Yields progress and context events as each step starts and ends;
        the outcome is left in ``self.result``. Failures propagate; once
        started, optimization is not skipped.

        Args:
            messages: Conversation after tool processing
            files: Workspace files
            writer: Event writer for progress and context events
            usage: Accumulator receiving both sub-calls' usage

        Yields:
            Progress, chatSummary and codeContext events
        """
        logger.debug("Generating chat summary for %d messages", len(messages))
        writer.progress("summary", "in-progress", "Analysing Request")
        for event in writer.drain():
            yield event
        summary = await self.create_summary(messages, usage)
        writer.progress("summary", "complete", "Analysis Complete")
        writer.write(ChatSummaryEvent(summary=summary, chatId=messages[-1].id if messages else None))

        logger.debug("Updating context buffer")
        writer.progress("context", "in-progress", "Determining Files to Read")
        for event in writer.drain():
            yield event
        selected = await self.select_context(messages, files, summary, usage)
        self.result = ContextResult(summary=summary, files=selected)
        logger.debug("Files in context: %s", self.result.file_paths)
        writer.write(CodeContextEvent(files=self.result.file_paths))
        writer.progress("context", "complete", "Code Files Selected")
        for event in writer.drain():
            yield event

    def _request(self, system: str, prompt: str) -> GenerationRequest:
        return GenerationRequest(
            messages=[text_message("user", prompt)],
            provider=self.provider,
            model=self.model,
            credentials=self.credentials,
            system=system,
            max_tokens=self.settings.completion_token_limit(self.model),
        )

    @timed("chat summary")
    async def create_summary(self, messages: list[Message], usage: UsageAccumulator) -> str:
        """
        Summarize the conversation, extending any earlier summary.

        Raises:
            ContextSelectionError: If the model returns an empty summary
        """
        old_summary, start = previous_summary(messages)
        prompt = SUMMARY_USER_PROMPT.format(
            previous_summary=old_summary or NO_PREVIOUS_SUMMARY,
            chat=format_transcript(messages[start:]),
        )
        completion = await self.chat_model.complete(self._request(SUMMARY_SYSTEM_PROMPT, prompt))
        usage.add("summary", completion.usage)

        summary = completion.text.strip()
        if not summary:
            raise ContextSelectionError("No summary generated", self.provider.name)
        return summary

    @timed("context selection")
    async def select_context(
        self,
        messages: list[Message],
        files: FileMap,
        summary: str,
        usage: UsageAccumulator,
    ) -> FileMap:
        """
        Ask the model which files belong in the context buffer.

        Starts from the buffer reported on the last assistant message and
        applies the model's include/exclude list to it.

        Raises:
            ContextSelectionError: If the response is malformed or selects nothing
        """
        file_paths = get_file_paths(files)
        index = {relative_path(path): path for path in files}
        available = set(file_paths)
        buffer: FileMap = {}
        for path in current_context_files(messages):
            if path in available:
                buffer[index[path]] = files[index[path]]

        last_user = next((m for m in reversed(messages) if m.role == "user"), None)
        question = simplify_message_text(last_user.text) if last_user else ""

        system = SELECT_CONTEXT_SYSTEM_PROMPT.format(
            file_paths="\n".join(f"- {path}" for path in file_paths),
            context=create_files_context(buffer) if buffer else "",
        )
        prompt = SELECT_CONTEXT_USER_PROMPT.format(summary=summary, question=question)
        completion = await self.chat_model.complete(self._request(system, prompt))
        usage.add("context", completion.usage)

        match = UPDATE_BUFFER_REGEX.search(completion.text)
        if not match:
            raise ContextSelectionError(
                "Invalid response. Please follow the response format", self.provider.name
            )
        body = match.group(1)

        for path in EXCLUDE_FILE_REGEX.findall(body):
            key = index.get(relative_path(path))
            if key is not None:
                buffer.pop(key, None)

        for path in INCLUDE_FILE_REGEX.findall(body):
            relative = relative_path(path)
            if relative not in available:
                logger.warning("Ignoring selected file not in workspace: %s", path)
                continue
            buffer[index[relative]] = files[index[relative]]

        if not buffer:
            raise ContextSelectionError("Failed to select files", self.provider.name)
        return buffer
