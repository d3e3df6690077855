"""Token usage models."""

import logging
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

# Field spellings seen across provider SDK versions, in lookup order
PROMPT_TOKEN_FIELDS = ("promptTokens", "inputTokens", "prompt_tokens", "input_tokens", "request_tokens")
COMPLETION_TOKEN_FIELDS = (
    "completionTokens",
    "outputTokens",
    "completion_tokens",
    "output_tokens",
    "response_tokens",
)
TOTAL_TOKEN_FIELDS = ("totalTokens", "total_tokens")


@dataclass(frozen=True)
class Usage:
    """Token usage of one model call, in the canonical shape."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


def _read(raw: Any, names: tuple[str, ...]) -> int | None:
    for name in names:
        if isinstance(raw, dict):
            value = raw.get(name)
        else:
            value = getattr(raw, name, None)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return int(value)
    return None


def normalize_usage(raw: Any) -> Usage | None:
    """
    Convert a provider usage report into a Usage.

    Accepts dicts or objects using any known field spelling. A reported
    total is taken verbatim; otherwise it is the sum of prompt and
    completion tokens.

    Args:
        raw: Usage payload from a provider, or None

    Returns:
        Normalized Usage, or None when nothing was reported
    """
    if raw is None:
        return None
    if isinstance(raw, Usage):
        return raw
    prompt = _read(raw, PROMPT_TOKEN_FIELDS) or 0
    completion = _read(raw, COMPLETION_TOKEN_FIELDS) or 0
    total = _read(raw, TOTAL_TOKEN_FIELDS)
    if total is None:
        total = prompt + completion
    return Usage(prompt_tokens=prompt, completion_tokens=completion, total_tokens=total)


@dataclass
class UsageAccumulator:
    """
    Running usage totals for one chat response.

    Covers the summary and selection sub-calls and every generation
    segment. Records are kept in call order for debugging.
    """

    records: list[tuple[str, Usage]] = field(default_factory=list)

    def add(self, label: str, raw: Any) -> Usage | None:
        usage = normalize_usage(raw)
        if usage is None:
            return None
        self.records.append((label, usage))
        logger.debug(
            "%s token usage: prompt=%d completion=%d total=%d",
            label,
            usage.prompt_tokens,
            usage.completion_tokens,
            usage.total_tokens,
        )
        return usage

    @property
    def prompt_tokens(self) -> int:
        return sum(usage.prompt_tokens for _, usage in self.records)

    @property
    def completion_tokens(self) -> int:
        return sum(usage.completion_tokens for _, usage in self.records)

    @property
    def total_tokens(self) -> int:
        return sum(usage.total_tokens for _, usage in self.records)

    def total(self) -> Usage:
        return Usage(
            prompt_tokens=self.prompt_tokens,
            completion_tokens=self.completion_tokens,
            total_tokens=self.total_tokens,
        )
