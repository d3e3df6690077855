"""
Domain models for the chat pipeline.

These are the core data structures used throughout the application.
"""

from .files import FileEntry, FileMap, normalize_file_map
from .message import (
    Message,
    Role,
    extract_properties_from_message,
    last_user_message,
    strip_directives,
    text_message,
)
from .part import FilePart, Part, ReasoningPart, TextPart, ToolInvocationPart, parse_part
from .usage import Usage, UsageAccumulator, normalize_usage

__all__ = [
    # Message models
    "Message",
    "Role",
    "text_message",
    "extract_properties_from_message",
    "strip_directives",
    "last_user_message",
    # Part models
    "TextPart",
    "ReasoningPart",
    "FilePart",
    "ToolInvocationPart",
    "Part",
    "parse_part",
    # Files
    "FileEntry",
    "FileMap",
    "normalize_file_map",
    # Usage
    "Usage",
    "UsageAccumulator",
    "normalize_usage",
]
