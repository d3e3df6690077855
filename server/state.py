"""
Server-side state management.

Holds the process-wide chat model and tool registry used by the routes.
"""

from core.generation import ChatModel
from core.tools import ToolRegistry


# =============================================================================
# Chat Model Management
# =============================================================================

_chat_model: ChatModel | None = None


def set_chat_model(chat_model: ChatModel | None) -> None:
    """Set the chat model instance. Called at startup and by tests."""
    global _chat_model
    _chat_model = chat_model


def get_chat_model() -> ChatModel | None:
    """Get the current chat model instance."""
    return _chat_model


# =============================================================================
# Tool Registry Management
# =============================================================================

_tool_registry: ToolRegistry | None = None


def set_tool_registry(registry: ToolRegistry | None) -> None:
    """Set the tool registry instance."""
    global _tool_registry
    _tool_registry = registry


def get_tool_registry() -> ToolRegistry:
    """Get the tool registry, creating an empty one if necessary."""
    global _tool_registry
    if _tool_registry is None:
        _tool_registry = ToolRegistry()
    return _tool_registry
