"""
Chat streaming API server.

Serves the chat pipeline over HTTP, with responses streamed as
server-sent events.
"""

from .app import app
from .routes import register_routes
from .state import get_chat_model, get_tool_registry, set_chat_model, set_tool_registry

# Register all routes with the app
register_routes(app)

__all__ = ["app", "set_chat_model", "get_chat_model", "set_tool_registry", "get_tool_registry"]
