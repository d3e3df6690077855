"""
Model provider capability built on Pydantic AI.

Exports the ChatModel implementation used by the server.
"""
from .messages import to_model_messages
from .models import build_model
from .provider import PydanticAIChatModel, PydanticAISegment

__all__ = [
    "PydanticAIChatModel",
    "PydanticAISegment",
    "build_model",
    "to_model_messages",
]
