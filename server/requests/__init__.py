"""
HTTP request models for the API.

These are Pydantic models for validating and parsing API requests.
"""

from .chat_request import ChatRequest

__all__ = [
    "ChatRequest",
]
