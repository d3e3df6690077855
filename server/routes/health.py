"""
Health check endpoint.
"""

from fastapi import APIRouter

from ..state import get_chat_model


router = APIRouter()


@router.get("/api/health")
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok", "chat_model_configured": get_chat_model() is not None}
