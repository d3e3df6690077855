"""
Tool server availability endpoint.
"""

from fastapi import APIRouter

from ..state import get_tool_registry

router = APIRouter()


@router.get("/api/mcp-check")
async def check_mcp_servers() -> dict:
    """Get registered tools grouped by the server that provides them."""
    return {"servers": get_tool_registry().availability()}
