"""
Health Routes - Health check endpoints
"""
from fastapi import APIRouter

from habit_helper.utils.session_store import get_active_session_count

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Health check endpoint with the number of in-memory sessions"""
    return {"status": "ok", "message": "Server is alive", "active_sessions": get_active_session_count()}
