"""
Push Routes - Push notification subscription endpoints
"""
import logging
from fastapi import APIRouter, Depends, HTTPException

from habit_helper.core.config import settings
from habit_helper.core.dependencies import get_current_user_id
from habit_helper.core.exceptions import DatabaseError, PushSubscriptionError
from habit_helper.models.push import PushSubscribeRequest, PushStatusResponse
from habit_helper.services.notifications import push

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/push", tags=["push"])


def _failure(user_id: str, status_code: int, message: str) -> HTTPException:
    """Error carrying the actual subscription state so the toggle can revert"""
    return HTTPException(
        status_code=status_code,
        detail={"message": message, "enabled": push.get_status_or_default(user_id)}
    )


@router.get("/vapid-key")
def get_vapid_key():
    """Public application server key for PushManager.subscribe"""
    if not settings.VAPID_PUBLIC_KEY:
        raise HTTPException(status_code=503, detail="Push notifications are not configured")
    return {"public_key": settings.VAPID_PUBLIC_KEY}


@router.get("/status", response_model=PushStatusResponse)
def get_push_status(user_id: str = Depends(get_current_user_id)):
    """Whether the caller has an active push endpoint"""
    try:
        return PushStatusResponse(enabled=push.get_status(user_id))
    except DatabaseError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/subscribe", response_model=PushStatusResponse)
def subscribe(request: PushSubscribeRequest, user_id: str = Depends(get_current_user_id)):
    """Register the caller's browser push endpoint"""
    try:
        return push.subscribe(user_id, request)
    except PushSubscriptionError as e:
        logger.warning(f"[PUSH] Subscribe rejected for {user_id}: {e}")
        raise _failure(user_id, 400, str(e))
    except DatabaseError as e:
        raise _failure(user_id, 500, f"Could not change notification settings: {e}")


@router.post("/unsubscribe", response_model=PushStatusResponse)
def unsubscribe(user_id: str = Depends(get_current_user_id)):
    """Mark the caller's push endpoints inactive"""
    try:
        return push.unsubscribe(user_id)
    except DatabaseError as e:
        raise _failure(user_id, 500, f"Could not change notification settings: {e}")
