"""
Push subscription management
Registers and deactivates browser push endpoints for a user
"""
import logging
from typing import Any

from habit_helper.core.config import settings
from habit_helper.core.exceptions import (
    DatabaseError,
    PushConfigurationError,
    PushPermissionError,
    PushUnsupportedError
)
from habit_helper.models.push import PushSubscribeRequest, PushStatusResponse
from habit_helper.services.habits import repository

logger = logging.getLogger(__name__)


def get_status(user_id: str, store: Any = repository) -> bool:
    """
    Whether the user has an active push endpoint

    Raises:
        DatabaseError: If the store query fails
    """
    return store.get_active_push_subscription(user_id) is not None


def get_status_or_default(user_id: str, store: Any = repository) -> bool:
    """Actual subscription status for error responses; False when the store is unreachable"""
    try:
        return get_status(user_id, store)
    except DatabaseError as e:
        logger.warning(f"[PUSH] Could not read subscription status for {user_id}: {e}")
        return False


def subscribe(user_id: str, request: PushSubscribeRequest, store: Any = repository) -> PushStatusResponse:
    """
    Register a push endpoint for the user

    Raises:
        PushConfigurationError: If no VAPID public key is configured
        PushPermissionError: If the user did not grant notification permission
        PushUnsupportedError: If the browser produced no subscription
        DatabaseError: If storing the subscription fails
    """
    if not settings.VAPID_PUBLIC_KEY:
        raise PushConfigurationError("Push notifications need a VAPID public key to be configured.")

    if request.permission != "granted":
        raise PushPermissionError(
            "Notification permission was denied. Allow notifications in your browser settings."
        )

    if request.subscription is None:
        raise PushUnsupportedError("This browser does not support push notifications.")

    store.upsert_push_subscription(user_id, request.subscription.model_dump(by_alias=True))
    logger.info(f"[PUSH] Subscription stored for {user_id}")
    return PushStatusResponse(enabled=True, message="Notifications are on.")


def unsubscribe(user_id: str, store: Any = repository) -> PushStatusResponse:
    """
    Mark the user's push endpoints inactive

    Raises:
        DatabaseError: If the update fails
    """
    store.deactivate_push_subscriptions(user_id)
    logger.info(f"[PUSH] Subscriptions deactivated for {user_id}")
    return PushStatusResponse(enabled=False)
