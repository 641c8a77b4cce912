"""
Notifications Service - Reminder payloads and delivery hand-off
Delivery itself is done by an external push service behind the send callback
"""
import logging
from typing import Optional, Dict, Any, Callable

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Habit Helper"
DEFAULT_URL = "/"


# ============================================================================
# MESSAGE FORMATTING
# ============================================================================

def format_slot_reminder(habit_name: str, slot: Optional[str] = None) -> Dict[str, Any]:
    """
    Format the push payload for a habit that is ready to be logged

    Args:
        habit_name: The habit name
        slot: The open HH:MM slot, if the habit has time slots

    Returns:
        Payload with title, body and url (the keys the service worker reads)
    """
    if slot:
        body = f"It's time for {habit_name} ({slot}). Tap to log how it went."
    else:
        body = f"Don't forget {habit_name} today."
    return {"title": DEFAULT_TITLE, "body": body, "url": DEFAULT_URL}


# ============================================================================
# NOTIFICATION SENDING
# ============================================================================

class NotificationService:
    """
    Service for handing reminder payloads to a delivery channel
    """

    def __init__(self, send_callback: Optional[Callable[[str, Dict[str, Any]], bool]] = None):
        """
        Initialize notification service

        Args:
            send_callback: Optional callback for delivering payloads
                          Should have signature: callback(user_id: str, payload: dict) -> bool
        """
        self.send_callback = send_callback

    def send_notification(self, user_id: str, payload: Dict[str, Any]) -> bool:
        """
        Send a payload to a user

        Returns:
            True if sent successfully, False otherwise
        """
        if not self.send_callback:
            logger.info(f"No send callback configured - would have sent to {user_id}: {payload['body']}")
            return False

        try:
            result = self.send_callback(user_id, payload)
            if result:
                logger.info(f"Notification sent to {user_id}")
            else:
                logger.warning("Notification send callback returned False")
            return result
        except Exception as e:
            logger.error(f"Failed to send notification to {user_id}: {e}")
            return False

    def send_reminder(self, user_id: str, habit_name: str, slot: Optional[str] = None) -> bool:
        """
        Send a reminder that a habit slot is open

        Returns:
            True if sent successfully, False otherwise
        """
        return self.send_notification(user_id, format_slot_reminder(habit_name, slot))
