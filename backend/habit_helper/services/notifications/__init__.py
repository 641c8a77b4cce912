"""
Notifications module
Push subscription management and reminder payloads
"""
from . import push
from .service import (
    NotificationService,
    format_slot_reminder
)

__all__ = [
    'push',
    'NotificationService',
    'format_slot_reminder'
]
