"""
Business logic services
"""
from . import habits
from . import chat
from . import notifications
from . import realtime
from . import scheduler

__all__ = [
    'habits',
    'chat',
    'notifications',
    'realtime',
    'scheduler'
]
