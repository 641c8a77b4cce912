"""
Realtime module
Store change feed that triggers session re-fetches
"""
from .feed import ChangeFeed, refresh_sessions_on_change
from .service import start_change_feed, stop_change_feed

__all__ = ['ChangeFeed', 'refresh_sessions_on_change', 'start_change_feed', 'stop_change_feed']
