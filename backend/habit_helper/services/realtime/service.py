"""
Realtime Service - change feed lifecycle management
"""
import logging

from habit_helper.core.dependencies import get_async_supabase_client
from .feed import ChangeFeed, refresh_sessions_on_change

logger = logging.getLogger(__name__)

# Global feed instance
feed = None


async def start_change_feed() -> None:
    """Connect to the store's realtime channels"""
    global feed

    if feed is not None:
        logger.warning("Change feed already running")
        return

    client = await get_async_supabase_client()
    new_feed = ChangeFeed(refresh_sessions_on_change)
    await new_feed.start(client)
    feed = new_feed
    logger.info("Change feed started")


async def stop_change_feed() -> None:
    """Close the realtime channels"""
    global feed

    if feed is not None:
        await feed.stop()
        feed = None
        logger.info("Change feed stopped")
