"""
Realtime change feed
Listens to store table changes and re-fetches the affected sessions
"""
import asyncio
from functools import partial
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Set
import logging

from habit_helper.core.constants import HABIT_TABLE, RECORD_TABLE
from habit_helper.utils import session_store

logger = logging.getLogger(__name__)

ChangeHandler = Callable[[str, Dict[str, Any]], Awaitable[None]]


class ChangeFeed:
    """
    Subscribes to postgres changes on the watched tables.

    Every event triggers the handler; there is no incremental merge.
    """

    def __init__(self, on_change: ChangeHandler, tables: Iterable[str] = (HABIT_TABLE, RECORD_TABLE)):
        self.on_change = on_change
        self.tables = tuple(tables)
        self.client = None
        self.channels: List[Any] = []
        self._tasks: Set[asyncio.Task] = set()

    async def start(self, client) -> None:
        """
        Open one channel per watched table

        Args:
            client: Supabase AsyncClient
        """
        self.client = client
        for table in self.tables:
            channel = client.channel(f"public-{table}-changes")
            channel.on_postgres_changes(
                "*",
                schema="public",
                table=table,
                callback=partial(self.handle_event, table)
            )
            await channel.subscribe()
            self.channels.append(channel)
            logger.info(f"[REALTIME] Subscribed to {table}")

    def handle_event(self, table: str, payload: Dict[str, Any]) -> None:
        """Schedule the change handler on the running loop"""
        logger.info(f"[REALTIME] Change detected on {table}")
        task = asyncio.get_running_loop().create_task(self.on_change(table, payload))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def stop(self) -> None:
        for channel in self.channels:
            try:
                await self.client.remove_channel(channel)
            except Exception as e:
                logger.warning(f"[REALTIME] Error removing channel: {e}")
        self.channels = []
        for task in list(self._tasks):
            task.cancel()


def _payload_user_id(payload: Dict[str, Any]) -> Optional[str]:
    """Find the owning user id in a change payload, if present"""
    data = payload.get("data", payload) if isinstance(payload, dict) else {}
    for key in ("record", "old_record"):
        row = data.get(key) or {}
        if isinstance(row, dict) and row.get("user_id"):
            return str(row["user_id"])
    return None


async def refresh_sessions_on_change(table: str, payload: Dict[str, Any]) -> None:
    """
    Re-fetch everything for the sessions a change may affect.
    Changes that name their owner refresh only that user's session.
    """
    user_id = _payload_user_id(payload)
    if user_id is not None:
        session = session_store.get_session(user_id)
        targets = [session] if session is not None else []
    else:
        targets = session_store.all_sessions()

    if targets:
        await asyncio.gather(*(session.refresh() for session in targets))
