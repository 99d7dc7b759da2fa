"""
In-process fan-out of row changes to WebSocket subscribers, keyed by session.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Set

from fastapi import WebSocket

from edusphere.schemas.realtime import ChangeEvent

logger = logging.getLogger(__name__)

# Tables whose changes are broadcast to session subscribers
BROADCAST_TABLES = frozenset({"live_sessions", "session_participants", "chat_messages"})


class ChangeSubscriber:
    def __init__(self, websocket: WebSocket, user_id: str, tables: Optional[Iterable[str]] = None):
        self.websocket = websocket
        self.user_id = user_id
        self.tables: Set[str] = set(tables) if tables else set(BROADCAST_TABLES)

    def wants(self, table: str) -> bool:
        return table in self.tables


class ChangeHub:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._subscribers: Dict[str, List[ChangeSubscriber]] = {}

    async def add(self, session_id: str, subscriber: ChangeSubscriber) -> None:
        async with self._lock:
            self._subscribers.setdefault(session_id, []).append(subscriber)

    async def remove(self, session_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            subscribers = self._subscribers.get(session_id, [])
            self._subscribers[session_id] = [s for s in subscribers if s.websocket is not websocket]
            if not self._subscribers[session_id]:
                self._subscribers.pop(session_id, None)

    async def list(self, session_id: str) -> List[ChangeSubscriber]:
        async with self._lock:
            return list(self._subscribers.get(session_id, []))

    async def publish(self, table: str, event: str, session_id: str, record: Dict[str, Any]) -> int:
        """
        Deliver one change to every subscriber of the session that wants the table.
        Subscribers whose socket fails are dropped. Returns the delivery count.
        """
        subscribers = await self.list(session_id)
        if not subscribers:
            return 0

        payload = ChangeEvent(
            table=table,
            event=event,
            session_id=session_id,
            record=record,
            commit_timestamp=datetime.now(timezone.utc),
        ).model_dump(mode="json")

        delivered = 0
        for subscriber in subscribers:
            if not subscriber.wants(table):
                continue
            try:
                await subscriber.websocket.send_json(payload)
                delivered += 1
            except Exception as e:
                logger.info(f"Dropping subscriber {subscriber.user_id} of session {session_id}: {e}")
                await self.remove(session_id, subscriber.websocket)
        return delivered


change_hub = ChangeHub()
