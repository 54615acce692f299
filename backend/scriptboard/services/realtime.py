import asyncio
import json
import logging
from typing import Any, Callable, Dict, Optional, Set

from fastapi import WebSocket
from redis import Redis
from redis.exceptions import RedisError

from scriptboard.core.redis import get_redis_client
from scriptboard.schemas.realtime import ScriptDataEvent

logger = logging.getLogger(__name__)

CHANNEL_PREFIX = "scriptboard:project:"


def project_channel(project_id: int) -> str:
    return f"{CHANNEL_PREFIX}{project_id}"


class ConnectionManager:
    """Websocket connections grouped by project."""

    def __init__(self):
        self.subscriptions: Dict[int, Set[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, project_id: int) -> None:
        await websocket.accept()
        self.subscriptions.setdefault(project_id, set()).add(websocket)
        logger.info(
            "[Realtime] websocket joined project %s (%d listening)",
            project_id, len(self.subscriptions[project_id]),
        )

    def disconnect(self, websocket: WebSocket, project_id: int) -> None:
        conns = self.subscriptions.get(project_id)
        if not conns:
            return
        conns.discard(websocket)
        if not conns:
            del self.subscriptions[project_id]
        logger.info("[Realtime] websocket left project %s", project_id)

    def count(self, project_id: int) -> int:
        return len(self.subscriptions.get(project_id, ()))

    async def broadcast_json(self, project_id: int, data: Dict[str, Any]) -> int:
        message = json.dumps(data)
        dead = set()
        sent = 0

        for conn in list(self.subscriptions.get(project_id, ())):
            try:
                await conn.send_text(message)
                sent += 1
            except Exception as e:
                logger.warning("[Realtime] dropping websocket for project %s: %s", project_id, e)
                dead.add(conn)

        for conn in dead:
            self.disconnect(conn, project_id)

        return sent


class RealtimeChannel:
    """
    Fan-out of script data events: local websockets first, then redis for
    other API processes and editor subscribers. A failed publish is logged
    and never fails the write that triggered it.
    """

    def __init__(
        self,
        manager: Optional[ConnectionManager] = None,
        redis_factory: Callable[[], Optional[Redis]] = get_redis_client,
    ):
        self.manager = manager or ConnectionManager()
        self._redis_factory = redis_factory

    async def publish(self, event: ScriptDataEvent) -> None:
        data = event.model_dump(by_alias=True)
        await self.manager.broadcast_json(event.project_id, data)

        client = self._redis_factory()
        if client is None:
            return

        try:
            await asyncio.to_thread(client.publish, project_channel(event.project_id), json.dumps(data))
        except RedisError as e:
            logger.warning("[Realtime] redis publish for project %s failed: %s", event.project_id, e)


channel = RealtimeChannel()
