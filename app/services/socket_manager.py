"""
Change notifications over WebSocket.

Clients keep one socket open per signed-in user. Whenever a chat, message,
notification or connection request touching that user changes, the server
pushes a small event and the client refetches what it displays.
"""
import logging
from collections import defaultdict
from typing import Dict, Iterable, List

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    def __init__(self):
        self.active_connections: Dict[str, List[WebSocket]] = defaultdict(list)

    async def connect(self, user_id: str, websocket: WebSocket):
        await websocket.accept()
        self.active_connections[user_id].append(websocket)
        logger.debug(f"Socket connected: user_id={user_id}, sockets={len(self.active_connections[user_id])}")

    def disconnect(self, user_id: str, websocket: WebSocket):
        sockets = self.active_connections.get(user_id, [])
        if websocket in sockets:
            sockets.remove(websocket)
        if not sockets:
            self.active_connections.pop(user_id, None)

    def is_online(self, user_id: str) -> bool:
        return bool(self.active_connections.get(user_id))

    async def publish(self, user_ids: Iterable[str], event: dict):
        """Send `event` to every socket of every listed user. Dead sockets are dropped."""
        for user_id in set(user_ids):
            for websocket in list(self.active_connections.get(user_id, [])):
                try:
                    await websocket.send_json(event)
                except Exception as e:
                    logger.warning(f"Dropping socket for user_id={user_id}: {e}")
                    self.disconnect(user_id, websocket)


manager = ConnectionManager()
