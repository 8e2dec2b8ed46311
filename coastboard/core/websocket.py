import logging
from typing import Dict, List

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    def __init__(self):
        # a user may have several tabs open
        self.connections: Dict[int, List[WebSocket]] = {}

    async def connect(self, user_id: int, websocket: WebSocket):
        await websocket.accept()
        self.connections.setdefault(user_id, []).append(websocket)

    def disconnect(self, user_id: int, websocket: WebSocket):
        sockets = self.connections.get(user_id, [])
        if websocket in sockets:
            sockets.remove(websocket)
        if not sockets:
            self.connections.pop(user_id, None)

    async def send_to_user(self, user_id: int, message: dict) -> bool:
        sockets = list(self.connections.get(user_id, []))
        for connection in sockets:
            try:
                await connection.send_json(message)
            except RuntimeError:
                logger.info("Dropping closed websocket for user %s", user_id)
                self.disconnect(user_id, connection)
        return bool(sockets)


manager = ConnectionManager()
