import asyncio
import logging
from typing import List, Optional

from fastapi import WebSocket
from app.models.common import NotificationEvent # Import NotificationEvent

logger = logging.getLogger(__name__)

class NotificationSink:
    """Destination for change notifications; delivery is fire-and-forget"""

    def publish(self, event: NotificationEvent) -> None:
        raise NotImplementedError

class WebSocketNotifier(NotificationSink):
    """Broadcasts events to every connected WebSocket client"""

    def __init__(self):
        self.active_connections: List[WebSocket] = []
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self._loop = asyncio.get_running_loop()
        self.active_connections.append(websocket)
        logger.info(f"Client connected ({len(self.active_connections)} active)")

    def disconnect(self, websocket: WebSocket):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
            logger.info(f"Client disconnected ({len(self.active_connections)} active)")

    async def broadcast(self, event: NotificationEvent):
        message = event.model_dump(mode="json")
        for connection in list(self.active_connections):
            try:
                await connection.send_json(message)
            except Exception as e:
                logger.warning(f"Dropping client after failed send of '{event.event}': {e}")
                self.disconnect(connection)

    def publish(self, event: NotificationEvent) -> None:
        # Callable from request handlers and worker threads alike
        if not self.active_connections or self._loop is None or self._loop.is_closed():
            logger.debug(f"No subscribers for '{event.event}'")
            return
        asyncio.run_coroutine_threadsafe(self.broadcast(event), self._loop)

notifier = WebSocketNotifier()

def get_notifier() -> NotificationSink:
    return notifier
