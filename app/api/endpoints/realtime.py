import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from app.models.common import NotificationEvent
from app.services.notification_service import notifier

router = APIRouter()
logger = logging.getLogger(__name__)

# Client-originated events rebroadcast to everyone under the server-side name
RELAYED_EVENTS = {
    "attendance-update": "attendance-changed",
    "leave-update": "leave-changed",
    "profile-update": "profile-changed",
    "regularization-update": "regularization-changed",
}

@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """Real-time change notifications; no replay for late subscribers"""
    await notifier.connect(websocket)

    try:
        await websocket.send_json({"event": "connected", "data": {"subscribers": len(notifier.active_connections)}})

        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except ValueError:
                logger.warning("Ignoring malformed frame from real-time client")
                continue

            event = message.get("event") if isinstance(message, dict) else None
            if event in RELAYED_EVENTS:
                data = message.get("data")
                await notifier.broadcast(NotificationEvent(
                    event=RELAYED_EVENTS[event],
                    data=data if isinstance(data, dict) else {"value": data},
                ))
            else:
                logger.debug(f"Ignoring unknown client event: {event}")
    except WebSocketDisconnect:
        pass
    finally:
        notifier.disconnect(websocket)
