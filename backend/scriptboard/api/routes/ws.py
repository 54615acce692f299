import logging
from datetime import datetime

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from scriptboard.api.dependencies import get_channel
from scriptboard.schemas.realtime import ConnectionMessage
from scriptboard.services.realtime import RealtimeChannel

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


@router.websocket("/ws/projects/{project_id}")
async def project_updates(
    websocket: WebSocket,
    project_id: int,
    channel: RealtimeChannel = Depends(get_channel),
):
    """
    Pushes a script_data_updated message whenever the project's snapshot is
    stored. Anything the client sends is ignored; it only keeps the socket open.
    """
    manager = channel.manager
    await manager.connect(websocket, project_id)

    welcome = ConnectionMessage(status="connected", project_id=project_id, timestamp=datetime.utcnow())
    await websocket.send_text(welcome.model_dump_json(by_alias=True))

    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(websocket, project_id)
