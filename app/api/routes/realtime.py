import logging

from fastapi import APIRouter, HTTPException, Query, WebSocket, WebSocketDisconnect, status

from app.core.auth_dependency import get_user_id_from_token
from app.services.socket_manager import manager

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================
# ✅ CHANGE CHANNEL (one socket per signed-in user)
# ============================================

@router.websocket("/ws")
async def change_channel(websocket: WebSocket, token: str = Query(...)):
    try:
        user_id = get_user_id_from_token(token)
    except HTTPException:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await manager.connect(user_id, websocket)
    await websocket.send_json({"type": "ready"})

    try:
        while True:
            # Clients only send keepalives
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        manager.disconnect(user_id, websocket)
        logger.debug(f"Socket disconnected: user_id={user_id}")
