import logging
from typing import Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.actions import notification_actions
from coastboard.core.auth import SessionUser, get_session_user
from coastboard.core.database import get_db
from coastboard.core.security import decode_access_token
from coastboard.core.websocket import manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["notifications"])


@router.get("/notifications")
async def get_notifications(
    unread_only: bool = False,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await notification_actions.get_notifications(db, caller, unread_only)


@router.post("/notifications/{notification_id}/read")
async def mark_as_read(
    notification_id: int,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await notification_actions.mark_as_read(db, caller, notification_id)


@router.post("/notifications/read-all")
async def mark_all_as_read(
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await notification_actions.mark_all_as_read(db, caller)


@router.websocket("/ws/notifications")
async def notifications_socket(websocket: WebSocket, token: str):
    payload = decode_access_token(token)
    if not payload or payload.get("sub") is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    user_id = int(payload["sub"])
    await manager.connect(user_id, websocket)
    logger.info("User %s subscribed to notifications", user_id)
    try:
        while True:
            # clients only listen; anything they send is a keepalive
            await websocket.receive_text()
    except WebSocketDisconnect:
        manager.disconnect(user_id, websocket)
        logger.info("User %s unsubscribed from notifications", user_id)
