from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core.auth import SessionUser, require_auth
from coastboard.core.results import action, dump, dump_list
from coastboard.schemas.notification import NotificationResponse
from coastboard.services import notification_service


@action("Failed to fetch notifications")
async def get_notifications(db: AsyncSession, caller: Optional[SessionUser], unread_only: bool = False):
    caller = require_auth(caller)
    notifications = await notification_service.get_user_notifications(db, caller.id, unread_only)
    return dump_list(NotificationResponse, notifications)


@action("Failed to mark notification as read")
async def mark_as_read(db: AsyncSession, caller: Optional[SessionUser], notification_id: int):
    caller = require_auth(caller)
    return dump(NotificationResponse, await notification_service.mark_as_read(db, caller.id, notification_id))


@action("Failed to mark notifications as read")
async def mark_all_as_read(db: AsyncSession, caller: Optional[SessionUser]):
    caller = require_auth(caller)
    return {"updated": await notification_service.mark_all_as_read(db, caller.id)}
