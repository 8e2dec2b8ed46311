import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core import events
from coastboard.core.errors import NotFound
from coastboard.models.notification import Notification
from coastboard.schemas.notification import NotificationResponse

logger = logging.getLogger(__name__)

LIST_LIMIT = 50


async def create_notification(
    db: AsyncSession,
    user_id: int,
    type: str,
    title: str,
    message: str,
    metadata: Optional[Dict[str, Any]] = None,
) -> Notification:
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        meta=metadata or {},
    )
    db.add(notification)
    await db.commit()
    await db.refresh(notification)

    payload = NotificationResponse.model_validate(notification).model_dump(mode="json")
    await events.publish_user_event(user_id, "notification:new", payload)
    return notification


async def notify(
    db: AsyncSession,
    user_id: int,
    type: str,
    title: str,
    message: str,
    metadata: Optional[Dict[str, Any]] = None,
) -> Optional[Notification]:
    """Best-effort notification; failures are logged and never raised."""
    try:
        return await create_notification(db, user_id, type, title, message, metadata)
    except Exception:
        await db.rollback()
        logger.exception("Failed to notify user %s (%s)", user_id, type)
        return None


async def get_user_notifications(
    db: AsyncSession, user_id: int, unread_only: bool = False
) -> List[Notification]:
    query = select(Notification).where(Notification.user_id == user_id)
    if unread_only:
        query = query.where(Notification.read.is_(False))
    query = query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(LIST_LIMIT)
    result = await db.execute(query)
    return list(result.scalars().all())


async def mark_as_read(db: AsyncSession, user_id: int, notification_id: int) -> Notification:
    result = await db.execute(
        select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == user_id,
            Notification.read.is_(False),
        )
    )
    notification = result.scalar_one_or_none()
    if notification is None:
        raise NotFound("Notification not found or already read")
    notification.read = True
    await db.commit()
    await db.refresh(notification)
    return notification


async def mark_all_as_read(db: AsyncSession, user_id: int) -> int:
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.read.is_(False))
        .values(read=True)
    )
    await db.commit()
    return result.rowcount


async def get_unread_count(db: AsyncSession, user_id: int) -> int:
    notifications = await get_user_notifications(db, user_id, unread_only=True)
    return len(notifications)


async def delete_read(db: AsyncSession) -> int:
    result = await db.execute(delete(Notification).where(Notification.read.is_(True)))
    await db.commit()
    return result.rowcount
