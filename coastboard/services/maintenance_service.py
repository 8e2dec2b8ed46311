import logging
from typing import Dict

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core.clock import days_ago
from coastboard.models.comment import Comment
from coastboard.models.task import Task
from coastboard.models.timelog import TimeLog

from . import activity_service, notification_service

logger = logging.getLogger(__name__)

STALE_DONE_DAYS = 7


async def clear_read_notifications(db: AsyncSession) -> int:
    return await notification_service.delete_read(db)


async def clear_all_activity(db: AsyncSession) -> int:
    return await activity_service.delete_all(db)


async def clear_stale_done_tasks(db: AsyncSession) -> int:
    stale = select(Task.id).where(Task.status == "done", Task.updated_at < days_ago(STALE_DONE_DAYS))
    await db.execute(delete(Comment).where(Comment.task_id.in_(stale)))
    await db.execute(delete(TimeLog).where(TimeLog.task_id.in_(stale)))
    result = await db.execute(
        delete(Task).where(Task.status == "done", Task.updated_at < days_ago(STALE_DONE_DAYS))
    )
    await db.commit()
    return result.rowcount


async def daily_cleanup(db: AsyncSession) -> Dict[str, int]:
    results = {
        "notifications": await clear_read_notifications(db),
        "activities": await clear_all_activity(db),
        "stale_tasks": await clear_stale_done_tasks(db),
    }
    logger.info("Daily cleanup: %s", results)
    return results
