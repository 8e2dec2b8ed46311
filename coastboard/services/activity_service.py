import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.models.activity import Activity
from coastboard.models.user import User
from coastboard.schemas.activity import ActivityResponse

logger = logging.getLogger(__name__)


async def log_activity(
    db: AsyncSession,
    user_id: int,
    action: str,
    description: str,
    project_id: Optional[int] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Optional[Activity]:
    """Append to the activity feed. Never raises: a failed log must not
    fail the operation that produced it."""
    activity = Activity(
        user_id=user_id,
        project_id=project_id,
        action=action,
        description=description,
        meta=metadata or {},
    )
    try:
        db.add(activity)
        await db.commit()
        await db.refresh(activity)
    except Exception:
        await db.rollback()
        logger.exception("Failed to log %s activity for user %s", action, user_id)
        return None
    return activity


async def _with_user_names(db: AsyncSession, query) -> List[ActivityResponse]:
    result = await db.execute(query.outerjoin(User, User.id == Activity.user_id).add_columns(User.name))
    feed = []
    for activity, user_name in result.all():
        entry = ActivityResponse.model_validate(activity)
        entry.user_name = user_name
        feed.append(entry)
    return feed


async def get_recent_activity(db: AsyncSession, limit: int = 20) -> List[ActivityResponse]:
    query = select(Activity).order_by(Activity.created_at.desc(), Activity.id.desc()).limit(limit)
    return await _with_user_names(db, query)


async def get_project_activity(
    db: AsyncSession, project_id: int, limit: int = 20
) -> List[ActivityResponse]:
    query = (
        select(Activity)
        .where(Activity.project_id == project_id)
        .order_by(Activity.created_at.desc(), Activity.id.desc())
        .limit(limit)
    )
    return await _with_user_names(db, query)


async def get_actions_since(db: AsyncSession, user_id: int, action: str, since) -> List[Activity]:
    result = await db.execute(
        select(Activity).where(
            Activity.user_id == user_id,
            Activity.action == action,
            Activity.created_at >= since,
        )
    )
    return list(result.scalars().all())


async def delete_all(db: AsyncSession) -> int:
    result = await db.execute(delete(Activity))
    await db.commit()
    return result.rowcount
