from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.models.task import Task
from coastboard.models.user import User


async def team_context(db: AsyncSession, member_ids: Optional[List[int]] = None) -> List[Dict[str, Any]]:
    """Team members with their expertise and count of open tasks."""
    query = select(User).order_by(User.id)
    if member_ids:
        query = query.where(User.id.in_(member_ids))
    users = (await db.execute(query)).scalars().all()

    open_tasks = (await db.execute(select(Task.assignee_ids).where(Task.status != "done"))).scalars().all()
    counts: Dict[int, int] = {}
    for assignee_ids in open_tasks:
        for user_id in assignee_ids or []:
            counts[user_id] = counts.get(user_id, 0) + 1

    return [
        {
            "id": user.id,
            "name": user.name,
            "role": user.role,
            "expertise": user.expertise or [],
            "open_tasks": counts.get(user.id, 0),
        }
        for user in users
    ]


def task_summary(task: Task) -> Dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "status": task.status,
        "priority": task.priority,
        "deadline": task.deadline.isoformat() if task.deadline else None,
        "assignee_ids": task.assignee_ids or [],
    }
