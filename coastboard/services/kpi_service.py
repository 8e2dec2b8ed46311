from datetime import timedelta
from typing import Any, Dict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core.clock import days_ago, local_date_key, local_today_start, local_tomorrow_start
from coastboard.core.database import utcnow
from coastboard.models.task import Task

from . import activity_service, time_service


def _streak(completion_days: set, today_start) -> int:
    """Consecutive days with a completion, ending today or yesterday."""
    day = today_start
    if local_date_key(day) not in completion_days:
        day -= timedelta(days=1)
    streak = 0
    while local_date_key(day) in completion_days:
        streak += 1
        day -= timedelta(days=1)
    return streak


async def get_user_kpis(db: AsyncSession, user_id: int) -> Dict[str, Any]:
    now = utcnow()
    today_start = local_today_start(now)
    tomorrow_start = local_tomorrow_start(now)
    week_start = today_start - timedelta(days=7)

    result = await db.execute(select(Task))
    tasks = [task for task in result.scalars().all() if user_id in (task.assignee_ids or [])]
    done = [task for task in tasks if task.status == "done"]

    completions = await activity_service.get_actions_since(db, user_id, "task_completed", days_ago(30, now))
    completion_days = {local_date_key(activity.created_at) for activity in completions}

    return {
        "tasks_done_today": sum(1 for task in done if today_start <= task.updated_at < tomorrow_start),
        "tasks_done_this_week": sum(1 for task in done if task.updated_at >= week_start),
        "completion_rate": round(len(done) / len(tasks) * 100) if tasks else 0,
        "total_time_spent_today": await time_service.get_time_logged_since(
            db, user_id, today_start, tomorrow_start
        ),
        "overdue_tasks_count": sum(
            1 for task in tasks
            if task.status != "done" and task.deadline is not None and task.deadline < now
        ),
        "active_streak": _streak(completion_days, today_start),
    }
