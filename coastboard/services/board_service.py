import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core.auth import SessionUser, require_admin
from coastboard.core.clock import utc_day_start
from coastboard.core.errors import Forbidden
from coastboard.models.board import DailyBoard
from coastboard.models.task import Task
from coastboard.schemas.task import BoardTaskCreate, TaskResponse

from . import activity_service, notification_service, task_service
from .utils import unique_ids

logger = logging.getLogger(__name__)


async def get_or_create_today_board(db: AsyncSession, user_id: int) -> DailyBoard:
    """Today's board (UTC day). Safe to call concurrently: the date is unique."""
    today = utc_day_start()
    result = await db.execute(select(DailyBoard).where(DailyBoard.date == today))
    board = result.scalar_one_or_none()
    if board:
        return board

    board = DailyBoard(date=today, created_by=user_id)
    db.add(board)
    try:
        await db.commit()
    except IntegrityError:
        # another request created it first
        await db.rollback()
        result = await db.execute(select(DailyBoard).where(DailyBoard.date == today))
        return result.scalar_one()
    await db.refresh(board)
    logger.info("Created daily board for %s", today.date())
    return board


async def get_recent_boards(db: AsyncSession, limit: int = 7) -> List[DailyBoard]:
    result = await db.execute(select(DailyBoard).order_by(DailyBoard.date.desc()).limit(limit))
    return list(result.scalars().all())


def can_see(caller: SessionUser, task: Task) -> bool:
    if caller.is_admin or task.visibility == "general":
        return True
    return caller.id in (task.assignee_ids or [])


async def get_board_tasks(db: AsyncSession, caller: SessionUser, board_id: int) -> List[Task]:
    result = await db.execute(
        select(Task).where(Task.daily_board_id == board_id).order_by(Task.created_at.desc(), Task.id.desc())
    )
    return [task for task in result.scalars().all() if can_see(caller, task)]


async def add_task_to_board(
    db: AsyncSession,
    caller: SessionUser,
    data: BoardTaskCreate,
    board_id: Optional[int] = None,
) -> TaskResponse:
    require_admin(caller)
    await task_service.get_project_or_404(db, data.project_id)
    if board_id is None:
        board_id = (await get_or_create_today_board(db, caller.id)).id

    task = Task(
        title=data.title,
        description=data.description,
        project_id=data.project_id,
        status="todo",
        priority=data.priority.value,
        visibility=data.visibility.value,
        assignee_ids=unique_ids(data.assignee_ids),
        assigned_by=caller.id,
        deadline=data.deadline,
        daily_board_id=board_id,
    )
    db.add(task)
    await db.commit()
    await db.refresh(task)

    response = TaskResponse.model_validate(task)
    title = response.title

    for user_id in response.assignee_ids:
        if user_id == caller.id:
            continue
        await notification_service.notify(
            db,
            user_id,
            "task_assigned",
            "New task assigned to you",
            f'You\'ve been assigned: "{title}" on today\'s board',
            {"task_id": response.id, "project_id": response.project_id, "triggered_by": caller.id},
        )

    await activity_service.log_activity(
        db,
        caller.id,
        "task_created",
        f'added "{title}" to daily board',
        project_id=response.project_id,
        metadata={"task_id": response.id},
    )
    return response


async def toggle_board_task_done(db: AsyncSession, caller: SessionUser, task_id: int) -> TaskResponse:
    task = await task_service.get_task_or_404(db, task_id)
    if not caller.is_admin and caller.id not in (task.assignee_ids or []):
        raise Forbidden("Only assigned members and admins can mark tasks as done")

    new_status = "todo" if task.status == "done" else "done"
    task = await task_service.compare_and_set(db, task, {"status": new_status})

    response = TaskResponse.model_validate(task)
    if new_status == "done":
        await activity_service.log_activity(
            db,
            caller.id,
            "task_completed",
            f'completed "{response.title}"',
            project_id=response.project_id,
            metadata={"task_id": response.id},
        )
    return response


async def delete_board_task(db: AsyncSession, caller: SessionUser, task_id: int) -> None:
    await task_service.delete_task(db, caller, task_id)
