import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core.auth import SessionUser, require_admin
from coastboard.core.clock import local_today_start, local_tomorrow_start
from coastboard.core.database import utcnow
from coastboard.core.errors import Conflict, Forbidden, NotFound
from coastboard.models.comment import Comment
from coastboard.models.project import Project
from coastboard.models.task import Task
from coastboard.models.timelog import TimeLog
from coastboard.schemas.task import TaskCreate, TaskFilters, TaskResponse, TaskUpdate

from . import activity_service, notification_service, task_policy
from .utils import column_values, total_pages, unique_ids

logger = logging.getLogger(__name__)


async def get_task_or_404(db: AsyncSession, task_id: int) -> Task:
    result = await db.execute(select(Task).where(Task.id == task_id))
    task = result.scalar_one_or_none()
    if task is None:
        raise NotFound("Task not found")
    return task


async def get_project_or_404(db: AsyncSession, project_id: int) -> Project:
    result = await db.execute(select(Project).where(Project.id == project_id))
    project = result.scalar_one_or_none()
    if project is None:
        raise NotFound("Project not found")
    return project


def _check_visible(caller: SessionUser, task: Task) -> None:
    if caller.is_admin or task.visibility == "general" or caller.id in (task.assignee_ids or []):
        return
    raise NotFound("Task not found")


async def compare_and_set(db: AsyncSession, task: Task, values: Dict[str, Any]) -> Task:
    """Write ``values`` only if nobody else updated the task since it was read.

    Raises Conflict when the stored version moved on.
    """
    values = dict(values)
    status = values.get("status")
    if status is not None and status != task.status:
        values["completed_at"] = utcnow() if status == "done" else None
    values["updated_at"] = utcnow()
    values["version"] = Task.version + 1

    try:
        result = await db.execute(
            update(Task)
            .where(Task.id == task.id, Task.version == task.version)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
    except SQLAlchemyError:
        await db.rollback()
        raise
    if result.rowcount == 0:
        await db.rollback()
        logger.info("Lost update on task %s at version %s", task.id, task.version)
        raise Conflict()
    await db.commit()
    await db.refresh(task)
    return task


async def create_task(db: AsyncSession, caller: SessionUser, data: TaskCreate) -> TaskResponse:
    from . import board_service

    await get_project_or_404(db, data.project_id)
    board_id = data.daily_board_id
    if board_id is None:
        board_id = (await board_service.get_or_create_today_board(db, caller.id)).id

    values = column_values(data)
    values["assignee_ids"] = unique_ids(data.assignee_ids)
    values["subtasks"] = [
        {"id": uuid.uuid4().hex, "title": subtask.title, "done": subtask.done, "completed_at": None}
        for subtask in data.subtasks
    ]
    values["daily_board_id"] = board_id
    task = Task(**values, status="todo", assigned_by=caller.id)
    db.add(task)
    await db.commit()
    await db.refresh(task)

    response = TaskResponse.model_validate(task)
    for user_id in response.assignee_ids:
        if user_id == caller.id:
            continue
        await notification_service.notify(
            db,
            user_id,
            "task_assigned",
            "New task assigned to you",
            f'You\'ve been assigned: "{response.title}"',
            {"task_id": response.id, "project_id": response.project_id, "triggered_by": caller.id},
        )
    await activity_service.log_activity(
        db,
        caller.id,
        "task_created",
        f'created task "{response.title}"',
        project_id=response.project_id,
        metadata={"task_id": response.id},
    )
    return response


async def get_tasks(db: AsyncSession, caller: SessionUser, filters: TaskFilters) -> Dict[str, Any]:
    query = select(Task)
    if filters.status != "all":
        query = query.where(Task.status == filters.status)
    if filters.priority != "all":
        query = query.where(Task.priority == filters.priority)
    if filters.project != "all":
        query = query.where(Task.project_id == int(filters.project))
    if filters.search:
        pattern = f"%{filters.search}%"
        query = query.where(or_(Task.title.ilike(pattern), Task.description.ilike(pattern)))
    if filters.due_today:
        query = query.where(Task.deadline >= local_today_start(), Task.deadline < local_tomorrow_start())
    query = query.order_by(Task.created_at.desc(), Task.id.desc())

    result = await db.execute(query)
    tasks = result.scalars().all()

    # assignee ids live in a JSON list, so membership is checked here
    if filters.assignee != "all":
        assignee = caller.id if filters.assignee == "me" else int(filters.assignee)
        tasks = [task for task in tasks if assignee in (task.assignee_ids or [])]
    if not caller.is_admin:
        tasks = [
            task for task in tasks
            if task.visibility == "general" or caller.id in (task.assignee_ids or [])
        ]

    total = len(tasks)
    start = (filters.page - 1) * filters.limit
    page = tasks[start:start + filters.limit]
    return {
        "tasks": [TaskResponse.model_validate(task) for task in page],
        "total": total,
        "page": filters.page,
        "total_pages": total_pages(total, filters.limit),
    }


async def get_task(db: AsyncSession, caller: SessionUser, task_id: int) -> Task:
    task = await get_task_or_404(db, task_id)
    _check_visible(caller, task)
    return task


async def update_task(
    db: AsyncSession, caller: SessionUser, task_id: int, data: TaskUpdate
) -> TaskResponse:
    task = await get_task_or_404(db, task_id)
    changes = column_values(data, exclude_unset=True)
    task_policy.authorize_update(caller, task, changes.keys())

    previous_status = task.status
    previous_assignees = list(task.assignee_ids or [])
    assigner = task.assigned_by

    if "assignee_ids" in changes:
        changes["assignee_ids"] = unique_ids(changes["assignee_ids"] or [])
    if "project_id" in changes:
        await get_project_or_404(db, changes["project_id"])

    task = await compare_and_set(db, task, changes)
    response = TaskResponse.model_validate(task)

    title = response.title
    meta = {"task_id": response.id, "project_id": response.project_id, "triggered_by": caller.id}
    new_status = response.status.value

    if new_status == "done" and previous_status != "done":
        if assigner != caller.id:
            await notification_service.notify(
                db,
                assigner,
                "task_completed",
                "Task completed",
                f'{caller.name or "A team member"} completed "{title}"',
                meta,
            )
        await activity_service.log_activity(
            db,
            caller.id,
            "task_completed",
            f'completed task "{title}"',
            project_id=response.project_id,
            metadata={"task_id": response.id},
        )

    if "assignee_ids" in changes:
        added = [user_id for user_id in response.assignee_ids if user_id not in previous_assignees]
        for user_id in added:
            if user_id == caller.id:
                continue
            await notification_service.notify(
                db,
                user_id,
                "task_assigned",
                "New task assigned to you",
                f'You\'ve been assigned: "{title}"',
                meta,
            )
        if added:
            await activity_service.log_activity(
                db,
                caller.id,
                "task_assigned",
                f'assigned {len(added)} member(s) to "{title}"',
                project_id=response.project_id,
                metadata={"task_id": response.id},
            )

    if new_status != previous_status:
        await activity_service.log_activity(
            db,
            caller.id,
            "status_changed",
            f'moved "{title}" from {previous_status} to {new_status}',
            project_id=response.project_id,
            metadata={"task_id": response.id, "previous_value": previous_status, "new_value": new_status},
        )

    return response


def _check_can_edit_subtasks(caller: SessionUser, task: Task) -> None:
    if not caller.is_admin and caller.id not in (task.assignee_ids or []):
        raise Forbidden("Only assigned members and admins can edit subtasks")


async def add_subtask(db: AsyncSession, caller: SessionUser, task_id: int, title: str) -> Task:
    task = await get_task_or_404(db, task_id)
    _check_can_edit_subtasks(caller, task)
    subtask = {"id": uuid.uuid4().hex, "title": title, "done": False, "completed_at": None}
    return await compare_and_set(db, task, {"subtasks": list(task.subtasks or []) + [subtask]})


async def toggle_subtask(
    db: AsyncSession, caller: SessionUser, task_id: int, subtask_id: str, done: Optional[bool] = None
) -> Task:
    """Set a subtask's done flag, or flip it when ``done`` is not given."""
    task = await get_task_or_404(db, task_id)
    _check_can_edit_subtasks(caller, task)

    subtasks: List[Dict[str, Any]] = []
    found = False
    for subtask in task.subtasks or []:
        subtask = dict(subtask)
        if subtask["id"] == subtask_id:
            found = True
            was_done = subtask.get("done", False)
            subtask["done"] = (not was_done) if done is None else done
            if subtask["done"] != was_done:
                subtask["completed_at"] = utcnow().isoformat() if subtask["done"] else None
        subtasks.append(subtask)
    if not found:
        raise NotFound("Subtask not found")
    return await compare_and_set(db, task, {"subtasks": subtasks})


async def delete_task(db: AsyncSession, caller: SessionUser, task_id: int) -> None:
    require_admin(caller)
    task = await get_task_or_404(db, task_id)
    await db.execute(delete(Comment).where(Comment.task_id == task.id))
    await db.execute(delete(TimeLog).where(TimeLog.task_id == task.id))
    await db.delete(task)
    await db.commit()
    logger.info("Task %s deleted by %s", task_id, caller.id)

