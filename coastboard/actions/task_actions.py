from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core.auth import SessionUser, require_admin, require_auth
from coastboard.core.results import action, dump
from coastboard.schemas.task import SubtaskCreate, TaskCreate, TaskFilters, TaskResponse, TaskUpdate
from coastboard.services import task_service


@action("Failed to create task")
async def create_task(db: AsyncSession, caller: Optional[SessionUser], payload: Dict[str, Any]):
    caller = require_auth(caller)
    data = TaskCreate.model_validate(payload)
    return dump(TaskResponse, await task_service.create_task(db, caller, data))


@action("Failed to fetch tasks")
async def get_tasks(db: AsyncSession, caller: Optional[SessionUser], filters: Optional[Dict[str, Any]] = None):
    caller = require_auth(caller)
    page = await task_service.get_tasks(db, caller, TaskFilters.model_validate(filters or {}))
    page["tasks"] = [task.model_dump(mode="json") for task in page["tasks"]]
    return page


@action("Failed to fetch task")
async def get_task(db: AsyncSession, caller: Optional[SessionUser], task_id: int):
    caller = require_auth(caller)
    return dump(TaskResponse, await task_service.get_task(db, caller, task_id))


@action("Failed to update task")
async def update_task(db: AsyncSession, caller: Optional[SessionUser], task_id: int, payload: Dict[str, Any]):
    caller = require_auth(caller)
    data = TaskUpdate.model_validate(payload)
    return dump(TaskResponse, await task_service.update_task(db, caller, task_id, data))


@action("Failed to add subtask")
async def add_subtask(db: AsyncSession, caller: Optional[SessionUser], task_id: int, payload: Dict[str, Any]):
    caller = require_auth(caller)
    data = SubtaskCreate.model_validate(payload)
    return dump(TaskResponse, await task_service.add_subtask(db, caller, task_id, data.title))


@action("Failed to update subtask")
async def toggle_subtask(
    db: AsyncSession,
    caller: Optional[SessionUser],
    task_id: int,
    subtask_id: str,
    done: Optional[bool] = None,
):
    caller = require_auth(caller)
    return dump(TaskResponse, await task_service.toggle_subtask(db, caller, task_id, subtask_id, done))


@action("Failed to delete task")
async def delete_task(db: AsyncSession, caller: Optional[SessionUser], task_id: int):
    caller = require_admin(caller)
    await task_service.delete_task(db, caller, task_id)
    return None
