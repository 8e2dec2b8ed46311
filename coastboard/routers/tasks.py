from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.actions import task_actions, time_actions
from coastboard.core.auth import SessionUser, get_session_user
from coastboard.core.database import get_db

router = APIRouter(
    prefix="/tasks",
    tags=["tasks"],
    responses={404: {"description": "Not found"}},
)


@router.get("/")
async def get_tasks(
    status: str = "all",
    priority: str = "all",
    assignee: str = "all",
    project: str = "all",
    search: Optional[str] = None,
    due_today: bool = False,
    page: int = 1,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    filters = {
        "status": status,
        "priority": priority,
        "assignee": assignee,
        "project": project,
        "search": search,
        "due_today": due_today,
        "page": page,
    }
    return await task_actions.get_tasks(db, caller, filters)


@router.post("/")
async def create_task(
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await task_actions.create_task(db, caller, payload)


@router.get("/{task_id}")
async def get_task(
    task_id: int,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await task_actions.get_task(db, caller, task_id)


@router.patch("/{task_id}")
async def update_task(
    task_id: int,
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await task_actions.update_task(db, caller, task_id, payload)


@router.delete("/{task_id}")
async def delete_task(
    task_id: int,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await task_actions.delete_task(db, caller, task_id)


@router.post("/{task_id}/subtasks")
async def add_subtask(
    task_id: int,
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await task_actions.add_subtask(db, caller, task_id, payload)


@router.post("/{task_id}/subtasks/{subtask_id}/toggle")
async def toggle_subtask(
    task_id: int,
    subtask_id: str,
    done: Optional[bool] = None,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await task_actions.toggle_subtask(db, caller, task_id, subtask_id, done)


@router.get("/{task_id}/time-logs")
async def get_task_time_logs(
    task_id: int,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await time_actions.get_task_time_logs(db, caller, task_id)
