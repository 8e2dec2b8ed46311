from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.actions import board_actions
from coastboard.core.auth import SessionUser, get_session_user
from coastboard.core.database import get_db

router = APIRouter(prefix="/boards", tags=["boards"])


@router.get("/today")
async def get_today_board(
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await board_actions.get_or_create_today_board(db, caller)


@router.get("/")
async def get_recent_boards(
    limit: int = 7,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await board_actions.get_recent_boards(db, caller, limit)


@router.get("/{board_id}/tasks")
async def get_board_tasks(
    board_id: int,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await board_actions.get_board_tasks(db, caller, board_id)


@router.post("/tasks")
async def add_task_to_board(
    payload: Dict[str, Any] = Body(...),
    board_id: Optional[int] = None,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await board_actions.add_task_to_board(db, caller, payload, board_id)


@router.post("/tasks/{task_id}/toggle-done")
async def toggle_board_task_done(
    task_id: int,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await board_actions.toggle_board_task_done(db, caller, task_id)


@router.delete("/tasks/{task_id}")
async def delete_board_task(
    task_id: int,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await board_actions.delete_board_task(db, caller, task_id)


@router.get("/tasks/{task_id}/comments")
async def get_comments(
    task_id: int,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await board_actions.get_comments(db, caller, task_id)


@router.post("/tasks/{task_id}/comments")
async def add_comment(
    task_id: int,
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await board_actions.add_comment(db, caller, task_id, payload)
