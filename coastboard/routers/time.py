from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.actions import time_actions
from coastboard.core.auth import SessionUser, get_session_user
from coastboard.core.database import get_db

router = APIRouter(prefix="/time", tags=["time"])


@router.post("/start")
async def start_time_entry(
    task_id: int = Body(...),
    project_id: int = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await time_actions.start_time_entry(db, caller, task_id, project_id)


@router.post("/{log_id}/stop")
async def stop_time_entry(
    log_id: int,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await time_actions.stop_time_entry(db, caller, log_id)


@router.post("/manual")
async def log_manual_time(
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await time_actions.log_manual_time(db, caller, payload)


@router.get("/running")
async def get_running_timer(
    task_id: int,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await time_actions.get_running_timer(db, caller, task_id)
