from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.actions import ai_actions
from coastboard.core.auth import SessionUser, get_session_user
from coastboard.core.database import get_db

router = APIRouter(prefix="/ai", tags=["ai"])


@router.post("/task")
async def generate_task_from_input(
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await ai_actions.generate_task_from_input(db, caller, payload)


@router.post("/assignee")
async def suggest_assignee(
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await ai_actions.suggest_assignee(db, caller, payload)


@router.post("/breakdown")
async def break_down_task(
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await ai_actions.break_down_task(db, caller, payload)


@router.post("/deadline")
async def suggest_deadline(
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await ai_actions.suggest_deadline(db, caller, payload)


@router.get("/key-points")
async def generate_daily_key_points(
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await ai_actions.generate_daily_key_points(db, caller)


@router.get("/eod-report")
async def generate_eod_report(
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await ai_actions.generate_eod_report(db, caller)


@router.post("/project-plan")
async def generate_project_plan(
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await ai_actions.generate_project_plan(db, caller, payload)
