from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.actions import project_actions
from coastboard.core.auth import SessionUser, get_session_user
from coastboard.core.database import get_db

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("/")
async def get_projects(
    status: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    filters = {"status": status, "search": search, "sort_by": sort_by, "sort_order": sort_order}
    return await project_actions.get_projects(db, caller, filters)


@router.post("/")
async def create_project(
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await project_actions.create_project(db, caller, payload)


@router.get("/activity")
async def get_recent_activity(
    limit: int = 20,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await project_actions.get_recent_activity(db, caller, limit)


@router.get("/{project_id}")
async def get_project(
    project_id: int,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await project_actions.get_project(db, caller, project_id)


@router.patch("/{project_id}")
async def update_project(
    project_id: int,
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await project_actions.update_project(db, caller, project_id, payload)


@router.delete("/{project_id}")
async def delete_project(
    project_id: int,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await project_actions.delete_project(db, caller, project_id)


@router.get("/{project_id}/activity")
async def get_project_activity(
    project_id: int,
    limit: int = 20,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await project_actions.get_project_activity(db, caller, project_id, limit)
