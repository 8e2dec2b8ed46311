from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.actions import admin_actions
from coastboard.core.auth import SessionUser, get_session_user
from coastboard.core.database import get_db

router = APIRouter(tags=["admin"])


@router.get("/admin/team")
async def get_team_data(
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await admin_actions.get_team_data(db, caller)


@router.patch("/admin/members/{user_id}/role")
async def update_member_role(
    user_id: int,
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await admin_actions.update_member_role(db, caller, user_id, payload)


@router.patch("/admin/members/{user_id}/expertise")
async def update_member_expertise(
    user_id: int,
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await admin_actions.update_member_expertise(db, caller, user_id, payload)


@router.delete("/admin/members/{user_id}")
async def remove_member(
    user_id: int,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await admin_actions.remove_member(db, caller, user_id)


@router.post("/admin/clear/notifications")
async def clear_read_notifications(
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await admin_actions.clear_read_notifications(db, caller)


@router.post("/admin/clear/activity")
async def clear_all_activity(
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await admin_actions.clear_all_activity(db, caller)


@router.post("/admin/clear/stale-tasks")
async def clear_stale_done_tasks(
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await admin_actions.clear_stale_done_tasks(db, caller)


# Invitations

@router.get("/invitations")
async def get_invitations(
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await admin_actions.get_invitations(db, caller)


@router.post("/invitations")
async def invite_member(
    payload: Dict[str, Any] = Body(...),
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await admin_actions.invite_member(db, caller, payload)


@router.delete("/invitations/{invitation_id}")
async def revoke_invitation(
    invitation_id: int,
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await admin_actions.revoke_invitation(db, caller, invitation_id)


@router.get("/invitations/{token}")
async def get_invitation_by_token(token: str, db: AsyncSession = Depends(get_db)):
    return await admin_actions.get_invitation_by_token(db, token)


@router.post("/invitations/{token}/accept")
async def accept_invitation(
    token: str,
    payload: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
):
    return await admin_actions.accept_invitation(db, token, payload)
