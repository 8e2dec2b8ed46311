"""Team administration, invitations and housekeeping."""
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core.auth import SessionUser, require_admin
from coastboard.core.results import action, dump, dump_list
from coastboard.schemas.invitation import AcceptInvitation, InvitationResponse, InviteMember
from coastboard.schemas.user import ExpertiseUpdate, MemberRoleUpdate, UserResponse
from coastboard.services import invitation_service, maintenance_service, user_service


@action("Failed to load team data")
async def get_team_data(db: AsyncSession, caller: Optional[SessionUser]):
    require_admin(caller)
    team = await user_service.get_team_data(db)
    return {
        "members": dump_list(UserResponse, team["members"]),
        "invitations": dump_list(InvitationResponse, team["invitations"]),
    }


@action("Failed to update role")
async def update_member_role(db: AsyncSession, caller: Optional[SessionUser], user_id: int, payload: Dict[str, Any]):
    caller = require_admin(caller)
    data = MemberRoleUpdate.model_validate(payload)
    return dump(UserResponse, await user_service.update_member_role(db, caller, user_id, data))


@action("Failed to update expertise")
async def update_member_expertise(db: AsyncSession, caller: Optional[SessionUser], user_id: int, payload: Dict[str, Any]):
    require_admin(caller)
    data = ExpertiseUpdate.model_validate(payload)
    return dump(UserResponse, await user_service.update_member_expertise(db, user_id, data))


@action("Failed to remove member")
async def remove_member(db: AsyncSession, caller: Optional[SessionUser], user_id: int):
    caller = require_admin(caller)
    await user_service.remove_member(db, caller, user_id)
    return None


@action("Failed to load invitations")
async def get_invitations(db: AsyncSession, caller: Optional[SessionUser]):
    require_admin(caller)
    return dump_list(InvitationResponse, await invitation_service.get_pending(db))


@action("Failed to create invitation")
async def invite_member(db: AsyncSession, caller: Optional[SessionUser], payload: Dict[str, Any]):
    caller = require_admin(caller)
    data = InviteMember.model_validate(payload)
    return dump(InvitationResponse, await invitation_service.invite_member(db, caller, data))


@action("Failed to revoke invitation")
async def revoke_invitation(db: AsyncSession, caller: Optional[SessionUser], invitation_id: int):
    require_admin(caller)
    await invitation_service.revoke_invitation(db, invitation_id)
    return None


@action("Invalid or expired invitation")
async def get_invitation_by_token(db: AsyncSession, token: str):
    invitation = await invitation_service.get_invitation_by_token(db, token)
    return {"email": invitation.email, "role": invitation.role, "expires_at": invitation.expires_at.isoformat()}


@action("Failed to create account")
async def accept_invitation(db: AsyncSession, token: str, payload: Dict[str, Any]):
    data = AcceptInvitation.model_validate(payload)
    return dump(UserResponse, await invitation_service.accept_invitation(db, token, data))


@action("Failed to clear notifications")
async def clear_read_notifications(db: AsyncSession, caller: Optional[SessionUser]):
    require_admin(caller)
    return {"deleted_count": await maintenance_service.clear_read_notifications(db)}


@action("Failed to clear activity")
async def clear_all_activity(db: AsyncSession, caller: Optional[SessionUser]):
    require_admin(caller)
    return {"deleted_count": await maintenance_service.clear_all_activity(db)}


@action("Failed to clear stale tasks")
async def clear_stale_done_tasks(db: AsyncSession, caller: Optional[SessionUser]):
    require_admin(caller)
    return {"deleted_count": await maintenance_service.clear_stale_done_tasks(db)}
