import logging
import secrets
from datetime import timedelta
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core import mailer
from coastboard.core.auth import SessionUser
from coastboard.core.config import settings
from coastboard.core.database import utcnow
from coastboard.core.errors import CoastboardError, DeliveryFailed
from coastboard.core.security import get_password_hash
from coastboard.models.invitation import Invitation
from coastboard.models.user import User
from coastboard.schemas.invitation import AcceptInvitation, InviteMember

from . import activity_service

logger = logging.getLogger(__name__)

INVITATION_TTL = timedelta(days=7)

INVITE_EMAIL = """
<div style="font-family: sans-serif; max-width: 600px; margin: 0 auto;">
    <h2>You've been invited to join The Coast</h2>
    <p>You have been invited to join the team as a <strong>{role}</strong>.</p>
    <p>Click the link below to accept your invitation:</p>
    <a href="{url}" style="display: inline-block; background: #000; color: #fff; padding: 12px 24px; text-decoration: none; border-radius: 6px;">
        Accept Invitation
    </a>
    <p style="margin-top: 24px; color: #666; font-size: 14px;">This link expires in 7 days.</p>
</div>
"""


async def get_pending(db: AsyncSession) -> List[Invitation]:
    result = await db.execute(
        select(Invitation)
        .where(Invitation.status == "pending")
        .order_by(Invitation.created_at.desc(), Invitation.id.desc())
    )
    return list(result.scalars().all())


async def _active_invitation(db: AsyncSession, **criteria):
    query = select(Invitation).where(Invitation.status == "pending", Invitation.expires_at > utcnow())
    for field, value in criteria.items():
        query = query.where(getattr(Invitation, field) == value)
    result = await db.execute(query)
    return result.scalars().first()


async def invite_member(db: AsyncSession, caller: SessionUser, data: InviteMember) -> Invitation:
    if await _active_invitation(db, email=data.email):
        raise CoastboardError("An active invitation already exists for this email.")
    existing = await db.execute(select(User.id).where(User.email == data.email))
    if existing.first() is not None:
        raise CoastboardError("A member with this email already exists.")

    invitation = Invitation(
        email=data.email,
        role=data.role.value,
        token=secrets.token_hex(32),
        invited_by=caller.id,
        status="pending",
        expires_at=utcnow() + INVITATION_TTL,
    )
    db.add(invitation)
    await db.commit()
    await db.refresh(invitation)

    url = f"{settings.APP_URL}/accept-invitation?token={invitation.token}"
    logger.info("Invitation link for %s: %s", invitation.email, url)
    sent = await mailer.send_email(
        to=invitation.email,
        subject="You've been invited to The Coast",
        html=INVITE_EMAIL.format(role=invitation.role, url=url),
    )
    if not sent.get("success"):
        await db.delete(invitation)
        await db.commit()
        raise DeliveryFailed(f"Failed to send email: {sent.get('error') or 'Unknown error'}")

    await activity_service.log_activity(
        db, caller.id, "member_invited", f"invited {data.email} as {data.role.value}"
    )
    return invitation


async def revoke_invitation(db: AsyncSession, invitation_id: int) -> None:
    result = await db.execute(select(Invitation).where(Invitation.id == invitation_id))
    invitation = result.scalar_one_or_none()
    if invitation is not None:
        await db.delete(invitation)
        await db.commit()


async def get_invitation_by_token(db: AsyncSession, token: str) -> Invitation:
    invitation = await _active_invitation(db, token=token)
    if invitation is None:
        raise CoastboardError("Invalid or expired invitation")
    return invitation


async def accept_invitation(db: AsyncSession, token: str, data: AcceptInvitation) -> User:
    invitation = await get_invitation_by_token(db, token)

    user = User(
        email=invitation.email,
        name=data.name,
        hashed_password=get_password_hash(data.password),
        role=invitation.role,
        expertise=[],
    )
    db.add(user)
    invitation.status = "accepted"
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise CoastboardError("A member with this email already exists.")
    await db.refresh(user)
    logger.info("Invitation %s accepted by user %s", token[:8], user.id)
    return user
