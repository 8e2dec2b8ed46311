import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core.auth import ADMIN, MEMBER, SessionUser
from coastboard.core.errors import CoastboardError, NotFound
from coastboard.core.security import get_password_hash, verify_password
from coastboard.models.user import User
from coastboard.schemas.user import ExpertiseUpdate, MemberRoleUpdate, UserRegister

from . import invitation_service

logger = logging.getLogger(__name__)


async def get_user_or_404(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFound("User not found")
    return user


async def register(db: AsyncSession, data: UserRegister) -> User:
    # the first account bootstraps the workspace as its admin
    existing = (await db.execute(select(func.count(User.id)))).scalar_one()
    user = User(
        email=data.email,
        name=data.name,
        hashed_password=get_password_hash(data.password),
        role=MEMBER if existing else ADMIN,
        expertise=[],
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise CoastboardError("Email already registered")
    await db.refresh(user)
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email.strip().lower()))
    user = result.scalar_one_or_none()
    if user is None or not verify_password(password, user.hashed_password):
        return None
    return user


async def get_users(db: AsyncSession) -> List[User]:
    result = await db.execute(select(User).order_by(User.name.asc()))
    return list(result.scalars().all())


async def get_team_data(db: AsyncSession) -> Dict[str, Any]:
    return {
        "members": await get_users(db),
        "invitations": await invitation_service.get_pending(db),
    }


async def update_member_role(
    db: AsyncSession, caller: SessionUser, user_id: int, data: MemberRoleUpdate
) -> User:
    if caller.id == user_id:
        raise CoastboardError("You cannot change your own role.")
    user = await get_user_or_404(db, user_id)
    user.role = data.role.value
    await db.commit()
    await db.refresh(user)
    logger.info("User %s role set to %s by %s", user_id, user.role, caller.id)
    return user


async def update_member_expertise(db: AsyncSession, user_id: int, data: ExpertiseUpdate) -> User:
    user = await get_user_or_404(db, user_id)
    user.expertise = list(data.expertise)
    await db.commit()
    await db.refresh(user)
    return user


async def remove_member(db: AsyncSession, caller: SessionUser, user_id: int) -> None:
    if caller.id == user_id:
        raise CoastboardError("You cannot remove yourself.")
    user = await get_user_or_404(db, user_id)
    await db.execute(delete(User).where(User.id == user.id))
    await db.commit()
    logger.info("User %s removed by %s", user_id, caller.id)
