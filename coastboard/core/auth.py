import logging
from typing import Annotated, Literal, Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .database import get_db
from .errors import Forbidden, Unauthorized
from .security import decode_access_token

logger = logging.getLogger(__name__)

ADMIN = "admin"
MEMBER = "member"

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token", auto_error=False)


class SessionUser(BaseModel):
    id: int
    role: Literal["admin", "member"] = MEMBER
    name: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN


def require_auth(caller: Optional[SessionUser]) -> SessionUser:
    """Require an authenticated caller; raises Unauthorized otherwise."""
    if caller is None:
        raise Unauthorized()
    return caller


def require_admin(caller: Optional[SessionUser]) -> SessionUser:
    """Require an authenticated admin; raises Forbidden for members."""
    caller = require_auth(caller)
    if caller.role != ADMIN:
        raise Forbidden()
    return caller


def is_admin(caller: Optional[SessionUser]) -> bool:
    return caller is not None and caller.role == ADMIN


async def get_session_user(
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
    db: AsyncSession = Depends(get_db),
) -> Optional[SessionUser]:
    """Resolve the bearer token to a SessionUser, or None.

    Missing or invalid credentials are not an HTTP error here: the action
    layer decides, and reports it inside the result envelope.
    """
    from coastboard.models.user import User

    if not token:
        return None
    payload = decode_access_token(token)
    if not payload or payload.get("sub") is None:
        logger.debug("Rejected bearer token without a valid subject")
        return None

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        return None

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        logger.debug("Token subject %s has no matching user", user_id)
        return None
    return SessionUser(id=user.id, role=user.role, name=user.name, email=user.email)
