from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.core.auth import SessionUser, require_auth
from coastboard.core.results import action, dump, dump_list
from coastboard.schemas.user import UserRegister, UserResponse
from coastboard.services import kpi_service, user_service


@action("Failed to create account")
async def register(db: AsyncSession, payload: Dict[str, Any]):
    data = UserRegister.model_validate(payload)
    return dump(UserResponse, await user_service.register(db, data))


@action("Failed to fetch users")
async def get_users(db: AsyncSession, caller: Optional[SessionUser]):
    require_auth(caller)
    return dump_list(UserResponse, await user_service.get_users(db))


@action("Failed to fetch user")
async def get_me(db: AsyncSession, caller: Optional[SessionUser]):
    caller = require_auth(caller)
    return dump(UserResponse, await user_service.get_user_or_404(db, caller.id))


@action("Failed to fetch KPIs")
async def get_user_kpis(db: AsyncSession, caller: Optional[SessionUser]):
    caller = require_auth(caller)
    return await kpi_service.get_user_kpis(db, caller.id)
