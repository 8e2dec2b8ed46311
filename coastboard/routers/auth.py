from datetime import timedelta
from typing import Annotated, Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from coastboard.actions import user_actions
from coastboard.core.auth import SessionUser, get_session_user
from coastboard.core.config import settings
from coastboard.core.database import get_db
from coastboard.core.security import create_access_token
from coastboard.schemas.user import Token
from coastboard.services import user_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register")
async def register(payload: Dict[str, Any] = Body(...), db: AsyncSession = Depends(get_db)):
    return await user_actions.register(db, payload)


@router.post("/token", response_model=Token)
async def login_for_access_token(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: AsyncSession = Depends(get_db),
):
    # OAuth2PasswordRequestForm uses 'username' field, but we treat it as email
    user = await user_service.authenticate(db, form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(
        data={"sub": str(user.id), "role": user.role},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    return {"access_token": access_token, "token_type": "bearer"}


@router.get("/me")
async def get_current_user_info(
    caller: Optional[SessionUser] = Depends(get_session_user),
    db: AsyncSession = Depends(get_db),
):
    return await user_actions.get_me(db, caller)
