from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from .user import Role, check_email


class InviteMember(BaseModel):
    email: str
    role: Role = Role.member

    _email = field_validator("email")(check_email)


class AcceptInvitation(BaseModel):
    name: str = Field(..., min_length=2)
    password: str = Field(..., min_length=8)


class InvitationResponse(BaseModel):
    id: int
    email: str
    role: Role
    token: str
    invited_by: int
    status: str
    expires_at: datetime
    created_at: datetime

    class Config:
        from_attributes = True
