import re
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

EXPERTISE_OPTIONS = [
    "Logo Design",
    "Brand Identity",
    "Brand Strategy",
    "Visual Design",
    "Social Media Design",
    "Flyer Design",
    "EPK Design",
    "Merchandise Design",
    "Web Design",
    "UI/UX Design",
    "Motion Graphics",
    "Illustration",
    "Photography",
    "Copywriting",
    "Marketing Strategy",
    "Project Management",
    "SEO Specialist",
    "Mobile App Developer",
]


def check_email(value: str) -> str:
    value = value.strip().lower()
    if not EMAIL_RE.match(value):
        raise ValueError("Invalid email address")
    return value


class Role(str, Enum):
    admin = "admin"
    member = "member"


class Token(BaseModel):
    access_token: str
    token_type: str


class UserRegister(BaseModel):
    name: str = Field(..., min_length=2)
    email: str
    password: str = Field(..., min_length=8)

    _email = field_validator("email")(check_email)


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    image: Optional[str] = None
    role: Role
    expertise: List[str] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MemberRoleUpdate(BaseModel):
    role: Role


class ExpertiseUpdate(BaseModel):
    expertise: List[str]

    @field_validator("expertise")
    @classmethod
    def known_expertise(cls, value: List[str]) -> List[str]:
        unknown = [item for item in value if item not in EXPERTISE_OPTIONS]
        if unknown:
            raise ValueError(f"Unknown expertise: {', '.join(unknown)}")
        return value
