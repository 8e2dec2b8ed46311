from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class CrmActivityType(str, Enum):
    call = "call"
    email_sent = "email_sent"
    meeting = "meeting"
    note = "note"
    stage_changed = "stage_changed"
    auto_follow_up = "auto_follow_up"
    auto_thank_you = "auto_thank_you"


class CrmActivityCreate(BaseModel):
    prospect_id: int
    activity_type: CrmActivityType
    subject: str = Field(..., min_length=1)
    details: Optional[str] = None
    template_id: Optional[int] = None
    outcome: Optional[str] = None
    follow_up_date: Optional[datetime] = None


class CrmActivityResponse(BaseModel):
    id: int
    prospect_id: int
    performed_by: int
    activity_type: CrmActivityType
    subject: str
    details: Optional[str]
    template_id: Optional[int]
    outcome: Optional[str]
    follow_up_date: Optional[datetime]
    is_automated: bool
    created_at: datetime

    class Config:
        from_attributes = True
