from datetime import datetime
from enum import Enum
from typing import Any, Dict

from pydantic import AliasChoices, BaseModel, Field


class NotificationType(str, Enum):
    task_assigned = "task_assigned"
    task_completed = "task_completed"
    deadline_warning = "deadline_warning"
    eod_report = "eod_report"
    member_joined = "member_joined"
    sticky_note_shared = "sticky_note_shared"
    info = "info"


class NotificationResponse(BaseModel):
    id: int
    user_id: int
    type: NotificationType
    title: str
    message: str
    read: bool
    metadata: Dict[str, Any] = Field(
        default_factory=dict, validation_alias=AliasChoices("meta", "metadata")
    )
    created_at: datetime

    class Config:
        from_attributes = True
