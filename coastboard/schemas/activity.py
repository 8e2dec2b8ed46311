from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, Field


class ActivityAction(str, Enum):
    task_created = "task_created"
    task_completed = "task_completed"
    task_assigned = "task_assigned"
    file_uploaded = "file_uploaded"
    project_created = "project_created"
    comment_added = "comment_added"
    deadline_updated = "deadline_updated"
    status_changed = "status_changed"
    member_invited = "member_invited"
    time_logged = "time_logged"


class ActivityResponse(BaseModel):
    id: int
    user_id: int
    project_id: Optional[int]
    action: ActivityAction
    description: str
    metadata: Dict[str, Any] = Field(
        default_factory=dict, validation_alias=AliasChoices("meta", "metadata")
    )
    created_at: datetime
    user_name: Optional[str] = None

    class Config:
        from_attributes = True
