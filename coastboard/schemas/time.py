from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ManualTimeEntry(BaseModel):
    task_id: int
    project_id: int
    duration: int = Field(..., gt=0, description="Duration in seconds")
    description: Optional[str] = None
    date: datetime


class TimeLogResponse(BaseModel):
    id: int
    task_id: int
    user_id: int
    project_id: int
    start_time: datetime
    end_time: Optional[datetime]
    duration: int
    description: Optional[str]
    is_manual: bool

    class Config:
        from_attributes = True
