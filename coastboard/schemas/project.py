from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class ProjectStatus(str, Enum):
    active = "active"
    completed = "completed"
    on_hold = "on_hold"
    archived = "archived"


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=2)
    description: str = Field(..., min_length=10)
    start_date: datetime
    deadline: datetime
    tags: List[str] = []


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2)
    description: Optional[str] = Field(None, min_length=10)
    start_date: Optional[datetime] = None
    deadline: Optional[datetime] = None
    tags: Optional[List[str]] = None
    status: Optional[ProjectStatus] = None
    progress: Optional[int] = Field(None, ge=0, le=100)


class ProjectFilters(BaseModel):
    status: Optional[ProjectStatus] = None
    search: Optional[str] = None
    sort_by: str = "created_at"
    sort_order: str = "desc"


class ProjectResponse(BaseModel):
    id: int
    name: str
    description: str
    status: ProjectStatus
    start_date: datetime
    deadline: datetime
    progress: int
    created_by: int
    tags: List[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
