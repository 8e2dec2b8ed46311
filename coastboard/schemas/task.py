from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class TaskStatus(str, Enum):
    todo = "todo"
    in_progress = "in_progress"
    in_review = "in_review"
    done = "done"


class TaskPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"


class TaskVisibility(str, Enum):
    general = "general"
    private = "private"


class SubtaskCreate(BaseModel):
    title: str = Field(..., min_length=1)
    done: bool = False


class Subtask(BaseModel):
    id: str
    title: str
    done: bool = False
    completed_at: Optional[datetime] = None


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=2)
    description: str = Field(..., min_length=5)
    project_id: int
    assignee_ids: List[int] = []
    priority: TaskPriority = TaskPriority.medium
    deadline: datetime
    start_date: Optional[datetime] = None
    estimated_hours: Optional[float] = None
    daily_board_id: Optional[int] = None
    visibility: TaskVisibility = TaskVisibility.general
    subtasks: List[SubtaskCreate] = []


class BoardTaskCreate(BaseModel):
    title: str = Field(..., min_length=2)
    description: str = ""
    project_id: int
    assignee_ids: List[int] = []
    priority: TaskPriority = TaskPriority.medium
    visibility: TaskVisibility = TaskVisibility.general
    deadline: Optional[datetime] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=2)
    description: Optional[str] = None
    project_id: Optional[int] = None
    assignee_ids: Optional[List[int]] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    deadline: Optional[datetime] = None
    start_date: Optional[datetime] = None
    estimated_hours: Optional[float] = None
    visibility: Optional[TaskVisibility] = None

    class Config:
        extra = "forbid"

    @field_validator(
        "title", "description", "project_id", "assignee_ids", "status", "priority", "visibility",
        mode="before",
    )
    @classmethod
    def not_null(cls, value):
        # omit a field to leave it unchanged; these columns cannot be cleared
        if value is None:
            raise ValueError("may not be null")
        return value


class TaskFilters(BaseModel):
    status: str = "all"
    priority: str = "all"
    assignee: str = "all"
    project: str = "all"
    search: Optional[str] = None
    due_today: bool = False
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)


class TaskResponse(BaseModel):
    id: int
    title: str
    description: str
    project_id: int
    status: TaskStatus
    priority: TaskPriority
    visibility: TaskVisibility
    assignee_ids: List[int]
    assigned_by: int
    deadline: Optional[datetime]
    start_date: Optional[datetime]
    estimated_hours: Optional[float]
    subtasks: List[Subtask]
    total_time_spent: int
    daily_board_id: Optional[int]
    completed_at: Optional[datetime]
    version: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

