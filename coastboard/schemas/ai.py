"""Structured outputs requested from the language model."""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from .task import TaskPriority


class KeyPointPriority(str, Enum):
    high = "high"
    medium = "medium"
    low = "low"


class TaskDraft(BaseModel):
    title: str = Field(description="Short, actionable task title")
    description: str = Field(description="What needs to be done and why")
    priority: TaskPriority = Field(description="One of low, medium, high, urgent")
    subtasks: List[str] = Field(default_factory=list, description="Concrete steps")
    estimated_hours: Optional[float] = Field(None, description="Rough effort in hours")
    deadline: Optional[datetime] = Field(None, description="ISO 8601 due date if implied")


class AssigneeSuggestion(BaseModel):
    suggested_member_id: int = Field(description="Id of the chosen team member")
    member_name: str
    reasoning: str
    confidence_score: int = Field(ge=0, le=100)


class TaskBreakdown(BaseModel):
    subtasks: List[str]
    estimated_total_hours: float
    reasoning: str


class DeadlineSuggestion(BaseModel):
    suggested_deadline: datetime
    reasoning: str
    difficulty_score: int = Field(ge=1, le=10)


class DailyKeyPoint(BaseModel):
    title: str
    description: str
    priority: KeyPointPriority
    related_task_id: Optional[int] = None


class DailyKeyPoints(BaseModel):
    key_points: List[DailyKeyPoint]


class MemberReport(BaseModel):
    member_id: int
    member_name: str
    tasks_completed: int
    tasks_in_progress: int
    highlights: List[str]
    blockers: List[str] = []


class EODReport(BaseModel):
    date: str
    summary: str
    member_reports: List[MemberReport]
    overall_progress: int = Field(ge=0, le=100)


class PlannedTask(BaseModel):
    title: str
    description: str
    priority: TaskPriority
    estimated_hours: Optional[float] = None


class ProjectPhase(BaseModel):
    name: str
    tasks: List[PlannedTask]


class ProjectPlan(BaseModel):
    summary: str
    phases: List[ProjectPhase]
    risks: List[str] = []


class TaskDraftRequest(BaseModel):
    input: str = Field(..., min_length=3)


class AssigneeRequest(BaseModel):
    task_title: str = Field(..., min_length=2)
    task_description: str = ""
    candidate_ids: Optional[List[int]] = None


class BreakdownRequest(BaseModel):
    title: str = Field(..., min_length=2)
    description: str = ""


class DeadlineRequest(BaseModel):
    title: str = Field(..., min_length=2)
    description: str = ""
    priority: TaskPriority = TaskPriority.medium


class ProjectPlanRequest(BaseModel):
    name: str = Field(..., min_length=2)
    description: str = Field(..., min_length=10)
    deadline: Optional[datetime] = None
