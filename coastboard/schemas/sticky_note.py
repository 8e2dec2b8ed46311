from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class StickyNoteColor(str, Enum):
    yellow = "yellow"
    blue = "blue"
    green = "green"
    pink = "pink"
    purple = "purple"


class StickyNoteCategory(str, Enum):
    recommendation = "recommendation"
    tip = "tip"
    reminder = "reminder"
    goal = "goal"
    other = "other"


class StickyNoteVisibility(str, Enum):
    team = "team"
    personal = "personal"


class StickyNoteCreate(BaseModel):
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    color: StickyNoteColor = StickyNoteColor.yellow
    category: StickyNoteCategory = StickyNoteCategory.other
    visibility: StickyNoteVisibility = StickyNoteVisibility.personal


class StickyNoteUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    content: Optional[str] = Field(None, min_length=1)
    color: Optional[StickyNoteColor] = None
    category: Optional[StickyNoteCategory] = None
    visibility: Optional[StickyNoteVisibility] = None


class StickyNoteResponse(BaseModel):
    id: int
    title: str
    content: str
    color: StickyNoteColor
    category: StickyNoteCategory
    created_by: int
    visibility: StickyNoteVisibility
    is_pinned: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
