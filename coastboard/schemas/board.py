from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class DailyBoardResponse(BaseModel):
    id: int
    date: datetime
    created_by: int
    created_at: datetime

    class Config:
        from_attributes = True


class CommentCreate(BaseModel):
    text: str = Field(..., min_length=1)
    tagged_user_ids: List[int] = []


class CommentResponse(BaseModel):
    id: int
    task_id: int
    user_id: int
    text: str
    tagged_user_ids: List[int]
    created_at: datetime
    user_name: Optional[str] = None

    class Config:
        from_attributes = True


class CustomBoardCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    icon: str = "Layout"
    color: str = "blue"


class CustomBoardUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    is_pinned: Optional[bool] = None


class CustomBoardResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    icon: str
    color: str
    created_by: int
    task_ids: List[int]
    is_pinned: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
