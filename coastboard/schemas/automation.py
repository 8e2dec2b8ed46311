from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class AutomationConfigUpdate(BaseModel):
    enabled: Optional[bool] = None
    template_id: Optional[int] = None
    delay_days: Optional[int] = Field(None, ge=0)
    target_category: Optional[str] = None


class AutomationConfigResponse(BaseModel):
    id: int
    trigger_name: str
    enabled: bool
    template_id: Optional[int]
    delay_days: Optional[int]
    target_category: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True
