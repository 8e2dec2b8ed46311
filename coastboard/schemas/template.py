from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class TemplateCategory(str, Enum):
    cold_outreach = "Cold Outreach"
    follow_up = "Follow Up"
    thank_you = "Thank You"
    proposal = "Proposal"
    check_in = "Check In"
    custom = "Custom"


class SendStatus(str, Enum):
    sent = "sent"
    opened = "opened"
    replied = "replied"
    bounced = "bounced"


class ReplySentiment(str, Enum):
    positive = "positive"
    neutral = "neutral"
    negative = "negative"


class TemplateCreate(BaseModel):
    name: str = Field(..., min_length=1)
    subject_line: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)
    category: TemplateCategory = TemplateCategory.custom
    target_industry: Optional[str] = None
    is_auto_template: bool = False
    auto_trigger: Optional[str] = None
    tags: List[str] = []


class TemplateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    subject_line: Optional[str] = Field(None, min_length=1)
    body: Optional[str] = Field(None, min_length=1)
    category: Optional[TemplateCategory] = None
    target_industry: Optional[str] = None
    is_auto_template: Optional[bool] = None
    auto_trigger: Optional[str] = None
    tags: Optional[List[str]] = None


class SendTemplateEmail(BaseModel):
    template_id: int
    prospect_id: int
    custom_subject: Optional[str] = None
    custom_body: Optional[str] = None


class SendStatusUpdate(BaseModel):
    status: SendStatus
    reply_sentiment: Optional[ReplySentiment] = None
    notes: Optional[str] = None


class TemplateResponse(BaseModel):
    id: int
    name: str
    subject_line: str
    body: str
    category: str
    target_industry: Optional[str]
    is_auto_template: bool
    auto_trigger: Optional[str]
    tags: List[str]
    created_by: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TemplateSendResponse(BaseModel):
    id: int
    template_id: int
    prospect_id: int
    sent_by: int
    sent_at: datetime
    is_automated: bool
    status: SendStatus
    replied_at: Optional[datetime]
    reply_sentiment: Optional[str]
    notes: Optional[str]

    class Config:
        from_attributes = True
