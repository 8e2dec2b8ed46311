from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class PipelineStage(str, Enum):
    new_lead = "new_lead"
    contacted = "contacted"
    follow_up = "follow_up"
    responded = "responded"
    discovery = "discovery"
    proposal_sent = "proposal_sent"
    negotiation = "negotiation"
    won = "won"
    project_started = "project_started"
    lost = "lost"
    nurture = "nurture"


class LeadSource(str, Enum):
    manual = "Manual"
    csv_import = "CSV Import"
    referral = "Referral"
    website = "Website"


class LossReason(str, Enum):
    budget = "budget"
    timing = "timing"
    competitor = "competitor"
    no_response = "no_response"
    not_interested = "not_interested"


class ProspectCreate(BaseModel):
    business_name: str = Field(..., min_length=1)
    owner_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    market: str = "Other"
    category: str = "Custom"
    weakness_score: int = Field(3, ge=1, le=5)
    weakness_notes: Optional[str] = None
    google_rating: Optional[float] = Field(None, ge=0, le=5)
    review_count: Optional[int] = Field(None, ge=0)
    social_facebook: Optional[str] = None
    social_instagram: Optional[str] = None
    social_linkedin: Optional[str] = None
    est_revenue: Optional[str] = None
    est_employees: Optional[str] = None
    lead_source: LeadSource = LeadSource.manual
    referral_source: Optional[str] = None
    assigned_to: Optional[int] = None
    tags: List[str] = []
    notes: Optional[str] = None


class ProspectUpdate(BaseModel):
    business_name: Optional[str] = Field(None, min_length=1)
    owner_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    market: Optional[str] = None
    category: Optional[str] = None
    weakness_score: Optional[int] = Field(None, ge=1, le=5)
    weakness_notes: Optional[str] = None
    google_rating: Optional[float] = Field(None, ge=0, le=5)
    review_count: Optional[int] = Field(None, ge=0)
    social_facebook: Optional[str] = None
    social_instagram: Optional[str] = None
    social_linkedin: Optional[str] = None
    est_revenue: Optional[str] = None
    est_employees: Optional[str] = None
    lead_source: Optional[LeadSource] = None
    referral_source: Optional[str] = None
    assigned_to: Optional[int] = None
    tags: Optional[List[str]] = None
    notes: Optional[str] = None
    loss_reason: Optional[LossReason] = None
    follow_up_paused: Optional[bool] = None


class BulkProspectUpdate(BaseModel):
    ids: List[int] = Field(..., min_length=1)
    assigned_to: Optional[int] = None
    market: Optional[str] = None
    category: Optional[str] = None
    follow_up_paused: Optional[bool] = None
    tags: Optional[List[str]] = None


class ProspectFilters(BaseModel):
    search: Optional[str] = None
    market: Optional[str] = None
    category: Optional[str] = None
    stage: Optional[PipelineStage] = None
    assigned_to: Optional[int] = None
    min_weakness: Optional[int] = Field(None, ge=1, le=5)
    sort_by: str = "weakness_score"
    sort_order: str = "desc"
    page: int = Field(1, ge=1)
    limit: int = Field(50, ge=1, le=200)


class StageChange(BaseModel):
    stage: PipelineStage
    notes: Optional[str] = None
    loss_reason: Optional[LossReason] = None


class ProspectResponse(BaseModel):
    id: int
    business_name: str
    owner_name: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    website: Optional[str]
    address: Optional[str]
    market: str
    category: str
    weakness_score: int
    weakness_notes: Optional[str]
    google_rating: Optional[float]
    review_count: Optional[int]
    social_facebook: Optional[str]
    social_instagram: Optional[str]
    social_linkedin: Optional[str]
    est_revenue: Optional[str]
    est_employees: Optional[str]
    lead_source: str
    referral_source: Optional[str]
    pipeline_stage: PipelineStage
    contacted: bool
    contacted_at: Optional[datetime]
    responded: bool
    responded_at: Optional[datetime]
    deal_closed: bool
    deal_closed_at: Optional[datetime]
    project_started: bool
    project_started_at: Optional[datetime]
    inputted_by: int
    assigned_to: int
    tags: List[str]
    notes: Optional[str]
    loss_reason: Optional[str]
    nurture_date: Optional[datetime]
    follow_up_paused: bool
    last_auto_email_at: Optional[datetime]
    follow_up_step: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PipelineHistoryResponse(BaseModel):
    id: int
    prospect_id: int
    from_stage: str
    to_stage: str
    changed_by: int
    notes: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True
