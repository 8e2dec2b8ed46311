from sqlalchemy import JSON, Boolean, Column, Float, ForeignKey, Integer, String, Text, UniqueConstraint

from coastboard.core.database import Base, UTCDateTime, utcnow


class Prospect(Base):
    __tablename__ = "prospects"
    __table_args__ = (UniqueConstraint("business_name", "market", name="uq_prospects_name_market"),)

    id = Column(Integer, primary_key=True, index=True)
    business_name = Column(String, nullable=False)
    owner_name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    website = Column(String, nullable=True)
    address = Column(String, nullable=True)
    market = Column(String, default="Other", nullable=False)
    category = Column(String, default="Custom", nullable=False)
    weakness_score = Column(Integer, default=3, nullable=False, index=True)  # 1-5
    weakness_notes = Column(Text, nullable=True)
    google_rating = Column(Float, nullable=True)
    review_count = Column(Integer, nullable=True)
    social_facebook = Column(String, nullable=True)
    social_instagram = Column(String, nullable=True)
    social_linkedin = Column(String, nullable=True)
    est_revenue = Column(String, nullable=True)
    est_employees = Column(String, nullable=True)
    lead_source = Column(String, default="Manual", nullable=False)
    referral_source = Column(String, nullable=True)
    pipeline_stage = Column(String, default="new_lead", nullable=False, index=True)
    contacted = Column(Boolean, default=False, nullable=False)
    contacted_at = Column(UTCDateTime, nullable=True)
    responded = Column(Boolean, default=False, nullable=False)
    responded_at = Column(UTCDateTime, nullable=True)
    deal_closed = Column(Boolean, default=False, nullable=False)
    deal_closed_at = Column(UTCDateTime, nullable=True)
    project_started = Column(Boolean, default=False, nullable=False)
    project_started_at = Column(UTCDateTime, nullable=True)
    inputted_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    assigned_to = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    tags = Column(JSON, default=list, nullable=False)
    notes = Column(Text, nullable=True)
    loss_reason = Column(String, nullable=True)  # budget, timing, competitor, no_response, not_interested
    nurture_date = Column(UTCDateTime, nullable=True)
    follow_up_paused = Column(Boolean, default=False, nullable=False)
    last_auto_email_at = Column(UTCDateTime, nullable=True)
    follow_up_step = Column(Integer, default=0, nullable=False)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)


class PipelineHistory(Base):
    __tablename__ = "pipeline_history"

    id = Column(Integer, primary_key=True, index=True)
    prospect_id = Column(Integer, ForeignKey("prospects.id"), nullable=False, index=True)
    from_stage = Column(String, nullable=False)
    to_stage = Column(String, nullable=False)
    changed_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
