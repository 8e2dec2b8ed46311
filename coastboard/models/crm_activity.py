from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text

from coastboard.core.database import Base, UTCDateTime, utcnow


class CrmActivity(Base):
    __tablename__ = "crm_activities"

    id = Column(Integer, primary_key=True, index=True)
    prospect_id = Column(Integer, ForeignKey("prospects.id"), nullable=False, index=True)
    performed_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    activity_type = Column(String, nullable=False)
    subject = Column(String, nullable=False)
    details = Column(Text, nullable=True)
    template_id = Column(Integer, ForeignKey("crm_templates.id"), nullable=True)
    outcome = Column(String, nullable=True)
    follow_up_date = Column(UTCDateTime, nullable=True)
    is_automated = Column(Boolean, default=False, nullable=False)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False, index=True)
