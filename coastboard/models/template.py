from sqlalchemy import JSON, Boolean, Column, ForeignKey, Integer, String, Text

from coastboard.core.database import Base, UTCDateTime, utcnow


class CrmTemplate(Base):
    __tablename__ = "crm_templates"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    subject_line = Column(String, nullable=False)
    body = Column(Text, nullable=False)
    category = Column(String, default="Custom", nullable=False, index=True)
    target_industry = Column(String, nullable=True)
    is_auto_template = Column(Boolean, default=False, nullable=False)
    auto_trigger = Column(String, nullable=True)
    tags = Column(JSON, default=list, nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)


class TemplateSend(Base):
    __tablename__ = "template_sends"

    id = Column(Integer, primary_key=True, index=True)
    template_id = Column(Integer, ForeignKey("crm_templates.id"), nullable=False, index=True)
    prospect_id = Column(Integer, ForeignKey("prospects.id"), nullable=False, index=True)
    sent_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    sent_at = Column(UTCDateTime, default=utcnow, nullable=False)
    is_automated = Column(Boolean, default=False, nullable=False)
    status = Column(String, default="sent", nullable=False)  # sent, opened, replied, bounced
    replied_at = Column(UTCDateTime, nullable=True)
    reply_sentiment = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
