from sqlalchemy import Boolean, Column, ForeignKey, Integer, String

from coastboard.core.database import Base, UTCDateTime, utcnow


class AutomationConfig(Base):
    __tablename__ = "automation_configs"

    id = Column(Integer, primary_key=True, index=True)
    trigger_name = Column(String, unique=True, nullable=False)
    enabled = Column(Boolean, default=True, nullable=False)
    template_id = Column(Integer, ForeignKey("crm_templates.id"), nullable=True)
    delay_days = Column(Integer, nullable=True)
    target_category = Column(String, nullable=True)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
