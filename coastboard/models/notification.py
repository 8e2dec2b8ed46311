from sqlalchemy import JSON, Boolean, Column, ForeignKey, Integer, String, Text

from coastboard.core.database import Base, UTCDateTime, utcnow


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String, nullable=False)
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    read = Column(Boolean, default=False, nullable=False)
    # {"task_id", "project_id", "triggered_by"}
    meta = Column("metadata", JSON, default=dict, nullable=False)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False, index=True)
