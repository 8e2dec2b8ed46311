from sqlalchemy import JSON, Column, ForeignKey, Integer, String, Text

from coastboard.core.database import Base, UTCDateTime, utcnow


class Activity(Base):
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True, index=True)
    action = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    # {"task_id", "previous_value", "new_value"}
    meta = Column("metadata", JSON, default=dict, nullable=False)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False, index=True)
