from sqlalchemy import JSON, Column, ForeignKey, Integer, Text

from coastboard.core.database import Base, UTCDateTime, utcnow


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    text = Column(Text, nullable=False)
    tagged_user_ids = Column(JSON, default=list, nullable=False)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
