from sqlalchemy import JSON, Column, ForeignKey, Integer, String, Text

from coastboard.core.database import Base, UTCDateTime, utcnow


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    status = Column(String, default="active", index=True)  # active, completed, on_hold, archived
    start_date = Column(UTCDateTime, nullable=False)
    deadline = Column(UTCDateTime, nullable=False, index=True)
    progress = Column(Integer, default=0, nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    tags = Column(JSON, default=list, nullable=False)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)
