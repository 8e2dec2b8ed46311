from sqlalchemy import JSON, Boolean, Column, ForeignKey, Integer, String, Text

from coastboard.core.database import Base, UTCDateTime, utcnow


class DailyBoard(Base):
    __tablename__ = "daily_boards"

    id = Column(Integer, primary_key=True, index=True)
    # UTC midnight of the board's day
    date = Column(UTCDateTime, unique=True, nullable=False, index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)


class CustomBoard(Base):
    __tablename__ = "custom_boards"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    icon = Column(String, default="Layout", nullable=False)
    color = Column(String, default="blue", nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    task_ids = Column(JSON, default=list, nullable=False)
    is_pinned = Column(Boolean, default=False, nullable=False)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)
