from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text

from coastboard.core.database import Base, UTCDateTime, utcnow


class StickyNote(Base):
    __tablename__ = "sticky_notes"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    color = Column(String, default="yellow", nullable=False)
    category = Column(String, default="other", nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    visibility = Column(String, default="personal", nullable=False)  # team, personal
    is_pinned = Column(Boolean, default=False, nullable=False)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)
