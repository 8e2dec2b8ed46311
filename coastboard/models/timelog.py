from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, Text, text

from coastboard.core.database import Base, UTCDateTime, utcnow


class TimeLog(Base):
    __tablename__ = "time_logs"
    __table_args__ = (
        # at most one running timer per user and task
        Index(
            "uq_time_logs_open_timer",
            "user_id",
            "task_id",
            unique=True,
            sqlite_where=text("end_time IS NULL"),
            postgresql_where=text("end_time IS NULL"),
        ),
        Index("ix_time_logs_user_start", "user_id", "start_time"),
    )

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False)
    start_time = Column(UTCDateTime, nullable=False)
    end_time = Column(UTCDateTime, nullable=True)
    duration = Column(Integer, default=0, nullable=False)  # seconds
    description = Column(Text, nullable=True)
    is_manual = Column(Boolean, default=False, nullable=False)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
