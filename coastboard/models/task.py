from sqlalchemy import JSON, Column, Float, ForeignKey, Integer, String, Text

from coastboard.core.database import Base, UTCDateTime, utcnow


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    status = Column(String, default="todo", nullable=False, index=True)  # todo, in_progress, in_review, done
    priority = Column(String, default="medium", nullable=False, index=True)  # low, medium, high, urgent
    visibility = Column(String, default="general", nullable=False)  # general, private
    # list of user ids
    assignee_ids = Column(JSON, default=list, nullable=False)
    assigned_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    deadline = Column(UTCDateTime, nullable=True, index=True)
    start_date = Column(UTCDateTime, nullable=True)
    estimated_hours = Column(Float, nullable=True)
    # list of {"id", "title", "done", "completed_at"}
    subtasks = Column(JSON, default=list, nullable=False)
    total_time_spent = Column(Integer, default=0, nullable=False)  # seconds
    daily_board_id = Column(Integer, ForeignKey("daily_boards.id"), nullable=True, index=True)
    completed_at = Column(UTCDateTime, nullable=True)
    # bumped on every update; guards against lost updates
    version = Column(Integer, default=1, nullable=False)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)
