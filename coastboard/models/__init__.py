from .activity import Activity
from .automation import AutomationConfig
from .board import CustomBoard, DailyBoard
from .comment import Comment
from .crm_activity import CrmActivity
from .invitation import Invitation
from .notification import Notification
from .project import Project
from .prospect import PipelineHistory, Prospect
from .sticky_note import StickyNote
from .task import Task
from .template import CrmTemplate, TemplateSend
from .timelog import TimeLog
from .user import User

__all__ = [
    "Activity",
    "AutomationConfig",
    "Comment",
    "CrmActivity",
    "CrmTemplate",
    "CustomBoard",
    "DailyBoard",
    "Invitation",
    "Notification",
    "PipelineHistory",
    "Project",
    "Prospect",
    "StickyNote",
    "Task",
    "TemplateSend",
    "TimeLog",
    "User",
]
