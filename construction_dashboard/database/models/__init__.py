from .status import ProjectStatus, WorkStatus
from .user import User
from .project import Project
from .work import Work

__all__ = ["ProjectStatus", "WorkStatus", "User", "Project", "Work"]
