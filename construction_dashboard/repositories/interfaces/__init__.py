from .user import IUserRepository
from .project import IProjectRepository
from .work import IWorkRepository

__all__ = ["IUserRepository", "IProjectRepository", "IWorkRepository"]
