"""API routers package.

This package contains all FastAPI routers for the application.
Each router handles a specific domain of the API.
"""

from .activities import router as activities_router
from .admin import router as admin_router
from .auth import router as auth_router
from .project_members import router as project_members_router
from .projects import router as projects_router
from .tasks import router as tasks_router
from .users import router as users_router

__all__ = [
    "activities_router",
    "admin_router",
    "auth_router",
    "project_members_router",
    "projects_router",
    "tasks_router",
    "users_router",
]
