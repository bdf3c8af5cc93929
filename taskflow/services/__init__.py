"""Business logic services."""

from .activity_service import ActivityLogger, activity_logger, list_project_activities
from .auth_service import (
    authenticate_user,
    create_access_token,
    create_user,
    get_current_user,
    get_optional_user,
    get_user_by_email,
    issue_access_token,
)
from .permission_service import (
    ProjectPermissions,
    can_delete_project,
    can_edit_project,
    can_edit_tasks,
    can_manage_members,
    can_permanent_delete_project,
    can_restore_project,
    get_project_permissions,
    has_project_access,
    resolve_project_role,
)
from .trash_service import TrashCleanupService, purge_expired_trash, trash_cleanup_service

__all__ = [
    "ActivityLogger",
    "ProjectPermissions",
    "TrashCleanupService",
    "activity_logger",
    "authenticate_user",
    "can_delete_project",
    "can_edit_project",
    "can_edit_tasks",
    "can_manage_members",
    "can_permanent_delete_project",
    "can_restore_project",
    "create_access_token",
    "create_user",
    "get_current_user",
    "get_optional_user",
    "get_project_permissions",
    "get_user_by_email",
    "issue_access_token",
    "has_project_access",
    "list_project_activities",
    "purge_expired_trash",
    "resolve_project_role",
    "trash_cleanup_service",
]
