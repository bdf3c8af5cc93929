"""Project role resolution and permission checks.

Roles on a project:
- Owner: the creator. Manages members, permanently deletes the project.
- Editor: edits project metadata, moves the project to/from trash, manages tasks.
- Viewer: read-only access to the project and its tasks.
- None: no access; reads must look exactly like a missing project.

Membership entries come in two shapes and both are accepted everywhere:
- legacy: a bare user reference (UUID, string id or a User object). These
  predate per-member roles and always meant "editor".
- current: a ``{user, role}`` record (a ProjectMember row or a mapping). A row
  whose role is NULL is a migrated legacy entry and also resolves as editor.

All functions here are pure: they read the project as loaded and take the
acting user's id explicitly.
"""

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any, Optional
from uuid import UUID

from ..models.enums import MemberRole, ProjectRole

_OWNER_KEYS = ("created_by", "createdBy")
_MEMBER_USER_KEYS = ("user", "user_id")


def canonical_id(value: Any) -> Optional[str]:
    """
    Canonical string form of an identifier.

    Accepts UUIDs, strings in any UUID spelling, populated objects exposing
    ``id`` and mappings with an ``id`` key. Non-UUID strings are compared as-is.
    """
    if value is None:
        return None
    if isinstance(value, Mapping):
        return canonical_id(value.get("id"))
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            return str(UUID(value))
        except ValueError:
            return value
    nested = getattr(value, "id", None)
    if nested is not None:
        return canonical_id(nested)
    return str(value)


def _get(source: Any, key: str) -> Any:
    if isinstance(source, Mapping):
        return source.get(key)
    return getattr(source, key, None)


def _owner_reference(project: Any) -> Any:
    for key in _OWNER_KEYS:
        owner = _get(project, key)
        if owner is not None:
            return owner
    return None


def _members(project: Any) -> list:
    return list(_get(project, "members") or [])


def _is_bare_reference(entry: Any) -> bool:
    if isinstance(entry, (UUID, str)):
        return True
    if isinstance(entry, Mapping):
        return not any(key in entry for key in _MEMBER_USER_KEYS)
    return not any(hasattr(entry, key) for key in _MEMBER_USER_KEYS)


def member_user_id(entry: Any) -> Optional[str]:
    """
    Extract the member's user id from either membership shape.

    Tries, in order: the nested populated user's id, the raw user field,
    then the entry itself as a bare reference.
    """
    if entry is None:
        return None
    if _is_bare_reference(entry):
        return canonical_id(entry)
    for key in _MEMBER_USER_KEYS:
        user = _get(entry, key)
        if user is not None:
            return canonical_id(user)
    return None


def member_role(entry: Any) -> MemberRole:
    """
    Effective role granted by a membership entry.

    Bare references and entries without a role default to editor; an
    explicit role is used unless it claims ownership.
    """
    if entry is None or _is_bare_reference(entry):
        return MemberRole.EDITOR
    role = _get(entry, "role")
    if isinstance(role, MemberRole):
        return role
    if role is None or role == ProjectRole.OWNER.value:
        return MemberRole.EDITOR
    try:
        return MemberRole(role)
    except ValueError:
        return MemberRole.EDITOR


def resolve_project_role(project: Any, user_id: Any) -> ProjectRole:
    """
    Compute a user's role on a project.

    Args:
        project: Project model, mapping, or None
        user_id: Acting user's id in any representation, or None

    Returns:
        ProjectRole.OWNER, EDITOR, VIEWER or NONE
    """
    uid = canonical_id(user_id)
    if project is None or uid is None:
        return ProjectRole.NONE

    owner_id = canonical_id(_owner_reference(project))
    if owner_id is not None and owner_id == uid:
        return ProjectRole.OWNER

    for entry in _members(project):
        if member_user_id(entry) == uid:
            return ProjectRole(member_role(entry).value)

    return ProjectRole.NONE


# ============================================================================
# Permission gates
# ============================================================================


def _as_role(role: Any) -> ProjectRole:
    if isinstance(role, ProjectRole):
        return role
    if role is None:
        return ProjectRole.NONE
    return ProjectRole(role)


def has_project_access(role: ProjectRole) -> bool:
    """Any resolved role may read the project and its tasks."""
    return _as_role(role).rank > ProjectRole.NONE.rank


def can_edit_project(role: ProjectRole) -> bool:
    """Owner or editor may edit metadata and toggle the archive flag."""
    return _as_role(role).rank >= ProjectRole.EDITOR.rank


def can_manage_members(role: ProjectRole) -> bool:
    """Only the owner may change the membership list or member roles."""
    return _as_role(role) == ProjectRole.OWNER


def can_delete_project(role: ProjectRole) -> bool:
    return can_edit_project(role)


def can_restore_project(role: ProjectRole) -> bool:
    return can_edit_project(role)


def can_permanent_delete_project(role: ProjectRole) -> bool:
    return _as_role(role) == ProjectRole.OWNER


def can_edit_tasks(role: ProjectRole) -> bool:
    """Create/update/comment/archive/delete/restore tasks. Viewers are read-only."""
    return can_edit_project(role)


@dataclass(frozen=True)
class ProjectPermissions:
    """Capabilities derived from a resolved role."""

    role: ProjectRole
    can_view: bool
    can_edit_project: bool
    can_manage_members: bool
    can_delete_project: bool
    can_restore_project: bool
    can_permanent_delete_project: bool
    can_edit_tasks: bool

    @classmethod
    def for_role(cls, role: ProjectRole) -> "ProjectPermissions":
        role = _as_role(role)
        return cls(
            role=role,
            can_view=has_project_access(role),
            can_edit_project=can_edit_project(role),
            can_manage_members=can_manage_members(role),
            can_delete_project=can_delete_project(role),
            can_restore_project=can_restore_project(role),
            can_permanent_delete_project=can_permanent_delete_project(role),
            can_edit_tasks=can_edit_tasks(role),
        )

    def as_flags(self) -> dict[str, bool]:
        """Boolean capabilities only, for API responses."""
        flags = asdict(self)
        flags.pop("role")
        return flags


def get_project_permissions(project: Any, user_id: Any) -> ProjectPermissions:
    """Resolve the role and derive every capability in one step."""
    return ProjectPermissions.for_role(resolve_project_role(project, user_id))
