"""Project Members API endpoints.

Access Control:
- List members: any role on the project (owner, editor, viewer)
- Add / change role / remove: project owner only

The owner is implied by ``created_by`` and is never stored as a member.
"""

from typing import Annotated, List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.enums import ActivityAction, EntityType
from ..models.project import Project
from ..models.project_member import ProjectMember
from ..models.user import User
from ..schemas.project import MemberInput, MemberResponse, MemberRoleUpdate
from ..services.activity_service import activity_logger
from ..services.auth_service import get_current_user, get_user_by_id
from ..services.permission_service import can_manage_members, canonical_id, member_user_id
from ..services.project_helpers import (
    ensure_project_not_trashed,
    load_project,
    member_response,
    require,
    verify_project_access,
)

router = APIRouter(prefix="/api/projects/{project_id}/members", tags=["Project Members"])

OWNER_ONLY = "Only the project owner can manage members"


def _find_member(project: Project, user_id: UUID) -> ProjectMember:
    wanted = canonical_id(user_id)
    for entry in project.members:
        if member_user_id(entry) == wanted:
            return entry
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"User {user_id} is not a member of this project",
    )


async def _reload_members(db: AsyncSession, project_id: UUID) -> List[MemberResponse]:
    project = await load_project(db, project_id)
    return [member_response(m) for m in project.members]


async def _log_members_change(project: Project, actor: User, details: str) -> None:
    await activity_logger.record(
        project_id=project.id,
        user_id=actor.id,
        action=ActivityAction.MEMBERS_UPDATED,
        entity_type=EntityType.PROJECT,
        entity_id=project.id,
        entity_title=project.title,
        details=details,
    )


@router.get(
    "",
    response_model=List[MemberResponse],
    summary="List project members",
    responses={404: {"description": "Project not found"}},
)
async def list_members(
    project_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> List[MemberResponse]:
    """List members with their effective roles. Legacy entries show as editors."""
    project, _ = await verify_project_access(db, project_id, current_user)
    return [member_response(m) for m in project.members]


@router.post(
    "",
    response_model=List[MemberResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Add a member to a project",
    responses={
        400: {"description": "Unknown user, the owner, or already a member"},
        403: {"description": "Only the owner can manage members"},
        404: {"description": "Project not found"},
        409: {"description": "Project is in the trash"},
    },
)
async def add_member(
    project_id: UUID,
    member_data: MemberInput,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> List[MemberResponse]:
    """
    Add a member with a role.

    - **user_id**: ID of the user to add
    - **role**: editor (default) or viewer
    """
    project, role = await verify_project_access(db, project_id, current_user)
    require(can_manage_members(role), OWNER_ONLY)
    ensure_project_not_trashed(project)

    if canonical_id(member_data.user_id) == canonical_id(project.created_by):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="The project owner cannot be added as a member",
        )

    target = await get_user_by_id(db, member_data.user_id)
    if target is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"User with ID {member_data.user_id} not found",
        )

    wanted = canonical_id(member_data.user_id)
    if any(member_user_id(m) == wanted for m in project.members):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User is already a member of this project",
        )

    project.members.append(
        ProjectMember(
            project_id=project.id,
            user_id=member_data.user_id,
            role=member_data.role.value,
        )
    )
    await db.commit()

    await _log_members_change(
        project, current_user, f"Added {target.email} as {member_data.role.value}"
    )
    return await _reload_members(db, project_id)


@router.put(
    "/{user_id}",
    response_model=List[MemberResponse],
    summary="Change a member's role",
    responses={
        403: {"description": "Only the owner can manage members"},
        404: {"description": "Project or member not found"},
        409: {"description": "Project is in the trash"},
    },
)
async def update_member_role(
    project_id: UUID,
    user_id: UUID,
    role_data: MemberRoleUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> List[MemberResponse]:
    """Change a member's role. Legacy entries get an explicit role."""
    project, role = await verify_project_access(db, project_id, current_user)
    require(can_manage_members(role), OWNER_ONLY)
    ensure_project_not_trashed(project)

    entry = _find_member(project, user_id)
    entry.role = role_data.role.value
    await db.commit()

    await _log_members_change(
        project, current_user, f"Changed role of {user_id} to {role_data.role.value}"
    )
    return await _reload_members(db, project_id)


@router.delete(
    "/{user_id}",
    response_model=List[MemberResponse],
    summary="Remove a member",
    responses={
        403: {"description": "Only the owner can manage members"},
        404: {"description": "Project or member not found"},
        409: {"description": "Project is in the trash"},
    },
)
async def remove_member(
    project_id: UUID,
    user_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> List[MemberResponse]:
    """Remove a member. The removed user immediately loses access."""
    project, role = await verify_project_access(db, project_id, current_user)
    require(can_manage_members(role), OWNER_ONLY)
    ensure_project_not_trashed(project)

    entry = _find_member(project, user_id)
    project.members.remove(entry)
    await db.commit()

    await _log_members_change(project, current_user, f"Removed {user_id}")
    return await _reload_members(db, project_id)
