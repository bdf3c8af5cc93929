"""Projects API endpoints.

Access Control:
- List projects: scoped to projects the caller owns or is a member of
- Get project: any role (owner, editor, viewer); others get 404
- Update project: owner or editor; changing members is owner-only
- Move to trash / restore: owner or editor
- Permanent delete: owner only, and only from the trash
"""

import logging
from typing import Annotated, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.enums import ActivityAction, EntityType
from ..models.project import Project
from ..models.user import User
from ..schemas.project import ProjectCreate, ProjectResponse, ProjectUpdate
from ..services import lifecycle_service
from ..services.access_filter import visible_projects_query
from ..services.activity_service import activity_logger
from ..services.auth_service import get_current_user, get_optional_user
from ..services.lifecycle_service import LifecycleView
from ..services.permission_service import (
    can_delete_project,
    can_edit_project,
    can_manage_members,
    can_permanent_delete_project,
    can_restore_project,
)
from ..services.project_helpers import (
    build_member_rows,
    build_project_response,
    conflict,
    count_project_tasks,
    ensure_project_not_trashed,
    load_project,
    require,
    verify_project_access,
)
from ..utils.timeutils import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/projects", tags=["Projects"])


async def _list_projects(
    db: AsyncSession,
    current_user: Optional[User],
    view: LifecycleView,
) -> List[ProjectResponse]:
    user_id = current_user.id if current_user else None
    query = visible_projects_query(user_id, view)
    if view == LifecycleView.TRASH:
        query = query.order_by(Project.deleted_at.desc())
    elif view == LifecycleView.ARCHIVED:
        query = query.order_by(Project.archived_at.desc())
    else:
        query = query.order_by(Project.updated_at.desc())

    result = await db.execute(query)
    projects = result.unique().scalars().all()

    counts = await count_project_tasks(db, [p.id for p in projects])
    return [
        build_project_response(p, user_id, counts.get(p.id, 0))
        for p in projects
    ]


@router.get(
    "",
    response_model=List[ProjectResponse],
    summary="List active projects",
    description="Active projects visible to the caller, most recently updated first.",
)
async def list_projects(
    current_user: Annotated[Optional[User], Depends(get_optional_user)],
    db: AsyncSession = Depends(get_db),
) -> List[ProjectResponse]:
    """
    List active projects.

    Authenticated callers see projects they own or are a member of.
    Anonymous callers see nothing unless public browsing is enabled.
    """
    return await _list_projects(db, current_user, LifecycleView.ACTIVE)


@router.get(
    "/archive",
    response_model=List[ProjectResponse],
    summary="List archived projects",
)
async def list_archived_projects(
    current_user: Annotated[Optional[User], Depends(get_optional_user)],
    db: AsyncSession = Depends(get_db),
) -> List[ProjectResponse]:
    return await _list_projects(db, current_user, LifecycleView.ARCHIVED)


@router.get(
    "/trash",
    response_model=List[ProjectResponse],
    summary="List trashed projects",
    description="Trashed projects with the date each will be permanently deleted.",
)
async def list_trashed_projects(
    current_user: Annotated[Optional[User], Depends(get_optional_user)],
    db: AsyncSession = Depends(get_db),
) -> List[ProjectResponse]:
    return await _list_projects(db, current_user, LifecycleView.TRASH)


@router.post(
    "",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new project",
    responses={
        201: {"description": "Project created successfully"},
        400: {"description": "Unknown member user"},
        401: {"description": "Not authenticated"},
    },
)
async def create_project(
    project_data: ProjectCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> ProjectResponse:
    """
    Create a project owned by the caller.

    - **title**: Project title (required)
    - **description**: Optional description
    - **due_date**: Optional due date
    - **members**: Optional initial members with roles
    """
    project = Project(
        title=project_data.title,
        description=project_data.description,
        due_date=project_data.due_date,
        created_by=current_user.id,
    )
    db.add(project)
    await db.flush()

    for row in await build_member_rows(db, project, project_data.members):
        db.add(row)

    await db.commit()

    project = await load_project(db, project.id)

    await activity_logger.record(
        project_id=project.id,
        user_id=current_user.id,
        action=ActivityAction.PROJECT_CREATED,
        entity_type=EntityType.PROJECT,
        entity_id=project.id,
        entity_title=project.title,
    )

    return build_project_response(project, current_user.id)


@router.get(
    "/{project_id}",
    response_model=ProjectResponse,
    summary="Get a project",
    responses={404: {"description": "Project not found"}},
)
async def get_project(
    project_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> ProjectResponse:
    """Get a project the caller has any role on."""
    project, _ = await verify_project_access(db, project_id, current_user)
    counts = await count_project_tasks(db, [project.id])
    return build_project_response(project, current_user.id, counts.get(project.id, 0))


@router.put(
    "/{project_id}",
    response_model=ProjectResponse,
    summary="Update a project",
    responses={
        400: {"description": "No fields to update or unknown member"},
        403: {"description": "Viewer, or non-owner changing members"},
        404: {"description": "Project not found"},
        409: {"description": "Project is in the trash or archive state unchanged"},
    },
)
async def update_project(
    project_id: UUID,
    project_data: ProjectUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> ProjectResponse:
    """
    Update an existing project.

    - **title**, **description**, **due_date**: metadata (owner or editor)
    - **archived**: move into or out of the archive (owner or editor)
    - **members**: full replacement membership list (owner only)

    Nothing is written when any part of the request is not permitted.
    """
    project, role = await verify_project_access(db, project_id, current_user)

    update_data = project_data.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields to update provided",
        )

    require(can_edit_project(role), "Viewers cannot edit this project")
    if "members" in update_data:
        require(can_manage_members(role), "Only the project owner can manage members")
    ensure_project_not_trashed(project)

    actions: list[ActivityAction] = []

    for field in ("title", "description", "due_date"):
        if field not in update_data:
            continue
        value = update_data[field]
        if value is None and field != "due_date":
            continue
        setattr(project, field, value)
        if ActivityAction.PROJECT_UPDATED not in actions:
            actions.append(ActivityAction.PROJECT_UPDATED)

    archived = update_data.get("archived")
    if archived is not None:
        if not lifecycle_service.set_archived(project, archived):
            raise conflict(
                "Project is already archived" if archived else "Project is not archived"
            )
        actions.append(
            ActivityAction.PROJECT_ARCHIVED if archived else ActivityAction.PROJECT_UNARCHIVED
        )

    if project_data.members is not None:
        new_rows = await build_member_rows(db, project, project_data.members)
        project.members.clear()
        await db.flush()
        project.members.extend(new_rows)
        actions.append(ActivityAction.MEMBERS_UPDATED)

    project.updated_at = utcnow()
    await db.commit()

    project = await load_project(db, project_id)

    for action in actions:
        await activity_logger.record(
            project_id=project.id,
            user_id=current_user.id,
            action=action,
            entity_type=EntityType.PROJECT,
            entity_id=project.id,
            entity_title=project.title,
        )

    counts = await count_project_tasks(db, [project.id])
    return build_project_response(project, current_user.id, counts.get(project.id, 0))


@router.delete(
    "/{project_id}",
    response_model=ProjectResponse,
    summary="Move a project to the trash",
    responses={
        403: {"description": "Viewers cannot delete projects"},
        404: {"description": "Project not found"},
        409: {"description": "Project is already in the trash"},
    },
)
async def delete_project(
    project_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> ProjectResponse:
    """
    Move a project to the trash.

    Trashed projects are permanently deleted after the retention period
    unless restored.
    """
    project, role = await verify_project_access(db, project_id, current_user)
    require(can_delete_project(role), "Viewers cannot delete this project")

    if not lifecycle_service.move_to_trash(project):
        raise conflict("Project is already in the trash")

    await db.commit()
    project = await load_project(db, project_id)

    await activity_logger.record(
        project_id=project.id,
        user_id=current_user.id,
        action=ActivityAction.PROJECT_DELETED,
        entity_type=EntityType.PROJECT,
        entity_id=project.id,
        entity_title=project.title,
    )

    counts = await count_project_tasks(db, [project.id])
    return build_project_response(project, current_user.id, counts.get(project.id, 0))


@router.post(
    "/{project_id}/restore",
    response_model=ProjectResponse,
    summary="Restore a project from the trash",
    responses={
        403: {"description": "Viewers cannot restore projects"},
        404: {"description": "Project not found"},
        409: {"description": "Project is not in the trash"},
    },
)
async def restore_project(
    project_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> ProjectResponse:
    """Restore a trashed project into the active view (never into the archive)."""
    project, role = await verify_project_access(db, project_id, current_user)
    require(can_restore_project(role), "Viewers cannot restore this project")

    if not lifecycle_service.restore(project):
        raise conflict("Project is not in the trash")

    await db.commit()
    project = await load_project(db, project_id)

    await activity_logger.record(
        project_id=project.id,
        user_id=current_user.id,
        action=ActivityAction.PROJECT_RESTORED,
        entity_type=EntityType.PROJECT,
        entity_id=project.id,
        entity_title=project.title,
    )

    counts = await count_project_tasks(db, [project.id])
    return build_project_response(project, current_user.id, counts.get(project.id, 0))


@router.delete(
    "/{project_id}/permanent",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Permanently delete a trashed project",
    responses={
        204: {"description": "Project and all its tasks deleted"},
        403: {"description": "Only the owner can permanently delete"},
        404: {"description": "Project not found"},
        409: {"description": "Project is not in the trash"},
    },
)
async def permanently_delete_project(
    project_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> None:
    """
    Permanently delete a project from the trash.

    All tasks of the project are removed too, whatever their own state.
    This action is irreversible.
    """
    project, role = await verify_project_access(db, project_id, current_user)
    require(
        can_permanent_delete_project(role),
        "Only the project owner can permanently delete a project",
    )
    if not lifecycle_service.is_trashed(project):
        raise conflict("Only projects in the trash can be permanently deleted")

    removed_tasks = await lifecycle_service.purge_project(db, project.id)
    await db.commit()
    logger.info(f"Project {project_id} permanently deleted with {removed_tasks} task(s)")
    return None
