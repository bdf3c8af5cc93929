"""Tasks API endpoints.

Access Control:
- List tasks / board / get task: any role on the parent project
- Create, update, comment, trash, restore, permanent delete: owner or editor
- Viewers are read-only

Tasks of a trashed project cannot be changed until the project is restored.
"""

import logging
from typing import Annotated, List, Optional
from uuid import UUID, uuid4

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.enums import ActivityAction, EntityType, ProjectRole, TaskPriority, TaskStatus
from ..models.project import Project
from ..models.task import Task
from ..models.user import User
from ..schemas.task import (
    BoardColumn,
    BoardResponse,
    CommentCreate,
    TaskCreate,
    TaskResponse,
    TaskUpdate,
)
from ..services import lifecycle_service
from ..services.access_filter import project_tasks_query
from ..services.activity_service import activity_logger
from ..services.auth_service import get_current_user
from ..services.lifecycle_service import LifecycleView
from ..services.permission_service import can_edit_tasks, resolve_project_role
from ..services.project_helpers import (
    build_task_response,
    conflict,
    count_project_tasks,
    ensure_project_not_trashed,
    ensure_task_not_trashed,
    load_task,
    normalize_subtasks,
    require,
    verify_project_access,
    verify_task_access,
)
from ..utils.timeutils import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Tasks"])


def _ensure_assignable(project: Project, assigned_to: Optional[UUID]) -> None:
    if assigned_to is None:
        return
    if resolve_project_role(project, assigned_to) == ProjectRole.NONE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Assignee must be the owner or a member of the project",
        )


async def _log_task(task: Task, actor: User, action: ActivityAction, details: Optional[str] = None) -> None:
    await activity_logger.record(
        project_id=task.project_id,
        user_id=actor.id,
        action=action,
        entity_type=EntityType.TASK,
        entity_id=task.id,
        entity_title=task.title,
        details=details,
    )


# ============================================================================
# Project-scoped endpoints
# ============================================================================


@router.get(
    "/api/projects/{project_id}/tasks",
    response_model=List[TaskResponse],
    summary="List tasks of a project",
    responses={404: {"description": "Project not found"}},
)
async def list_tasks(
    project_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    view: LifecycleView = Query(LifecycleView.ACTIVE, description="active, archived or trash"),
    db: AsyncSession = Depends(get_db),
) -> List[TaskResponse]:
    """List tasks in one lifecycle view, by manual order then creation time."""
    await verify_project_access(db, project_id, current_user)

    result = await db.execute(
        project_tasks_query(project_id, view).order_by(Task.order.asc(), Task.created_at.asc())
    )
    return [build_task_response(t) for t in result.unique().scalars().all()]


@router.get(
    "/api/projects/{project_id}/board",
    response_model=BoardResponse,
    summary="Get the project board",
    responses={404: {"description": "Project not found"}},
)
async def get_board(
    project_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> BoardResponse:
    """
    Active tasks grouped into one column per status.

    Within a column tasks are sorted by priority (Urgent first), then order.
    """
    await verify_project_access(db, project_id, current_user)

    result = await db.execute(project_tasks_query(project_id, LifecycleView.ACTIVE))
    tasks = result.unique().scalars().all()

    columns = []
    for column_status in TaskStatus:
        in_column = [t for t in tasks if t.status == column_status.value]
        in_column.sort(key=lambda t: (-TaskPriority(t.priority).rank, t.order))
        columns.append(
            BoardColumn(
                status=column_status,
                tasks=[build_task_response(t) for t in in_column],
            )
        )

    return BoardResponse(project_id=project_id, columns=columns)


@router.post(
    "/api/projects/{project_id}/tasks",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a task",
    responses={
        400: {"description": "Assignee has no access to the project"},
        403: {"description": "Viewers cannot create tasks"},
        404: {"description": "Project not found"},
        409: {"description": "Project is in the trash"},
    },
)
async def create_task(
    project_id: UUID,
    task_data: TaskCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> TaskResponse:
    """
    Create a task in a project.

    - **title**, **description**: required
    - **status**: board column (default Todo)
    - **priority**: default Medium
    - **assigned_to**: optional, must hold a role on the project
    - **subtasks**: optional checklist

    The new task's order is the number of tasks the project already has.
    """
    project, role = await verify_project_access(db, project_id, current_user)
    require(can_edit_tasks(role), "Viewers cannot create tasks")
    ensure_project_not_trashed(project)
    _ensure_assignable(project, task_data.assigned_to)

    counts = await count_project_tasks(db, [project_id])

    task = Task(
        project_id=project_id,
        title=task_data.title,
        description=task_data.description,
        status=task_data.status.value,
        priority=task_data.priority.value,
        assigned_to=task_data.assigned_to,
        order=counts.get(project_id, 0),
        subtasks=normalize_subtasks(task_data.subtasks),
        comments=[],
    )
    db.add(task)
    await db.commit()

    task = await load_task(db, task.id)
    await _log_task(task, current_user, ActivityAction.TASK_CREATED)

    return build_task_response(task)


# ============================================================================
# Task endpoints
# ============================================================================


@router.get(
    "/api/tasks/{task_id}",
    response_model=TaskResponse,
    summary="Get a task",
    responses={404: {"description": "Task not found"}},
)
async def get_task(
    task_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> TaskResponse:
    task, _ = await verify_task_access(db, task_id, current_user)
    return build_task_response(task)


@router.put(
    "/api/tasks/{task_id}",
    response_model=TaskResponse,
    summary="Update a task",
    responses={
        400: {"description": "No fields to update or assignee without access"},
        403: {"description": "Viewers cannot edit tasks"},
        404: {"description": "Task not found"},
        409: {"description": "Task or project is in the trash, or archive state unchanged"},
    },
)
async def update_task(
    task_id: UUID,
    task_data: TaskUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> TaskResponse:
    """
    Update a task. Only fields that are sent are applied.

    Sending ``assigned_to: null`` unassigns the task; ``archived`` moves it
    into or out of the archive.
    """
    task, role = await verify_task_access(db, task_id, current_user)
    require(can_edit_tasks(role), "Viewers cannot edit tasks")

    update_data = task_data.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields to update provided",
        )

    ensure_project_not_trashed(task.project)
    ensure_task_not_trashed(task)

    changed: list[str] = []

    for field in ("title", "description", "order"):
        value = update_data.get(field)
        if value is not None and value != getattr(task, field):
            setattr(task, field, value)
            changed.append(field)

    for field in ("status", "priority"):
        value = update_data.get(field)
        if value is not None and value.value != getattr(task, field):
            setattr(task, field, value.value)
            changed.append(field)

    if "assigned_to" in update_data and update_data["assigned_to"] != task.assigned_to:
        _ensure_assignable(task.project, update_data["assigned_to"])
        task.assigned_to = update_data["assigned_to"]
        changed.append("assigned_to")

    if task_data.subtasks is not None:
        task.subtasks = normalize_subtasks(task_data.subtasks)
        changed.append("subtasks")

    archive_action: Optional[ActivityAction] = None
    archived = update_data.get("archived")
    if archived is not None:
        if not lifecycle_service.set_archived(task, archived):
            raise conflict("Task is already archived" if archived else "Task is not archived")
        archive_action = ActivityAction.TASK_ARCHIVED if archived else ActivityAction.TASK_UNARCHIVED

    task.updated_at = utcnow()
    await db.commit()

    task = await load_task(db, task_id)

    if changed:
        await _log_task(
            task, current_user, ActivityAction.TASK_UPDATED, f"Changed: {', '.join(changed)}"
        )
    if archive_action is not None:
        await _log_task(task, current_user, archive_action)

    return build_task_response(task)


@router.post(
    "/api/tasks/{task_id}/comments",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a task",
    responses={
        403: {"description": "Viewers cannot comment"},
        404: {"description": "Task not found"},
        409: {"description": "Task or project is in the trash"},
    },
)
async def add_comment(
    task_id: UUID,
    comment_data: CommentCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> TaskResponse:
    """Append a comment authored by the caller."""
    task, role = await verify_task_access(db, task_id, current_user)
    require(can_edit_tasks(role), "Viewers cannot comment on tasks")
    ensure_project_not_trashed(task.project)
    ensure_task_not_trashed(task)

    comment = {
        "id": uuid4().hex,
        "user": str(current_user.id),
        "text": comment_data.text,
        "created_at": utcnow().isoformat(),
    }
    # Reassign so the JSON column is flagged dirty
    task.comments = [*(task.comments or []), comment]
    await db.commit()

    task = await load_task(db, task_id)
    await _log_task(task, current_user, ActivityAction.TASK_COMMENTED)

    return build_task_response(task)


@router.delete(
    "/api/tasks/{task_id}",
    response_model=TaskResponse,
    summary="Move a task to the trash",
    responses={
        403: {"description": "Viewers cannot delete tasks"},
        404: {"description": "Task not found"},
        409: {"description": "Task is already in the trash"},
    },
)
async def delete_task(
    task_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> TaskResponse:
    """Move a task to the trash. Its order slot is not reused."""
    task, role = await verify_task_access(db, task_id, current_user)
    require(can_edit_tasks(role), "Viewers cannot delete tasks")
    ensure_project_not_trashed(task.project)

    if not lifecycle_service.move_to_trash(task):
        raise conflict("Task is already in the trash")

    await db.commit()
    task = await load_task(db, task_id)
    await _log_task(task, current_user, ActivityAction.TASK_DELETED)

    return build_task_response(task)


@router.post(
    "/api/tasks/{task_id}/restore",
    response_model=TaskResponse,
    summary="Restore a task from the trash",
    responses={
        403: {"description": "Viewers cannot restore tasks"},
        404: {"description": "Task not found"},
        409: {"description": "Task is not in the trash, or its project is"},
    },
)
async def restore_task(
    task_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> TaskResponse:
    """Restore a trashed task into the active view (never into the archive)."""
    task, role = await verify_task_access(db, task_id, current_user)
    require(can_edit_tasks(role), "Viewers cannot restore tasks")
    ensure_project_not_trashed(task.project)

    if not lifecycle_service.restore(task):
        raise conflict("Task is not in the trash")

    await db.commit()
    task = await load_task(db, task_id)
    await _log_task(task, current_user, ActivityAction.TASK_RESTORED)

    return build_task_response(task)


@router.delete(
    "/api/tasks/{task_id}/permanent",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Permanently delete a trashed task",
    responses={
        204: {"description": "Task deleted"},
        403: {"description": "Viewers cannot delete tasks"},
        404: {"description": "Task not found"},
        409: {"description": "Task is not in the trash"},
    },
)
async def permanently_delete_task(
    task_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> None:
    """Permanently delete a task from the trash. This action is irreversible."""
    task, role = await verify_task_access(db, task_id, current_user)
    require(can_edit_tasks(role), "Viewers cannot delete tasks")
    if not lifecycle_service.is_trashed(task):
        raise conflict("Only tasks in the trash can be permanently deleted")

    project_id, title = task.project_id, task.title
    await lifecycle_service.purge_task(db, task.id)
    await db.commit()

    await activity_logger.record(
        project_id=project_id,
        user_id=current_user.id,
        action=ActivityAction.TASK_PURGED,
        entity_type=EntityType.TASK,
        entity_id=task_id,
        entity_title=title,
    )
    logger.info(f"Task {task_id} permanently deleted")
    return None
