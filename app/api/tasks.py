"""Task API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from app.api.deps import CurrentUser, DBSession
from app.models.stats import TaskStatsResponse
from app.models.task import TaskCreate, TaskListResponse, TaskResponse, TaskUpdate
from app.services.tasks import (
    TaskFilters,
    create_task,
    delete_task,
    get_task_for_actor,
    get_task_stats,
    list_room_tasks,
    list_user_tasks,
    parse_room_filter,
    update_task,
)

router = APIRouter(prefix="/api/tasks", tags=["Tasks"])


def _task_list(tasks) -> TaskListResponse:
    return TaskListResponse(
        tasks=[TaskResponse.model_validate(t) for t in tasks],
        total=len(tasks),
    )


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task_endpoint(
    session: DBSession,
    current_user: CurrentUser,
    task_data: TaskCreate,
) -> TaskResponse:
    """Create a new task, personal or inside one of the user's rooms."""
    task = create_task(session, current_user.id, task_data)
    return TaskResponse.model_validate(task)


@router.get("", response_model=TaskListResponse)
def list_tasks_endpoint(
    session: DBSession,
    current_user: CurrentUser,
    status_filter: str | None = Query(default=None, alias="status", description="pending, in_progress, completed or all"),
    priority: str | None = Query(default=None, description="low, medium, high, urgent or all"),
    room_id: str | None = Query(default=None, alias="roomId", description="Room id, or 'personal' for tasks without a room"),
    search: str | None = Query(default=None, max_length=200, description="Match in title or description"),
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_order: str | None = Query(default=None, alias="sortOrder"),
) -> TaskListResponse:
    """List the authenticated user's tasks."""
    filters = TaskFilters.from_query(
        status=status_filter,
        priority=priority,
        room_id=room_id,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return _task_list(list_user_tasks(session, current_user.id, filters))


@router.get("/stats", response_model=TaskStatsResponse)
def task_stats_endpoint(
    session: DBSession,
    current_user: CurrentUser,
    room_id: str | None = Query(default=None, alias="roomId"),
) -> TaskStatsResponse:
    """Counts over the user's tasks, optionally scoped to personal or one room."""
    return get_task_stats(session, current_user.id, parse_room_filter(room_id))


@router.get("/room/{room_id}", response_model=TaskListResponse)
def list_room_tasks_endpoint(
    session: DBSession,
    current_user: CurrentUser,
    room_id: UUID,
    status_filter: str | None = Query(default=None, alias="status"),
    priority: str | None = Query(default=None),
    search: str | None = Query(default=None, max_length=200),
) -> TaskListResponse:
    """List every task in a room the user belongs to."""
    filters = TaskFilters.from_query(status=status_filter, priority=priority, search=search)
    return _task_list(list_room_tasks(session, current_user.id, room_id, filters))


@router.get("/{task_id}", response_model=TaskResponse)
def get_task_endpoint(
    session: DBSession,
    current_user: CurrentUser,
    task_id: UUID,
) -> TaskResponse:
    """Get a specific task by ID."""
    task = get_task_for_actor(session, current_user.id, task_id)
    return TaskResponse.model_validate(task)


@router.put("/{task_id}", response_model=TaskResponse)
def update_task_endpoint(
    session: DBSession,
    current_user: CurrentUser,
    task_id: UUID,
    task_data: TaskUpdate,
) -> TaskResponse:
    """Update a task."""
    task = update_task(session, current_user.id, task_id, task_data)
    return TaskResponse.model_validate(task)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task_endpoint(
    session: DBSession,
    current_user: CurrentUser,
    task_id: UUID,
) -> None:
    """Delete a task."""
    delete_task(session, current_user.id, task_id)
