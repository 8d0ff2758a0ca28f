"""Task service for CRUD operations, listing and statistics."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Union
from uuid import UUID

from sqlalchemy import case
from sqlmodel import Session, col, or_, select
from sqlmodel.sql.expression import SelectOfScalar

from app.db.queries import LIKE_ESCAPE, contains_pattern
from app.errors import NotFoundError, ValidationError
from app.models.room import Room
from app.models.stats import TaskStatsResponse
from app.models.task import Priority, Task, TaskCreate, TaskStatus, TaskUpdate
from app.services.authorization import (
    can_access_task,
    can_create_task_in,
    can_delete_task,
    require,
)
from app.services.rooms import get_room, get_room_for_member
from app.services.stats import summarize_tasks
from app.services.users import (
    adjust_task_counters,
    apply_task_completion,
    require_user,
)

logger = logging.getLogger(__name__)

PERSONAL_ROOM_FILTER = "personal"
ALL_FILTER = "all"


@dataclass(frozen=True)
class AnyRoom:
    """No restriction on the room."""


@dataclass(frozen=True)
class NoRoom:
    """Personal tasks only."""


@dataclass(frozen=True)
class SpecificRoom:
    room_id: UUID


RoomFilter = Union[AnyRoom, NoRoom, SpecificRoom]


def parse_room_filter(raw: str | None) -> RoomFilter:
    """Map the ``roomId`` query value onto a RoomFilter."""
    if raw is None or raw.strip() in ("", ALL_FILTER):
        return AnyRoom()
    if raw.strip() == PERSONAL_ROOM_FILTER:
        return NoRoom()
    try:
        return SpecificRoom(UUID(raw.strip()))
    except ValueError:
        raise ValidationError("Invalid room id", details={"field": "roomId"})


def apply_room_filter(query: SelectOfScalar, room_filter: RoomFilter) -> SelectOfScalar:
    if isinstance(room_filter, NoRoom):
        return query.where(col(Task.room_id).is_(None))
    if isinstance(room_filter, SpecificRoom):
        return query.where(Task.room_id == room_filter.room_id)
    return query


# Compared through the column so values bind as stored enum names
PRIORITY_RANK = case(
    (Task.priority == Priority.LOW, 0),
    (Task.priority == Priority.MEDIUM, 1),
    (Task.priority == Priority.HIGH, 2),
    (Task.priority == Priority.URGENT, 3),
)

SORT_COLUMNS = {
    "createdAt": Task.created_at,
    "updatedAt": Task.updated_at,
    "dueDate": Task.due_date,
    "priority": PRIORITY_RANK,
    "title": Task.title,
    "status": Task.status,
}
SORT_ORDERS = ("asc", "desc")


def _parse_enum(enum_cls, raw: str | None, field: str):
    if raw is None or raw.strip() in ("", ALL_FILTER):
        return None
    try:
        return enum_cls(raw.strip())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(
            f"Invalid {field}, expected one of: {allowed}",
            details={"field": field},
        )


@dataclass
class TaskFilters:
    """Parsed listing options for a task query."""

    status: TaskStatus | None = None
    priority: Priority | None = None
    room: RoomFilter = AnyRoom()
    search: str | None = None
    sort_by: str = "createdAt"
    sort_order: str = "desc"

    @classmethod
    def from_query(
        cls,
        status: str | None = None,
        priority: str | None = None,
        room_id: str | None = None,
        search: str | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> "TaskFilters":
        """Validate raw query-string values."""
        sort_by = sort_by or "createdAt"
        if sort_by not in SORT_COLUMNS:
            raise ValidationError(
                f"Invalid sortBy, expected one of: {', '.join(SORT_COLUMNS)}",
                details={"field": "sortBy"},
            )
        sort_order = (sort_order or "desc").lower()
        if sort_order not in SORT_ORDERS:
            raise ValidationError("Invalid sortOrder, expected asc or desc", details={"field": "sortOrder"})

        return cls(
            status=_parse_enum(TaskStatus, status, "status"),
            priority=_parse_enum(Priority, priority, "priority"),
            room=parse_room_filter(room_id),
            search=search.strip() if search and search.strip() else None,
            sort_by=sort_by,
            sort_order=sort_order,
        )


def _apply_common_filters(query: SelectOfScalar, filters: TaskFilters) -> SelectOfScalar:
    if filters.status is not None:
        query = query.where(Task.status == filters.status)
    if filters.priority is not None:
        query = query.where(Task.priority == filters.priority)
    if filters.search:
        pattern = contains_pattern(filters.search)
        query = query.where(
            or_(
                col(Task.title).ilike(pattern, escape=LIKE_ESCAPE),
                col(Task.description).ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
    return query


def _room_of(session: Session, task: Task) -> Room | None:
    if task.room_id is None:
        return None
    return session.get(Room, task.room_id)


def get_task(session: Session, task_id: UUID) -> Task:
    """Load a task or raise NotFoundError."""
    task = session.get(Task, task_id)
    if task is None:
        raise NotFoundError("Task not found")
    return task


def get_task_for_actor(session: Session, actor_id: UUID, task_id: UUID) -> Task:
    task = get_task(session, task_id)
    require(can_access_task(task, _room_of(session, task), actor_id))
    return task


def create_task(session: Session, user_id: UUID, task_data: TaskCreate) -> Task:
    """Create a new task for the user, optionally inside a room they belong to."""
    if task_data.room_id is not None:
        room = get_room(session, task_data.room_id)
        require(can_create_task_in(room, user_id), "You are not a member of this room")

    if task_data.assigned_to is not None:
        require_user(session, task_data.assigned_to, "Assigned user not found")

    now = datetime.utcnow()
    task = Task(
        user_id=user_id,
        room_id=task_data.room_id,
        title=task_data.title,
        description=task_data.description,
        status=task_data.status,
        priority=task_data.priority,
        due_date=task_data.due_date,
        assigned_to=task_data.assigned_to,
        tags=task_data.tags,
        created_at=now,
        updated_at=now,
    )
    if task.status == TaskStatus.COMPLETED:
        task.completed_at = now

    session.add(task)
    adjust_task_counters(session, user_id, total=1)
    if task.status == TaskStatus.COMPLETED:
        apply_task_completion(session, user_id, now)
    session.commit()
    session.refresh(task)

    logger.info(
        "Task created",
        extra={"task_id": str(task.id), "user_id": str(user_id), "room_id": str(task.room_id)},
    )
    return task


def update_task(session: Session, actor_id: UUID, task_id: UUID, task_data: TaskUpdate) -> Task:
    """Update a task the actor created or shares a room with.

    Moving into ``completed`` stamps ``completed_at`` and counts a completion
    for the task's creator; moving out of it reverses the count. Re-sending the
    current status changes nothing.
    """
    task = get_task_for_actor(session, actor_id, task_id)

    update_data = task_data.model_dump(exclude_unset=True)
    new_status = update_data.pop("status", None)

    if update_data.get("assigned_to") is not None:
        require_user(session, update_data["assigned_to"], "Assigned user not found")

    for key, value in update_data.items():
        setattr(task, key, value)

    now = datetime.utcnow()
    if new_status is not None and new_status != task.status:
        was_completed = task.status == TaskStatus.COMPLETED
        task.status = new_status
        if new_status == TaskStatus.COMPLETED:
            task.completed_at = now
            apply_task_completion(session, task.user_id, now)
            logger.info("Task completed", extra={"task_id": str(task.id), "actor_id": str(actor_id)})
        elif was_completed:
            task.completed_at = None
            adjust_task_counters(session, task.user_id, completed=-1)

    task.updated_at = now
    session.add(task)
    session.commit()
    session.refresh(task)
    return task


def delete_task(session: Session, actor_id: UUID, task_id: UUID) -> None:
    """Delete a task. Allowed for its creator or the owner of its room."""
    task = get_task(session, task_id)
    require(can_delete_task(task, _room_of(session, task), actor_id))

    owner_id = task.user_id
    was_completed = task.status == TaskStatus.COMPLETED

    session.delete(task)
    adjust_task_counters(session, owner_id, total=-1, completed=-1 if was_completed else 0)
    session.commit()
    logger.info("Task deleted", extra={"task_id": str(task_id), "actor_id": str(actor_id)})


def list_user_tasks(session: Session, user_id: UUID, filters: TaskFilters) -> list[Task]:
    """The user's own tasks, filtered and sorted as requested."""
    query = select(Task).where(Task.user_id == user_id)
    query = apply_room_filter(query, filters.room)
    query = _apply_common_filters(query, filters)

    sort_column = SORT_COLUMNS[filters.sort_by]
    order = sort_column.asc() if filters.sort_order == "asc" else sort_column.desc()
    query = query.order_by(order, Task.created_at.desc())

    return list(session.exec(query).all())


def list_room_tasks(session: Session, actor_id: UUID, room_id: UUID, filters: TaskFilters) -> list[Task]:
    """All tasks in a room, newest first. Requires membership."""
    get_room_for_member(session, room_id, actor_id)

    query = select(Task).where(Task.room_id == room_id)
    query = _apply_common_filters(query, filters)
    query = query.order_by(Task.created_at.desc())
    return list(session.exec(query).all())


def get_task_stats(
    session: Session,
    user_id: UUID,
    room_filter: RoomFilter,
    now: datetime | None = None,
) -> TaskStatsResponse:
    """Counts over the user's tasks in the given room scope, including overdue."""
    query = apply_room_filter(select(Task).where(Task.user_id == user_id), room_filter)
    tasks = session.exec(query).all()
    return summarize_tasks(tasks, now, include_overdue=True)
