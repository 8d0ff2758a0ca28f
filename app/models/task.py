"""Task entity model."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Annotated, Optional
from uuid import UUID, uuid4

from pydantic import Field as SchemaField
from pydantic import StringConstraints, field_validator
from sqlalchemy import JSON, Column
from sqlmodel import Field, Relationship, SQLModel

from app.models.base import APIModel, to_naive_utc
from app.models.user import UserSummary

if TYPE_CHECKING:
    from app.models.room import Room
    from app.models.user import User

TaskTitle = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
TaskDescription = Annotated[str, StringConstraints(max_length=2000)]
TagName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]


class TaskStatus(str, Enum):
    """Task status values."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Priority(str, Enum):
    """Task priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TaskBase(SQLModel):
    """Base Task schema."""

    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)


class Task(TaskBase, table=True):
    """Task database model.

    ``room_id`` is None for personal tasks. ``completed_at`` is set exactly
    while ``status`` is completed.
    """

    __tablename__ = "tasks"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    status: TaskStatus = Field(default=TaskStatus.PENDING, index=True)
    priority: Priority = Field(default=Priority.MEDIUM, index=True)
    due_date: datetime | None = Field(default=None, index=True)
    user_id: UUID = Field(foreign_key="users.id", index=True)
    room_id: UUID | None = Field(default=None, foreign_key="rooms.id", index=True)
    assigned_to: UUID | None = Field(default=None, foreign_key="users.id")
    tags: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    completed_at: datetime | None = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    owner: "User" = Relationship(
        sa_relationship_kwargs={"foreign_keys": "[Task.user_id]"},
    )
    assignee: Optional["User"] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "[Task.assigned_to]"},
    )
    room: Optional["Room"] = Relationship()


def normalize_tags(tags: list[str] | None) -> list[str]:
    """Drop duplicate tags, keeping first-seen order."""
    return list(dict.fromkeys(tags or []))


class TaskCreate(APIModel):
    """Schema for task creation."""

    title: TaskTitle
    description: TaskDescription | None = None
    status: TaskStatus = TaskStatus.PENDING
    priority: Priority = Priority.MEDIUM
    due_date: datetime | None = None
    room_id: UUID | None = None
    assigned_to: UUID | None = None
    tags: list[TagName] = SchemaField(default_factory=list)

    @field_validator("due_date")
    @classmethod
    def _due_date_utc(cls, value: datetime | None) -> datetime | None:
        return to_naive_utc(value)

    @field_validator("tags")
    @classmethod
    def _unique_tags(cls, value: list[str]) -> list[str]:
        return normalize_tags(value)


class TaskUpdate(APIModel):
    """Schema for task update. The creator and room of a task are fixed."""

    title: TaskTitle | None = None
    description: TaskDescription | None = None
    status: TaskStatus | None = None
    priority: Priority | None = None
    due_date: datetime | None = None
    assigned_to: UUID | None = None
    tags: list[TagName] | None = None

    @field_validator("title", "status", "priority")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("Field may not be null")
        return value

    @field_validator("due_date")
    @classmethod
    def _due_date_utc(cls, value: datetime | None) -> datetime | None:
        return to_naive_utc(value)

    @field_validator("tags")
    @classmethod
    def _unique_tags(cls, value: list[str] | None) -> list[str]:
        return normalize_tags(value)


class RoomRef(APIModel):
    id: UUID
    name: str


class TaskResponse(APIModel):
    """Schema for task response."""

    id: UUID
    title: str
    description: str | None
    status: TaskStatus
    priority: Priority
    due_date: datetime | None
    user_id: UUID
    room_id: UUID | None
    assigned_to: UUID | None
    tags: list[str]
    completed_at: datetime | None
    created_at: datetime
    updated_at: datetime
    owner: UserSummary
    assignee: UserSummary | None = None
    room: RoomRef | None = None


class TaskListResponse(APIModel):
    """Schema for task list response."""

    tasks: list[TaskResponse]
    total: int
