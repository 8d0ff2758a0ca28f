"""SQLModel entities for the Task Rooms application."""

from app.models.room import MemberRole, Room, RoomMember
from app.models.task import Priority, Task, TaskStatus
from app.models.user import User

__all__ = [
    "User",
    "Room",
    "RoomMember",
    "MemberRole",
    "Task",
    "TaskStatus",
    "Priority",
]
