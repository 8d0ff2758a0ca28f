"""Authorization rules for rooms and tasks.

Every ``can_*`` function is pure: it looks only at the objects passed in and
returns a boolean. Callers load the room/task first (raising NotFoundError
when absent) and then gate with ``require``, so a missing entity and a
forbidden action are never reported the same way.
"""

from typing import Protocol
from uuid import UUID

from app.errors import ForbiddenError
from app.models.room import MemberRole

# Higher rank carries every privilege of the lower ones
ROLE_RANK: dict[MemberRole, int] = {
    MemberRole.MEMBER: 1,
    MemberRole.ADMIN: 2,
    MemberRole.OWNER: 3,
}


class MembershipLike(Protocol):
    user_id: UUID
    role: MemberRole


class RoomLike(Protocol):
    owner_id: UUID
    members: list[MembershipLike]


class TaskLike(Protocol):
    user_id: UUID
    room_id: UUID | None


def has_role_at_least(role: MemberRole | None, minimum: MemberRole) -> bool:
    """Check a role against the privilege ordering."""
    if role is None:
        return False
    return ROLE_RANK[MemberRole(role)] >= ROLE_RANK[minimum]


def find_membership(room: RoomLike, user_id: UUID) -> MembershipLike | None:
    for member in room.members:
        if member.user_id == user_id:
            return member
    return None


def member_role(room: RoomLike, user_id: UUID) -> MemberRole | None:
    membership = find_membership(room, user_id)
    return membership.role if membership is not None else None


def is_room_member(room: RoomLike, user_id: UUID) -> bool:
    return find_membership(room, user_id) is not None


def can_read_room(room: RoomLike, actor_id: UUID) -> bool:
    return is_room_member(room, actor_id)


def can_update_room(room: RoomLike, actor_id: UUID) -> bool:
    return has_role_at_least(member_role(room, actor_id), MemberRole.ADMIN)


def can_delete_room(room: RoomLike, actor_id: UUID) -> bool:
    return room.owner_id == actor_id


def can_create_task_in(room: RoomLike, actor_id: UUID) -> bool:
    return is_room_member(room, actor_id)


def can_access_task(task: TaskLike, room: RoomLike | None, actor_id: UUID) -> bool:
    """Read/update rule: the creator, or any member of the task's room."""
    if task.user_id == actor_id:
        return True
    return task.room_id is not None and room is not None and is_room_member(room, actor_id)


def can_delete_task(task: TaskLike, room: RoomLike | None, actor_id: UUID) -> bool:
    """Delete rule: the creator, or the owner of the task's room."""
    if task.user_id == actor_id:
        return True
    return task.room_id is not None and room is not None and room.owner_id == actor_id


def require(allowed: bool, message: str = "Access denied") -> None:
    """Raise ForbiddenError unless ``allowed``."""
    if not allowed:
        raise ForbiddenError(message)
