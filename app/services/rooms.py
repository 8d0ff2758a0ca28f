"""Room service: creation, membership and room-level statistics."""

import logging
import secrets
import string
from collections import Counter
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.config import get_settings
from app.errors import (
    AlreadyMemberError,
    InternalError,
    NotFoundError,
    NotMemberError,
    OwnerCannotLeaveError,
)
from app.models.room import (
    INVITE_CODE_LENGTH,
    MemberRole,
    Room,
    RoomCreate,
    RoomMember,
    RoomStatsResponse,
    RoomUpdate,
)
from app.models.task import Task, TaskStatus
from app.services.authorization import (
    can_delete_room,
    can_read_room,
    can_update_room,
    find_membership,
    require,
)
from app.services.stats import summarize_tasks
from app.services.users import adjust_task_counters

logger = logging.getLogger(__name__)

INVITE_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_invite_code() -> str:
    """Random uppercase alphanumeric invite code."""
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(INVITE_CODE_LENGTH))


def get_room_by_invite_code(session: Session, invite_code: str) -> Room | None:
    return session.exec(
        select(Room).where(Room.invite_code == invite_code.strip().upper())
    ).first()


def get_room(session: Session, room_id: UUID) -> Room:
    """Load a room or raise NotFoundError."""
    room = session.get(Room, room_id)
    if room is None:
        raise NotFoundError("Room not found")
    return room


def get_room_for_member(session: Session, room_id: UUID, actor_id: UUID) -> Room:
    room = get_room(session, room_id)
    require(can_read_room(room, actor_id))
    return room


def list_user_rooms(session: Session, user_id: UUID) -> list[Room]:
    """Rooms the user belongs to, newest first."""
    statement = (
        select(Room)
        .join(RoomMember, RoomMember.room_id == Room.id)
        .where(RoomMember.user_id == user_id)
        .order_by(Room.created_at.desc())
    )
    return list(session.exec(statement).all())


def create_room(session: Session, owner_id: UUID, room_data: RoomCreate) -> Room:
    """Create a room with a fresh invite code and the creator as owner.

    A code that turns out to be taken, either on the pre-check or on the unique
    constraint at commit time, is replaced by a newly generated one.
    """
    max_attempts = get_settings().INVITE_CODE_MAX_ATTEMPTS

    for attempt in range(1, max_attempts + 1):
        invite_code = generate_invite_code()
        if get_room_by_invite_code(session, invite_code) is not None:
            logger.debug("Invite code already taken", extra={"attempt": attempt})
            continue

        room = Room(
            name=room_data.name,
            description=room_data.description,
            owner_id=owner_id,
            invite_code=invite_code,
            is_public=room_data.is_public,
        )
        room.members.append(RoomMember(user_id=owner_id, role=MemberRole.OWNER))
        session.add(room)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            logger.warning("Invite code collision on insert, retrying", extra={"attempt": attempt})
            continue

        session.refresh(room)
        logger.info(
            "Room created",
            extra={"room_id": str(room.id), "owner_id": str(owner_id)},
        )
        return room

    logger.error("Could not allocate a unique invite code", extra={"attempts": max_attempts})
    raise InternalError("Could not create room, please try again")


def join_room(session: Session, user_id: UUID, invite_code: str) -> Room:
    """Add the user to the room behind ``invite_code`` as a plain member."""
    room = get_room_by_invite_code(session, invite_code)
    if room is None:
        raise NotFoundError("Invalid invite code")

    if find_membership(room, user_id) is not None:
        raise AlreadyMemberError()

    room.members.append(RoomMember(user_id=user_id, role=MemberRole.MEMBER))
    room.updated_at = datetime.utcnow()
    session.add(room)
    try:
        session.commit()
    except IntegrityError:
        # Concurrent join of the same user won the race
        session.rollback()
        raise AlreadyMemberError()

    session.refresh(room)
    logger.info("Member joined room", extra={"room_id": str(room.id), "user_id": str(user_id)})
    return room


def leave_room(session: Session, user_id: UUID, room_id: UUID) -> None:
    room = get_room(session, room_id)

    membership = find_membership(room, user_id)
    if membership is None:
        raise NotMemberError()
    if room.owner_id == user_id:
        raise OwnerCannotLeaveError()

    room.members.remove(membership)
    room.updated_at = datetime.utcnow()
    session.add(room)
    session.commit()
    logger.info("Member left room", extra={"room_id": str(room_id), "user_id": str(user_id)})


def update_room(session: Session, actor_id: UUID, room_id: UUID, room_data: RoomUpdate) -> Room:
    """Owners and admins may edit name, description, visibility and settings."""
    room = get_room(session, room_id)
    require(can_update_room(room, actor_id))

    update_data = room_data.model_dump(exclude_unset=True, exclude={"settings"})
    for key, value in update_data.items():
        # Only the description may be cleared
        if value is None and key != "description":
            continue
        setattr(room, key, value)

    if room_data.settings is not None:
        settings_data = room_data.settings.model_dump(exclude_unset=True, exclude_none=True)
        for key, value in settings_data.items():
            setattr(room, key, value)

    room.updated_at = datetime.utcnow()
    session.add(room)
    session.commit()
    session.refresh(room)
    logger.info("Room updated", extra={"room_id": str(room_id), "actor_id": str(actor_id)})
    return room


def delete_room(session: Session, actor_id: UUID, room_id: UUID) -> int:
    """Delete a room and every task in it. Returns the number of tasks removed.

    Task owners' counters are decremented for the tasks that disappear.
    """
    room = get_room(session, room_id)
    require(can_delete_room(room, actor_id), "Only room owner can delete the room")

    tasks = session.exec(select(Task).where(Task.room_id == room_id)).all()
    totals = Counter(task.user_id for task in tasks)
    completed = Counter(task.user_id for task in tasks if task.status == TaskStatus.COMPLETED)

    for owner_id, count in totals.items():
        adjust_task_counters(session, owner_id, total=-count, completed=-completed[owner_id])

    session.exec(delete(Task).where(Task.room_id == room_id))
    session.delete(room)
    session.commit()

    logger.info(
        "Room deleted",
        extra={"room_id": str(room_id), "deleted_tasks": len(tasks)},
    )
    return len(tasks)


def get_room_stats(session: Session, actor_id: UUID, room_id: UUID) -> RoomStatsResponse:
    room = get_room_for_member(session, room_id, actor_id)
    tasks = session.exec(select(Task).where(Task.room_id == room_id)).all()
    return RoomStatsResponse(
        stats=summarize_tasks(tasks),
        member_count=len(room.members),
    )
