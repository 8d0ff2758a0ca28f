"""User profile, counters and statistics."""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import case, update
from sqlmodel import Session, col, func, or_, select

from app.config import get_settings
from app.db.queries import LIKE_ESCAPE, contains_pattern
from app.errors import ConflictError, NotFoundError, ValidationError
from app.models.task import Task
from app.models.user import (
    DailyCompletions,
    PasswordChange,
    ProfileUpdate,
    User,
    UserStatsProfile,
    UserStatsResponse,
)
from app.services.auth import (
    get_user_by_email,
    hash_password,
    normalize_email,
    validate_password_policy,
    verify_password,
)
from app.services.stats import (
    StreakOutcome,
    get_timezone,
    record_completion,
    summarize_tasks,
    weekly_completions,
)

logger = logging.getLogger(__name__)

SEARCH_MIN_LENGTH = 2
SEARCH_LIMIT = 10


def get_user_by_id(session: Session, user_id: UUID) -> User | None:
    return session.get(User, user_id)


def require_user(session: Session, user_id: UUID, message: str = "User not found") -> User:
    user = get_user_by_id(session, user_id)
    if user is None:
        raise NotFoundError(message)
    return user


def _clamped(column, delta: int):
    """``column + delta``, floored at zero."""
    return case((column + delta < 0, 0), else_=column + delta)


def adjust_task_counters(
    session: Session,
    user_id: UUID,
    total: int = 0,
    completed: int = 0,
) -> None:
    """Atomically shift a user's task counters.

    Issued as a single UPDATE so concurrent requests for the same user never
    lose increments. The caller commits.
    """
    values = {}
    if total:
        values["total_tasks"] = _clamped(User.total_tasks, total)
    if completed:
        values["completed_tasks"] = _clamped(User.completed_tasks, completed)
    if not values:
        return
    values["updated_at"] = datetime.utcnow()
    session.exec(
        update(User)
        .where(User.id == user_id)
        .values(**values)
        .execution_options(synchronize_session="fetch")
    )


def apply_task_completion(session: Session, user_id: UUID, completed_at: datetime) -> StreakOutcome:
    """Count a completion for ``user_id`` and advance their streak.

    The user row is locked for the streak read-modify-write. The caller commits.
    """
    adjust_task_counters(session, user_id, completed=1)
    user = session.exec(
        select(User)
        .where(User.id == user_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).one()
    tz = get_timezone(get_settings().STREAK_TIMEZONE)
    outcome = record_completion(user, completed_at, tz)
    session.add(user)
    logger.info(
        "Streak updated",
        extra={
            "user_id": str(user_id),
            "outcome": outcome.value,
            "current_streak": user.current_streak,
            "max_streak": user.max_streak,
        },
    )
    return outcome


def update_profile(session: Session, user: User, profile_data: ProfileUpdate) -> User:
    """Update full name and/or email. A new email must not belong to anyone else."""
    update_data = profile_data.model_dump(exclude_unset=True, exclude_none=True)

    if "email" in update_data:
        email = normalize_email(update_data["email"])
        existing = get_user_by_email(session, email)
        if existing is not None and existing.id != user.id:
            raise ConflictError("Email already in use", details={"field": "email"})
        user.email = email

    if "full_name" in update_data:
        user.full_name = update_data["full_name"].strip()

    user.updated_at = datetime.utcnow()
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def change_password(session: Session, user: User, password_data: PasswordChange) -> None:
    if not verify_password(password_data.current_password, user.hashed_password):
        raise ValidationError(
            "Current password is incorrect",
            details={"field": "currentPassword"},
        )

    is_valid, error_msg = validate_password_policy(password_data.new_password)
    if not is_valid:
        raise ValidationError(error_msg, details={"field": "newPassword"})

    user.hashed_password = hash_password(password_data.new_password)
    user.updated_at = datetime.utcnow()
    session.add(user)
    session.commit()
    logger.info("Password changed", extra={"user_id": str(user.id)})


def search_users(session: Session, actor_id: UUID, query: str | None) -> list[User]:
    """Find other users by name or email, for room invitations."""
    term = (query or "").strip()
    if len(term) < SEARCH_MIN_LENGTH:
        return []

    pattern = contains_pattern(term)
    statement = (
        select(User)
        .where(User.id != actor_id)
        .where(
            or_(
                col(User.full_name).ilike(pattern, escape=LIKE_ESCAPE),
                col(User.email).ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
        .order_by(func.lower(User.full_name))
        .limit(SEARCH_LIMIT)
    )
    return list(session.exec(statement).all())


def get_user_stats(session: Session, user: User, now: datetime | None = None) -> UserStatsResponse:
    """Stored counters, live counts over the user's tasks, and last week's completions."""
    now = now or datetime.utcnow()
    tasks = session.exec(select(Task).where(Task.user_id == user.id)).all()
    tz = get_timezone(get_settings().STREAK_TIMEZONE)
    weekly = weekly_completions((task.completed_at for task in tasks), now, tz)

    return UserStatsResponse(
        user=UserStatsProfile(
            full_name=user.full_name,
            email=user.email,
            total_tasks=user.total_tasks,
            completed_tasks=user.completed_tasks,
            current_streak=user.current_streak,
            max_streak=user.max_streak,
            joined_at=user.created_at,
        ),
        stats=summarize_tasks(tasks, now),
        weekly_stats=[DailyCompletions(day=entry.day, count=entry.count) for entry in weekly],
    )
