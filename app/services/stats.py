"""Completion streaks and task statistics.

Everything here is a pure function over already-loaded objects; persistence
and locking are the caller's job (see ``app.services.users``).
"""

import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from enum import Enum
from typing import Protocol
from zoneinfo import ZoneInfo

from app.models.stats import TaskStatsResponse
from app.models.task import TaskStatus

logger = logging.getLogger(__name__)

WEEKLY_WINDOW = timedelta(days=7)


class StreakOutcome(str, Enum):
    """What a completion did to the user's streak."""

    STARTED = "started"
    EXTENDED = "extended"
    UNCHANGED = "unchanged"  # Another completion on the same day
    RESET = "reset"
    BACKDATED = "backdated"  # Completion day precedes last_task_date, ignored


class StreakHolder(Protocol):
    current_streak: int
    max_streak: int
    last_task_date: date | None


class TaskStatusLike(Protocol):
    status: TaskStatus
    due_date: datetime | None


def get_timezone(name: str) -> tzinfo:
    """Resolve a configured timezone name."""
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def completion_day(instant: datetime, tz: tzinfo = timezone.utc) -> date:
    """Calendar day of ``instant`` in ``tz``. Naive instants are taken as UTC."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(tz).date()


def record_completion(
    user: StreakHolder,
    completed_at: datetime,
    tz: tzinfo = timezone.utc,
) -> StreakOutcome:
    """Apply one task completion to the user's streak counters.

    Consecutive days extend the streak, the same day leaves it alone, and a
    gap of more than one day restarts it at 1. A completion dated before
    ``last_task_date`` does not touch the counters.
    """
    today = completion_day(completed_at, tz)

    if user.last_task_date is None:
        user.current_streak = 1
        outcome = StreakOutcome.STARTED
    else:
        delta = (today - user.last_task_date).days
        if delta == 0:
            return StreakOutcome.UNCHANGED
        if delta < 0:
            logger.info(
                "Ignoring backdated completion",
                extra={"completion_day": today.isoformat(), "last_task_date": user.last_task_date.isoformat()},
            )
            return StreakOutcome.BACKDATED
        if delta == 1:
            user.current_streak += 1
            outcome = StreakOutcome.EXTENDED
        else:
            user.current_streak = 1
            outcome = StreakOutcome.RESET

    user.last_task_date = today
    user.max_streak = max(user.max_streak, user.current_streak)
    return outcome


def is_overdue(task: TaskStatusLike, now: datetime) -> bool:
    return (
        task.due_date is not None
        and task.due_date < now
        and task.status != TaskStatus.COMPLETED
    )


def summarize_tasks(
    tasks: Iterable[TaskStatusLike],
    now: datetime | None = None,
    include_overdue: bool = False,
) -> TaskStatsResponse:
    """Count tasks by status, and overdue ones when asked to."""
    now = now or datetime.utcnow()
    stats = TaskStatsResponse(overdue=0 if include_overdue else None)
    for task in tasks:
        stats.total += 1
        if task.status == TaskStatus.PENDING:
            stats.pending += 1
        elif task.status == TaskStatus.IN_PROGRESS:
            stats.in_progress += 1
        elif task.status == TaskStatus.COMPLETED:
            stats.completed += 1
        if include_overdue and is_overdue(task, now):
            stats.overdue += 1
    return stats


@dataclass
class DailyCount:
    day: date
    count: int


def weekly_completions(
    completion_times: Iterable[datetime],
    now: datetime,
    tz: tzinfo = timezone.utc,
) -> list[DailyCount]:
    """Completions in the trailing week, grouped by day, oldest first."""
    since = now - WEEKLY_WINDOW
    counts = Counter(
        completion_day(instant, tz)
        for instant in completion_times
        if instant is not None and instant >= since
    )
    return [DailyCount(day=day, count=counts[day]) for day in sorted(counts)]
