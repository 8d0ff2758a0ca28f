"""Aggregate task statistics schemas."""

from app.models.base import APIModel


class TaskStatsResponse(APIModel):
    """Counts over a scope of tasks. ``overdue`` is only computed for personal scope."""

    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    overdue: int | None = None
