"""Tests for the task service: defaults, counters, completion transitions and listing."""

from datetime import datetime, timedelta
from uuid import uuid4

import pytest
from sqlmodel import Session, select

from app.errors import ForbiddenError, NotFoundError, ValidationError
from app.models.room import RoomCreate
from app.models.task import Priority, Task, TaskCreate, TaskStatus, TaskUpdate
from app.services.rooms import create_room, join_room
from app.services.stats import completion_day
from app.services.tasks import (
    PRIORITY_RANK,
    AnyRoom,
    NoRoom,
    SpecificRoom,
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


def complete(session: Session, actor, task: Task) -> Task:
    return update_task(session, actor.id, task.id, TaskUpdate(status=TaskStatus.COMPLETED))


@pytest.fixture
def shared_room(db_session: Session, test_user, other_user):
    room = create_room(db_session, test_user.id, RoomCreate(name="Shared"))
    join_room(db_session, other_user.id, room.invite_code)
    return room


# ============================================================================
# Room Filter Tests
# ============================================================================

class TestRoomFilter:
    """Tests for parse_room_filter."""

    def test_absent_means_any_room(self):
        assert parse_room_filter(None) == AnyRoom()
        assert parse_room_filter("all") == AnyRoom()

    def test_personal_means_no_room(self):
        assert parse_room_filter("personal") == NoRoom()

    def test_uuid_means_specific_room(self, shared_room):
        assert parse_room_filter(str(shared_room.id)) == SpecificRoom(shared_room.id)

    def test_garbage_is_rejected(self):
        with pytest.raises(ValidationError):
            parse_room_filter("not-a-room")


# ============================================================================
# Create Tests
# ============================================================================

class TestCreateTask:
    """Tests for create_task."""

    def test_defaults(self, db_session: Session, test_user):
        task = create_task(db_session, test_user.id, TaskCreate(title="  Write report  "))

        assert task.title == "Write report"
        assert task.priority == Priority.MEDIUM
        assert task.status == TaskStatus.PENDING
        assert task.room_id is None
        assert task.completed_at is None
        assert task.tags == []
        assert task.created_at.tzinfo is None

    def test_increments_total_tasks(self, db_session: Session, test_user):
        create_task(db_session, test_user.id, TaskCreate(title="One"))
        create_task(db_session, test_user.id, TaskCreate(title="Two"))

        db_session.refresh(test_user)
        assert test_user.total_tasks == 2
        assert test_user.completed_tasks == 0

    def test_tags_are_deduplicated(self, db_session: Session, test_user):
        task = create_task(db_session, test_user.id, TaskCreate(title="Tagged", tags=["home", "urgent", "home"]))
        assert task.tags == ["home", "urgent"]

    def test_room_task_requires_membership(self, db_session: Session, shared_room, outsider):
        with pytest.raises(ForbiddenError):
            create_task(db_session, outsider.id, TaskCreate(title="Sneaky", room_id=shared_room.id))

        db_session.refresh(outsider)
        assert outsider.total_tasks == 0

    def test_unknown_room_is_not_found(self, db_session: Session, test_user):
        with pytest.raises(NotFoundError):
            create_task(db_session, test_user.id, TaskCreate(title="Lost", room_id=uuid4()))

    def test_unknown_assignee_is_not_found(self, db_session: Session, test_user):
        with pytest.raises(NotFoundError):
            create_task(db_session, test_user.id, TaskCreate(title="Who", assigned_to=uuid4()))

    def test_created_completed_counts_as_completion(self, db_session: Session, test_user):
        task = create_task(db_session, test_user.id, TaskCreate(title="Already done", status=TaskStatus.COMPLETED))

        db_session.refresh(test_user)
        assert task.completed_at is not None
        assert test_user.completed_tasks == 1
        assert test_user.current_streak == 1


# ============================================================================
# Update / Completion Tests
# ============================================================================

class TestCompletionTransitions:
    """Tests for status transitions in update_task."""

    def test_completion_stamps_and_counts(self, db_session: Session, test_user):
        task = create_task(db_session, test_user.id, TaskCreate(title="Do it"))

        task = complete(db_session, test_user, task)

        db_session.refresh(test_user)
        assert task.status == TaskStatus.COMPLETED
        assert task.completed_at is not None
        assert test_user.completed_tasks == 1
        assert test_user.current_streak == 1
        assert test_user.max_streak == 1
        assert test_user.last_task_date == completion_day(task.completed_at)

    def test_recompleting_changes_nothing(self, db_session: Session, test_user):
        task = create_task(db_session, test_user.id, TaskCreate(title="Do it"))
        task = complete(db_session, test_user, task)
        stamped = task.completed_at

        task = complete(db_session, test_user, task)
        task = update_task(db_session, test_user.id, task.id, TaskUpdate(title="Renamed"))

        db_session.refresh(test_user)
        assert task.completed_at == stamped
        assert test_user.completed_tasks == 1
        assert test_user.current_streak == 1

    def test_reopening_clears_and_decrements(self, db_session: Session, test_user):
        task = create_task(db_session, test_user.id, TaskCreate(title="Do it"))
        task = complete(db_session, test_user, task)

        task = update_task(db_session, test_user.id, task.id, TaskUpdate(status=TaskStatus.IN_PROGRESS))

        db_session.refresh(test_user)
        assert task.completed_at is None
        assert test_user.completed_tasks == 0

    def test_completion_extends_yesterdays_streak(self, db_session: Session, test_user):
        today = completion_day(datetime.utcnow())
        test_user.last_task_date = today - timedelta(days=1)
        test_user.current_streak = 4
        test_user.max_streak = 4
        db_session.add(test_user)
        db_session.commit()

        task = create_task(db_session, test_user.id, TaskCreate(title="Keep going"))
        complete(db_session, test_user, task)
        second = create_task(db_session, test_user.id, TaskCreate(title="Same day"))
        complete(db_session, test_user, second)

        db_session.refresh(test_user)
        assert test_user.current_streak == 5
        assert test_user.max_streak == 5
        assert test_user.completed_tasks == 2

    def test_room_member_completion_credits_task_owner(self, db_session: Session, shared_room, test_user, other_user):
        task = create_task(db_session, test_user.id, TaskCreate(title="Team chore", room_id=shared_room.id))

        complete(db_session, other_user, task)

        db_session.refresh(test_user)
        db_session.refresh(other_user)
        assert test_user.completed_tasks == 1
        assert test_user.current_streak == 1
        assert other_user.completed_tasks == 0
        assert other_user.current_streak == 0


class TestTaskAccess:
    """Tests for read/update/delete permissions."""

    def test_outsider_cannot_read_or_update(self, db_session: Session, shared_room, test_user, outsider):
        task = create_task(db_session, test_user.id, TaskCreate(title="Private-ish", room_id=shared_room.id))

        with pytest.raises(ForbiddenError):
            get_task_for_actor(db_session, outsider.id, task.id)
        with pytest.raises(ForbiddenError):
            update_task(db_session, outsider.id, task.id, TaskUpdate(title="Mine"))

    def test_personal_task_is_private(self, db_session: Session, test_user, other_user):
        task = create_task(db_session, test_user.id, TaskCreate(title="Diary"))
        with pytest.raises(ForbiddenError):
            get_task_for_actor(db_session, other_user.id, task.id)

    def test_missing_task_is_not_found(self, db_session: Session, test_user):
        with pytest.raises(NotFoundError):
            update_task(db_session, test_user.id, uuid4(), TaskUpdate(title="Ghost"))

    def test_member_cannot_delete_others_task(self, db_session: Session, shared_room, test_user, other_user):
        task = create_task(db_session, test_user.id, TaskCreate(title="Owner's", room_id=shared_room.id))
        with pytest.raises(ForbiddenError):
            delete_task(db_session, other_user.id, task.id)

    def test_room_owner_can_delete_members_task(self, db_session: Session, shared_room, test_user, other_user):
        task = create_task(db_session, other_user.id, TaskCreate(title="Member's", room_id=shared_room.id))

        delete_task(db_session, test_user.id, task.id)

        db_session.refresh(other_user)
        assert db_session.get(Task, task.id) is None
        assert other_user.total_tasks == 0

    def test_deleting_completed_task_decrements_both_counters(self, db_session: Session, test_user):
        create_task(db_session, test_user.id, TaskCreate(title="Keep"))
        task = create_task(db_session, test_user.id, TaskCreate(title="Done"))
        complete(db_session, test_user, task)
        db_session.refresh(test_user)
        before = (test_user.total_tasks, test_user.completed_tasks)

        delete_task(db_session, test_user.id, task.id)

        db_session.refresh(test_user)
        assert (test_user.total_tasks, test_user.completed_tasks) == (before[0] - 1, before[1] - 1)


# ============================================================================
# Listing Tests
# ============================================================================

class TestListTasks:
    """Tests for list_user_tasks and list_room_tasks."""

    def test_personal_filter_round_trip(self, db_session: Session, shared_room, test_user):
        personal = create_task(db_session, test_user.id, TaskCreate(title="Personal"))
        in_room = create_task(db_session, test_user.id, TaskCreate(title="Room", room_id=shared_room.id))

        personal_ids = {t.id for t in list_user_tasks(db_session, test_user.id, TaskFilters(room=NoRoom()))}
        room_ids = {t.id for t in list_user_tasks(db_session, test_user.id, TaskFilters(room=SpecificRoom(shared_room.id)))}
        all_ids = {t.id for t in list_user_tasks(db_session, test_user.id, TaskFilters())}

        assert personal_ids == {personal.id}
        assert room_ids == {in_room.id}
        assert all_ids == {personal.id, in_room.id}

    def test_only_own_tasks_are_listed(self, db_session: Session, test_user, other_user):
        create_task(db_session, other_user.id, TaskCreate(title="Not yours"))
        assert list_user_tasks(db_session, test_user.id, TaskFilters()) == []

    def test_status_priority_and_search(self, db_session: Session, test_user):
        create_task(db_session, test_user.id, TaskCreate(title="Buy milk", priority=Priority.HIGH))
        create_task(db_session, test_user.id, TaskCreate(title="Call mom", description="About the MILK order"))
        done = create_task(db_session, test_user.id, TaskCreate(title="Pay rent"))
        complete(db_session, test_user, done)

        by_search = list_user_tasks(db_session, test_user.id, TaskFilters.from_query(search="milk"))
        by_priority = list_user_tasks(db_session, test_user.id, TaskFilters.from_query(priority="high"))
        by_status = list_user_tasks(db_session, test_user.id, TaskFilters.from_query(status="completed"))

        assert {t.title for t in by_search} == {"Buy milk", "Call mom"}
        assert [t.title for t in by_priority] == ["Buy milk"]
        assert [t.title for t in by_status] == ["Pay rent"]

    def test_search_treats_wildcards_literally(self, db_session: Session, test_user):
        create_task(db_session, test_user.id, TaskCreate(title="100% done"))
        create_task(db_session, test_user.id, TaskCreate(title="1000 things"))

        result = list_user_tasks(db_session, test_user.id, TaskFilters.from_query(search="0%"))
        assert [t.title for t in result] == ["100% done"]

    def test_default_sort_is_newest_first(self, db_session: Session, test_user):
        now = datetime.utcnow()
        for offset, title in enumerate(["old", "middle", "new"]):
            task = create_task(db_session, test_user.id, TaskCreate(title=title))
            task.created_at = now + timedelta(minutes=offset)
            db_session.add(task)
        db_session.commit()

        titles = [t.title for t in list_user_tasks(db_session, test_user.id, TaskFilters())]
        assert titles == ["new", "middle", "old"]

    def test_sort_by_priority_ascending(self, db_session: Session, test_user):
        for priority in (Priority.URGENT, Priority.LOW, Priority.HIGH, Priority.MEDIUM):
            create_task(db_session, test_user.id, TaskCreate(title=priority.value, priority=priority))

        filters = TaskFilters.from_query(sort_by="priority", sort_order="asc")
        titles = [t.title for t in list_user_tasks(db_session, test_user.id, filters)]
        assert titles == ["low", "medium", "high", "urgent"]

    def test_sort_by_priority_descending(self, db_session: Session, test_user):
        for priority in (Priority.MEDIUM, Priority.URGENT, Priority.LOW, Priority.HIGH):
            create_task(db_session, test_user.id, TaskCreate(title=priority.value, priority=priority))

        filters = TaskFilters.from_query(sort_by="priority", sort_order="desc")
        titles = [t.title for t in list_user_tasks(db_session, test_user.id, filters)]
        assert titles == ["urgent", "high", "medium", "low"]

    def test_priority_rank_matches_stored_values(self, db_session: Session, test_user):
        for priority in Priority:
            create_task(db_session, test_user.id, TaskCreate(title=priority.value, priority=priority))

        rows = db_session.exec(select(Task.title, PRIORITY_RANK)).all()
        assert dict(rows) == {"low": 0, "medium": 1, "high": 2, "urgent": 3}

    def test_invalid_sort_and_status_are_rejected(self):
        with pytest.raises(ValidationError):
            TaskFilters.from_query(sort_by="password")
        with pytest.raises(ValidationError):
            TaskFilters.from_query(sort_order="sideways")
        with pytest.raises(ValidationError):
            TaskFilters.from_query(status="finished")

    def test_room_listing_includes_everyones_tasks(self, db_session: Session, shared_room, test_user, other_user):
        create_task(db_session, test_user.id, TaskCreate(title="Mine", room_id=shared_room.id))
        create_task(db_session, other_user.id, TaskCreate(title="Theirs", room_id=shared_room.id))

        titles = {t.title for t in list_room_tasks(db_session, other_user.id, shared_room.id, TaskFilters())}
        assert titles == {"Mine", "Theirs"}

    def test_room_listing_requires_membership(self, db_session: Session, shared_room, outsider):
        with pytest.raises(ForbiddenError):
            list_room_tasks(db_session, outsider.id, shared_room.id, TaskFilters())


class TestTaskStats:

    def test_personal_scope_counts_overdue(self, db_session: Session, shared_room, test_user):
        yesterday = datetime.utcnow() - timedelta(days=1)
        create_task(db_session, test_user.id, TaskCreate(title="Late", due_date=yesterday))
        create_task(db_session, test_user.id, TaskCreate(title="Late but done", due_date=yesterday, status=TaskStatus.COMPLETED))
        create_task(db_session, test_user.id, TaskCreate(title="Room", room_id=shared_room.id, due_date=yesterday))

        personal = get_task_stats(db_session, test_user.id, NoRoom())
        everything = get_task_stats(db_session, test_user.id, AnyRoom())

        assert (personal.total, personal.completed, personal.overdue) == (2, 1, 1)
        assert (everything.total, everything.overdue) == (3, 2)
