"""Tests for the task mutation engine (add/update/delete within a day)."""

import pytest

from timewheel.engine.conflicts import find_conflicting_pairs
from timewheel.engine.errors import (
    EmptyTitleError,
    InvalidDateError,
    InvalidTimeRangeError,
    OverlapConflictError,
    TaskNotFoundError,
)
from timewheel.engine.mutations import (
    add_task,
    update_task,
    delete_task,
    trim_overlapping_tasks,
    add_task_to_days,
    update_task_in_days,
    delete_task_from_days,
)
from timewheel.models.task import Day


def _times(tasks):
    return [(t.title, t.start_time, t.end_time) for t in tasks]


class TestAddTask:
    def test_add_to_empty_day(self, make_form, id_generator):
        tasks = add_task(make_form("Gym", "07:00", "08:00"), [], date="2025-01-15", id_generator=id_generator)

        assert len(tasks) == 1
        assert tasks[0].id == "task-1"
        assert tasks[0].date == "2025-01-15"
        assert tasks[0].category == "custom"

    def test_conflict_raises_without_allow_overlap(self, work_day, make_form, id_generator):
        with pytest.raises(OverlapConflictError) as exc_info:
            add_task(make_form("Doctor", "12:00", "12:30"), work_day.tasks, date=work_day.date, id_generator=id_generator)

        assert exc_info.value.conflicting_task_ids == ["work"]
        assert exc_info.value.kind == "overlap_conflict"

    def test_retry_with_allow_overlap_trims_neighbor(self, work_day, make_form, id_generator):
        """Work 09:00-13:00 + Doctor 12:00-12:30 -> Work 09:00-12:00, Doctor 12:00-12:30."""
        tasks = add_task(
            make_form("Doctor", "12:00", "12:30"),
            work_day.tasks,
            date=work_day.date,
            allow_overlap=True,
            id_generator=id_generator,
        )

        assert _times(tasks) == [("Work", "09:00", "12:00"), ("Doctor", "12:00", "12:30")]
        assert tasks[0].id == "work"
        assert find_conflicting_pairs(tasks) == []

    def test_touching_task_is_not_a_conflict(self, work_day, make_form):
        tasks = add_task(make_form("Lunch", "13:00", "14:00"), work_day.tasks, date=work_day.date)
        assert _times(tasks)[-1] == ("Lunch", "13:00", "14:00")

    def test_input_list_is_not_modified(self, work_day, make_form):
        before = [t.model_copy() for t in work_day.tasks]
        add_task(make_form("Doctor", "12:00", "12:30"), work_day.tasks, date=work_day.date, allow_overlap=True)
        assert work_day.tasks == before

    def test_times_are_normalized(self, make_form):
        tasks = add_task(make_form("Walk", "9:00", "9:30"), [], date="2025-01-15")
        assert (tasks[0].start_time, tasks[0].end_time) == ("09:00", "09:30")

    @pytest.mark.parametrize("title", ["", "   "])
    def test_empty_title(self, make_form, title):
        with pytest.raises(EmptyTitleError):
            add_task(make_form(title, "09:00", "10:00"), [], date="2025-01-15")

    @pytest.mark.parametrize("start,end", [("10:00", "10:00"), ("25:00", "01:00"), ("10:00", "1000")])
    def test_invalid_time_range(self, make_form, start, end):
        with pytest.raises(InvalidTimeRangeError):
            add_task(make_form("Task", start, end), [], date="2025-01-15")

    def test_validation_precedes_overlap_check(self, work_day, make_form):
        with pytest.raises(EmptyTitleError):
            add_task(make_form(" ", "12:00", "12:30"), work_day.tasks, date=work_day.date)


class TestTrimming:
    def test_task_extending_past_new_range_is_cut_at_its_end(self, make_task):
        tasks = [make_task("Meeting", "10:00", "12:00")]
        assert _times(trim_overlapping_tasks(tasks, "09:00", "11:00")) == [("Meeting", "11:00", "12:00")]

    def test_contained_task_is_dropped(self, make_task):
        tasks = [make_task("Call", "10:00", "10:30")]
        assert trim_overlapping_tasks(tasks, "09:00", "11:00") == []

    def test_straddling_task_keeps_its_head(self, make_task):
        tasks = [make_task("Work", "08:00", "18:00")]
        assert _times(trim_overlapping_tasks(tasks, "12:00", "13:00")) == [("Work", "08:00", "12:00")]

    def test_midnight_crossing_neighbor(self, make_task):
        tasks = [make_task("Sleep", "23:00", "07:00")]
        assert _times(trim_overlapping_tasks(tasks, "06:00", "08:00")) == [("Sleep", "23:00", "06:00")]

    def test_new_range_crossing_midnight(self, make_task):
        tasks = [make_task("Late", "22:00", "23:30"), make_task("Early", "00:30", "02:00")]
        result = trim_overlapping_tasks(tasks, "23:00", "01:00")
        assert _times(result) == [("Late", "22:00", "23:00"), ("Early", "01:00", "02:00")]

    def test_non_overlapping_tasks_untouched(self, make_task):
        tasks = [make_task("Breakfast", "08:00", "08:30")]
        assert trim_overlapping_tasks(tasks, "09:00", "10:00") == tasks

    def test_add_with_trim_never_leaves_overlaps(self, make_task, make_form, id_generator):
        tasks = [
            make_task("Sleep", "22:00", "06:00"),
            make_task("Work", "09:00", "17:00"),
            make_task("Dinner", "18:00", "19:00"),
        ]
        for start, end in [
            ("05:00", "21:00"),
            ("08:00", "10:00"),
            ("23:00", "01:00"),
            ("12:00", "12:15"),
            ("16:00", "09:00"),
            ("00:00", "23:59"),
        ]:
            tasks = add_task(
                make_form(f"New {start}", start, end),
                tasks,
                date="2025-01-15",
                allow_overlap=True,
                id_generator=id_generator,
            )
            assert find_conflicting_pairs(tasks) == []
            assert tasks[-1].start_time == start


class TestUpdateTask:
    @pytest.fixture
    def tasks(self, make_task):
        return [
            make_task("Work", "09:00", "13:00", task_id="work", calendar_event_id="evt-1"),
            make_task("Lunch", "13:00", "14:00", task_id="lunch"),
        ]

    def test_update_in_place(self, tasks, make_form):
        updated = update_task("work", make_form("Deep work", "08:00", "12:00", color="#FF9800"), tasks)

        assert [t.id for t in updated] == ["work", "lunch"]
        assert updated[0].title == "Deep work"
        assert updated[0].color == "#FF9800"
        assert updated[0].calendar_event_id == "evt-1"
        assert updated[0].date == tasks[0].date

    def test_own_range_is_not_a_conflict(self, tasks, make_form):
        updated = update_task("work", make_form("Work", "09:30", "12:30"), tasks)
        assert _times(updated)[0] == ("Work", "09:30", "12:30")

    def test_conflict_with_other_task(self, tasks, make_form):
        with pytest.raises(OverlapConflictError) as exc_info:
            update_task("lunch", make_form("Lunch", "12:30", "13:30"), tasks)
        assert exc_info.value.conflicting_task_ids == ["work"]

    def test_allow_overlap_does_not_trim_neighbors(self, tasks, make_form):
        updated = update_task("lunch", make_form("Lunch", "12:30", "13:30"), tasks, allow_overlap=True)
        assert _times(updated) == [("Work", "09:00", "13:00"), ("Lunch", "12:30", "13:30")]

    def test_trim_neighbors_unifies_with_add(self, tasks, make_form):
        updated = update_task(
            "lunch", make_form("Lunch", "12:30", "13:30"), tasks, allow_overlap=True, trim_neighbors=True
        )
        assert _times(updated) == [("Work", "09:00", "12:30"), ("Lunch", "12:30", "13:30")]
        assert find_conflicting_pairs(updated) == []

    def test_unknown_task(self, tasks, make_form):
        with pytest.raises(TaskNotFoundError):
            update_task("missing", make_form("X", "01:00", "02:00"), tasks)

    def test_validation_errors(self, tasks, make_form):
        with pytest.raises(EmptyTitleError):
            update_task("work", make_form("", "09:00", "10:00"), tasks)
        with pytest.raises(InvalidTimeRangeError):
            update_task("work", make_form("Work", "09:00", "09:00"), tasks)


class TestDeleteTask:
    def test_delete(self, work_day):
        assert delete_task("work", work_day.tasks) == []

    def test_delete_is_idempotent(self, work_day):
        assert delete_task("missing", work_day.tasks) == work_day.tasks


class TestSnapshotOperations:
    def test_add_creates_missing_day(self, work_day, make_form, id_generator):
        days = add_task_to_days(
            [work_day],
            "2025-01-13",
            make_form("Gym", "07:00", "08:00"),
            id_generator=id_generator,
            day_name_resolver=lambda d: "Monday",
        )

        assert [d.date for d in days] == ["2025-01-13", "2025-01-15"]
        assert days[0].id == "2025-01-13"
        assert days[0].name == "Monday"
        assert days[0].tasks[0].id == "task-1"
        assert days[1] == work_day

    def test_add_keeps_existing_day_identity(self, work_day, make_form):
        days = add_task_to_days([work_day], work_day.date, make_form("Lunch", "13:00", "14:00"))
        assert days[0].id == work_day.id
        assert days[0].name == work_day.name
        assert len(days[0].tasks) == 2

    def test_rejected_add_leaves_snapshot_untouched(self, work_day, make_form):
        snapshot = [work_day.model_copy(deep=True)]
        with pytest.raises(OverlapConflictError):
            add_task_to_days(snapshot, work_day.date, make_form("Doctor", "12:00", "12:30"))
        assert snapshot == [work_day]

    def test_invalid_date(self, make_form):
        with pytest.raises(InvalidDateError):
            add_task_to_days([], "2025-13-01", make_form("Gym", "07:00", "08:00"))

    def test_update_in_days(self, work_day, make_form):
        days = update_task_in_days([work_day], work_day.date, "work", make_form("Work", "10:00", "14:00"))
        assert _times(days[0].tasks) == [("Work", "10:00", "14:00")]

    def test_update_missing_day(self, make_form):
        with pytest.raises(TaskNotFoundError):
            update_task_in_days([], "2025-01-15", "work", make_form("Work", "10:00", "14:00"))

    def test_delete_from_missing_day_is_noop(self, work_day):
        assert delete_task_from_days([work_day], "2025-01-16", "work") == [work_day]

    def test_delete_from_days(self, work_day):
        days = delete_task_from_days([work_day], work_day.date, "work")
        assert days == [Day(id=work_day.id, name=work_day.name, date=work_day.date, tasks=[])]
