"""Tests for the derived day summary."""

import pytest

from timewheel.engine.day_summary import summarize_day, sort_tasks_by_start
from timewheel.models.task import Day


@pytest.fixture
def busy_day(make_task):
    return Day(
        id="d",
        name="Wednesday",
        date="2025-01-15",
        tasks=[
            make_task("Lunch", "13:00", "14:00"),
            make_task("Breakfast", "08:00", "08:30"),
            make_task("Sleep", "23:00", "07:00"),
        ],
    )


def test_sort_tasks_by_start(busy_day):
    assert [t.title for t in sort_tasks_by_start(busy_day.tasks)] == ["Breakfast", "Lunch", "Sleep"]


def test_current_task_across_midnight(busy_day):
    summary = summarize_day(busy_day, now_minutes=30)

    assert summary.current_task.title == "Sleep"
    assert summary.next_task.title == "Breakfast"


def test_current_and_next_during_the_day(busy_day):
    summary = summarize_day(busy_day, now_minutes=13 * 60 + 15)

    assert summary.current_task.title == "Lunch"
    assert summary.next_task.title == "Sleep"


def test_load_counts_wrapping_duration(busy_day):
    summary = summarize_day(busy_day, now_minutes=0)

    assert summary.total_minutes == 30 + 60 + 480
    assert summary.load_percent == pytest.approx(39.58, abs=0.01)


def test_not_current_day_has_no_current_or_next(busy_day):
    summary = summarize_day(busy_day, now_minutes=30, is_current_day=False)

    assert summary.current_task is None
    assert summary.next_task is None
    assert [t.title for t in summary.tasks] == ["Breakfast", "Lunch", "Sleep"]


def test_empty_day():
    summary = summarize_day(Day(id="d", name="d", date="2025-01-15"), now_minutes=600)

    assert summary.tasks == []
    assert summary.total_minutes == 0
    assert summary.load_percent == 0
