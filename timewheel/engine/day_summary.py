"""Derived day view: task ordering, current/next task and load."""

from typing import List

from timewheel.engine.time_utils import get_duration_minutes, is_time_in_range, time_to_minutes
from timewheel.models.constants import MINUTES_PER_DAY
from timewheel.models.task import Day, DaySummary, Task


def sort_tasks_by_start(tasks: List[Task]) -> List[Task]:
    """Tasks ordered by start minute (stable for equal starts)."""
    return sorted(tasks, key=lambda t: time_to_minutes(t.start_time))


def summarize_day(day: Day, now_minutes: int, is_current_day: bool = True) -> DaySummary:
    """Summarize a day relative to the current minute of the day.

    Args:
        day: Day to summarize
        now_minutes: Current time as minutes since midnight
        is_current_day: Whether ``day`` is today; current/next task are only
            reported for today

    Returns:
        DaySummary with sorted tasks, current/next task and load percent
    """
    ordered = sort_tasks_by_start(day.tasks)
    total = sum(get_duration_minutes(t.start_time, t.end_time) for t in ordered)
    load = min(total / MINUTES_PER_DAY * 100, 100.0)

    current = None
    upcoming = None
    if is_current_day:
        current = next(
            (t for t in ordered if is_time_in_range(now_minutes, t.start_time, t.end_time)),
            None,
        )
        upcoming = next((t for t in ordered if time_to_minutes(t.start_time) > now_minutes), None)

    return DaySummary(
        date=day.date,
        tasks=ordered,
        current_task=current,
        next_task=upcoming,
        total_minutes=total,
        load_percent=round(load, 2),
    )
