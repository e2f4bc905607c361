"""Scheduling engine for timewheel."""

from timewheel.engine.errors import (
    SchedulingError,
    EmptyTitleError,
    InvalidTimeRangeError,
    InvalidDateError,
    OverlapConflictError,
    TaskNotFoundError,
)
from timewheel.engine.time_utils import (
    time_to_minutes,
    minutes_to_time,
    get_time_segments,
    get_duration_minutes,
    is_valid_time_range,
)
from timewheel.engine.conflicts import do_time_ranges_overlap
from timewheel.engine.mutations import (
    add_task,
    update_task,
    delete_task,
    add_task_to_days,
    update_task_in_days,
    delete_task_from_days,
)
from timewheel.engine.templates import (
    get_template_tasks_for_date,
    preview_template_application,
    apply_template,
)
from timewheel.engine.day_summary import summarize_day
from timewheel.engine.calendar_merge import merge_imported_tasks, prune_deleted_calendar_tasks

__all__ = [
    "SchedulingError",
    "EmptyTitleError",
    "InvalidTimeRangeError",
    "InvalidDateError",
    "OverlapConflictError",
    "TaskNotFoundError",
    "time_to_minutes",
    "minutes_to_time",
    "get_time_segments",
    "get_duration_minutes",
    "is_valid_time_range",
    "do_time_ranges_overlap",
    "add_task",
    "update_task",
    "delete_task",
    "add_task_to_days",
    "update_task_in_days",
    "delete_task_from_days",
    "get_template_tasks_for_date",
    "preview_template_application",
    "apply_template",
    "summarize_day",
    "merge_imported_tasks",
    "prune_deleted_calendar_tasks",
]
