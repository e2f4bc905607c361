"""Task mutation engine for timewheel.

Adds, updates and deletes tasks within a single day. Operations take a
task list (or a Day snapshot) and return a new one; inputs are never
modified and every validation runs before a result is produced.

Adding with ``allow_overlap=True`` trims neighbouring tasks so that the
day never holds two overlapping tasks. Updating does not trim unless
``trim_neighbors`` is set: with ``allow_overlap=True`` alone the edited
task simply overwrites its time range.
"""

import logging
from typing import Dict, List, Optional

from timewheel.engine.conflicts import do_time_ranges_overlap, find_overlapping_tasks
from timewheel.engine.errors import (
    EmptyTitleError,
    InvalidDateError,
    InvalidTimeRangeError,
    OverlapConflictError,
    TaskNotFoundError,
)
from timewheel.engine.time_utils import (
    is_valid_time_range,
    minutes_to_time,
    parse_date_iso,
    time_to_minutes,
    to_extended_span,
)
from timewheel.models.constants import MINUTES_PER_DAY
from timewheel.models.task import Day, Task, TaskFormData
from timewheel.models.task_factory import DayNameResolver, IdGenerator, create_day, create_task

logger = logging.getLogger(__name__)


def _normalize_time(value: str) -> str:
    # "9:05" -> "09:05"
    return minutes_to_time(time_to_minutes(value))


def validate_task_form(
    form: TaskFormData,
    existing_tasks: List[Task],
    ignore_task_id: Optional[str] = None,
    check_overlap: bool = True,
) -> None:
    """Validate form data against a day's tasks.

    Raises:
        EmptyTitleError: Title is blank or whitespace-only
        InvalidTimeRangeError: Malformed time or start equals end
        OverlapConflictError: Range overlaps another task (when check_overlap)
    """
    if not form.title or not form.title.strip():
        raise EmptyTitleError("Task title is empty")

    if not is_valid_time_range(form.start_time, form.end_time):
        raise InvalidTimeRangeError(
            f"Invalid time range {form.start_time!r} - {form.end_time!r}"
        )

    if check_overlap:
        conflicts = find_overlapping_tasks(
            form.start_time, form.end_time, existing_tasks, ignore_task_id=ignore_task_id
        )
        if conflicts:
            raise OverlapConflictError([t.id for t in conflicts])


def _trim_task(task: Task, new_start: int, new_end: int) -> Optional[Task]:
    """Cut one task against the new span; None when nothing is left."""
    old_start, old_end = to_extended_span(task.start_time, task.end_time)

    # Align the new span with the occurrence that intersects this task.
    for shift in (0, MINUTES_PER_DAY, -MINUTES_PER_DAY):
        start, end = new_start + shift, new_end + shift
        if old_start < end and start < old_end:
            break
    else:
        return task

    if old_start < start:
        return task.model_copy(update={"end_time": minutes_to_time(start)})
    if old_end > end:
        return task.model_copy(update={"start_time": minutes_to_time(end)})
    return None


def trim_overlapping_tasks(tasks: List[Task], start_time: str, end_time: str) -> List[Task]:
    """Shrink or drop every task overlapping [start_time, end_time).

    A task starting before the new range is cut to end at its start; otherwise
    a task running past the new range is cut to start at its end; a task
    inside the range is dropped. Anything still overlapping afterwards is
    dropped as well.

    Args:
        tasks: Tasks of the day, in insertion order
        start_time: New range start ("HH:MM")
        end_time: New range end ("HH:MM")

    Returns:
        Surviving tasks in their original order
    """
    new_start, new_end = to_extended_span(start_time, end_time)
    survivors: List[Task] = []

    for task in tasks:
        if not do_time_ranges_overlap(start_time, end_time, task.start_time, task.end_time):
            survivors.append(task)
            continue

        trimmed = _trim_task(task, new_start, new_end)
        if trimmed is None or do_time_ranges_overlap(
            start_time, end_time, trimmed.start_time, trimmed.end_time
        ):
            logger.debug(f"Dropped task {task.id} overlapped by {start_time}-{end_time}")
            continue

        logger.debug(
            f"Trimmed task {task.id} from {task.start_time}-{task.end_time} "
            f"to {trimmed.start_time}-{trimmed.end_time}"
        )
        survivors.append(trimmed)

    return survivors


def add_task(
    form: TaskFormData,
    existing_tasks: List[Task],
    *,
    date: str,
    allow_overlap: bool = False,
    id_generator: Optional[IdGenerator] = None,
) -> List[Task]:
    """Add a task to a day's task list.

    Args:
        form: Task fields entered by the user
        existing_tasks: Current tasks of the day
        date: ISO date of the day
        allow_overlap: Trim overlapping tasks instead of raising
        id_generator: Id source for the new task

    Returns:
        New task list: surviving existing tasks followed by the new task
    """
    validate_task_form(form, existing_tasks, check_overlap=not allow_overlap)

    new_task = create_task(
        form.model_copy(
            update={
                "start_time": _normalize_time(form.start_time),
                "end_time": _normalize_time(form.end_time),
            }
        ),
        date,
        id_generator=id_generator,
    )

    if allow_overlap:
        survivors = trim_overlapping_tasks(existing_tasks, new_task.start_time, new_task.end_time)
    else:
        survivors = list(existing_tasks)

    return survivors + [new_task]


def update_task(
    task_id: str,
    form: TaskFormData,
    existing_tasks: List[Task],
    *,
    allow_overlap: bool = False,
    trim_neighbors: bool = False,
) -> List[Task]:
    """Replace the editable fields of one task in place.

    Overlap is checked against the other tasks only. By default neighbours are
    never trimmed on update, even with ``allow_overlap=True``; pass
    ``trim_neighbors=True`` to apply the same trimming as ``add_task``.

    Raises:
        TaskNotFoundError: No task with ``task_id`` in the list
    """
    if not any(t.id == task_id for t in existing_tasks):
        raise TaskNotFoundError(task_id)

    validate_task_form(form, existing_tasks, ignore_task_id=task_id, check_overlap=not allow_overlap)

    start_time = _normalize_time(form.start_time)
    end_time = _normalize_time(form.end_time)

    neighbors: Dict[str, Task] = {t.id: t for t in existing_tasks if t.id != task_id}
    if allow_overlap and trim_neighbors:
        neighbors = {
            t.id: t
            for t in trim_overlapping_tasks(list(neighbors.values()), start_time, end_time)
        }

    updated: List[Task] = []
    for task in existing_tasks:
        if task.id == task_id:
            updated.append(
                task.model_copy(
                    update={
                        "title": form.title,
                        "start_time": start_time,
                        "end_time": end_time,
                        "category": form.category,
                        "color": form.color,
                    }
                )
            )
        elif task.id in neighbors:
            updated.append(neighbors[task.id])
    return updated


def delete_task(task_id: str, existing_tasks: List[Task]) -> List[Task]:
    """Remove a task; deleting an absent id is a no-op."""
    return [t for t in existing_tasks if t.id != task_id]


def _require_date(date: str) -> None:
    if parse_date_iso(date) is None:
        raise InvalidDateError(date)


def find_day(days: List[Day], date: str) -> Optional[Day]:
    return next((d for d in days if d.date == date), None)


def _replace_day(days: List[Day], day: Day) -> List[Day]:
    if any(d.date == day.date for d in days):
        return [day if d.date == day.date else d for d in days]
    return sorted(list(days) + [day], key=lambda d: d.date)


def add_task_to_days(
    days: List[Day],
    date: str,
    form: TaskFormData,
    *,
    allow_overlap: bool = False,
    id_generator: Optional[IdGenerator] = None,
    day_name_resolver: Optional[DayNameResolver] = None,
) -> List[Day]:
    """Snapshot-level ``add_task``: creates the Day for ``date`` if missing."""
    _require_date(date)
    day = find_day(days, date)
    tasks = add_task(
        form,
        day.tasks if day else [],
        date=date,
        allow_overlap=allow_overlap,
        id_generator=id_generator,
    )
    return _replace_day(days, create_day(date, tasks, day, day_name_resolver))


def update_task_in_days(
    days: List[Day],
    date: str,
    task_id: str,
    form: TaskFormData,
    *,
    allow_overlap: bool = False,
    trim_neighbors: bool = False,
) -> List[Day]:
    """Snapshot-level ``update_task`` scoped to the Day for ``date``."""
    _require_date(date)
    day = find_day(days, date)
    if day is None:
        raise TaskNotFoundError(task_id)
    tasks = update_task(
        task_id,
        form,
        day.tasks,
        allow_overlap=allow_overlap,
        trim_neighbors=trim_neighbors,
    )
    return _replace_day(days, create_day(date, tasks, day))


def delete_task_from_days(days: List[Day], date: str, task_id: str) -> List[Day]:
    """Snapshot-level ``delete_task``; unknown day or task leaves days unchanged."""
    day = find_day(days, date)
    if day is None:
        return list(days)
    return _replace_day(days, create_day(date, delete_task(task_id, day.tasks), day))
