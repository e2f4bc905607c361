"""Merge tasks imported from an external calendar into day snapshots.

Talking to the calendar provider is the caller's job; these functions only
reconcile already-imported Task records with the stored days.
"""

import logging
from typing import Iterable, List, Set

from timewheel.engine.errors import TaskNotFoundError
from timewheel.models.task import Day, Task

logger = logging.getLogger(__name__)


def merge_imported_tasks(day: Day, imported: List[Task]) -> Day:
    """Append imported tasks not already present in the day.

    An imported task is a duplicate when its calendar_event_id or its id
    matches a task already in the day (or one appended earlier in the same
    call). Imported tasks are re-bound to the day's date.

    Returns:
        The same Day object when nothing is new, otherwise an updated copy
    """
    seen_event_ids: Set[str] = {t.calendar_event_id for t in day.tasks if t.calendar_event_id}
    seen_ids: Set[str] = {t.id for t in day.tasks}

    new_tasks: List[Task] = []
    for task in imported:
        if task.id in seen_ids:
            continue
        if task.calendar_event_id and task.calendar_event_id in seen_event_ids:
            continue
        new_tasks.append(task.model_copy(update={"date": day.date}))
        seen_ids.add(task.id)
        if task.calendar_event_id:
            seen_event_ids.add(task.calendar_event_id)

    if not new_tasks:
        return day

    logger.debug(f"Merged {len(new_tasks)} imported tasks into {day.date}")
    return day.model_copy(update={"tasks": list(day.tasks) + new_tasks})


def prune_deleted_calendar_tasks(tasks: List[Task], live_event_ids: Iterable[str]) -> List[Task]:
    """Drop tasks linked to calendar events that no longer exist.

    Tasks with no calendar_event_id are local-only and always kept.
    """
    live = set(live_event_ids)
    return [t for t in tasks if not t.calendar_event_id or t.calendar_event_id in live]


def attach_calendar_event_id(days: List[Day], date: str, task_id: str, event_id: str) -> List[Day]:
    """Record the calendar event created for a task.

    Raises:
        TaskNotFoundError: No such task on ``date``
    """
    out: List[Day] = []
    found = False
    for day in days:
        if day.date == date and any(t.id == task_id for t in day.tasks):
            found = True
            day = day.model_copy(
                update={
                    "tasks": [
                        t.model_copy(update={"calendar_event_id": event_id}) if t.id == task_id else t
                        for t in day.tasks
                    ]
                }
            )
        out.append(day)
    if not found:
        raise TaskNotFoundError(task_id)
    return out
