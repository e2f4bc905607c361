"""Task creation factory for timewheel.

This module centralizes task creation and id generation so that every
code path producing Task records can be made deterministic by injecting
an id generator.
"""

import itertools
import uuid
from typing import Callable, Iterable, List, Optional

from timewheel.models.task import Day, Task, TaskFormData
from timewheel.models.template import TemplateTask
from timewheel.models.constants import TASK_ID_PREFIX, TEMPLATE_TASK_ID_PREFIX

IdGenerator = Callable[[], str]
DayNameResolver = Callable[[str], str]


def random_id_generator(prefix: str = TASK_ID_PREFIX) -> IdGenerator:
    """Return a generator producing ``<prefix>-<uuid4>`` ids."""
    def _next_id() -> str:
        return f"{prefix}-{uuid.uuid4()}"
    return _next_id


def sequential_id_generator(prefix: str = TASK_ID_PREFIX, start: int = 1) -> IdGenerator:
    """Return a deterministic generator producing ``<prefix>-1``, ``<prefix>-2``, ...

    Args:
        prefix: Id prefix
        start: First sequence number

    Returns:
        Zero-argument callable returning the next id
    """
    counter = itertools.count(start)

    def _next_id() -> str:
        return f"{prefix}-{next(counter)}"
    return _next_id


def create_task(
    form: TaskFormData,
    date: str,
    id_generator: Optional[IdGenerator] = None,
) -> Task:
    """Create a Task for a date from user form data.

    Args:
        form: Validated form data
        date: ISO date the task belongs to
        id_generator: Id source (defaults to random ``task-<uuid>`` ids)

    Returns:
        New Task with a fresh id
    """
    next_id = id_generator or random_id_generator(TASK_ID_PREFIX)
    return Task(
        id=next_id(),
        date=date,
        title=form.title,
        start_time=form.start_time,
        end_time=form.end_time,
        category=form.category,
        color=form.color,
    )


def materialize_template_tasks(
    date: str,
    source_tasks: Iterable[TemplateTask],
    id_generator: Optional[IdGenerator] = None,
) -> List[Task]:
    """Turn template task patterns into concrete Tasks bound to ``date``."""
    next_id = id_generator or random_id_generator(TEMPLATE_TASK_ID_PREFIX)
    return [
        Task(
            id=next_id(),
            date=date,
            title=t.title,
            start_time=t.start_time,
            end_time=t.end_time,
            category=t.category,
            color=t.color,
        )
        for t in source_tasks
    ]


def create_day(
    date: str,
    tasks: List[Task],
    existing_day: Optional[Day] = None,
    day_name_resolver: Optional[DayNameResolver] = None,
) -> Day:
    """Build the Day record holding ``tasks`` for ``date``.

    An existing Day keeps its id and name; a new Day uses the date as id and
    takes its name from ``day_name_resolver`` (falling back to the date).
    """
    if existing_day is not None:
        return existing_day.model_copy(update={"tasks": list(tasks)})
    name = (day_name_resolver(date) if day_name_resolver else None) or date
    return Day(id=date, name=name, date=date, tasks=list(tasks))
