"""Error kinds raised by the scheduling engine.

Every error is raised before any state is produced, so a rejected operation
never leaves a day partially updated. ``kind`` is a stable identifier the UI
layer translates into a user-facing message.
"""

from typing import List, Optional


class SchedulingError(ValueError):
    """Base class for recoverable scheduling errors."""

    kind = "scheduling_error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.kind)


class EmptyTitleError(SchedulingError):
    kind = "empty_title"


class InvalidTimeRangeError(SchedulingError):
    kind = "invalid_time_range"


class OverlapConflictError(SchedulingError):
    """The task's range intersects existing tasks and overlap was not allowed.

    The caller may retry with ``allow_overlap=True``.
    """

    kind = "overlap_conflict"

    def __init__(self, conflicting_task_ids: List[str], message: Optional[str] = None):
        self.conflicting_task_ids = list(conflicting_task_ids)
        super().__init__(
            message or f"Task overlaps existing tasks: {', '.join(self.conflicting_task_ids)}"
        )


class TaskNotFoundError(SchedulingError):
    kind = "task_not_found"

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found")


class InvalidDateError(SchedulingError):
    kind = "invalid_date"

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid ISO date: {value!r}")
