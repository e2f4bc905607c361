"""Task and Day data models for timewheel."""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from timewheel.models.constants import DEFAULT_CATEGORY, DEFAULT_COLOR


class Task(BaseModel):
    """A scheduled task bound to a single calendar date.

    ``end_time`` earlier than ``start_time`` means the task ends on the next day.
    """

    id: str = Field(..., description="Unique task identifier")
    date: str = Field(..., description="ISO calendar date (YYYY-MM-DD)")
    title: str = Field(..., description="Task title")
    start_time: str = Field(..., description="Start time (HH:MM)")
    end_time: str = Field(..., description="End time (HH:MM)")
    category: str = Field(DEFAULT_CATEGORY, description="Task category")
    color: str = Field(DEFAULT_COLOR, description="Display color")
    calendar_event_id: Optional[str] = Field(
        None, description="Linked external calendar event id (if synced)"
    )


class Day(BaseModel):
    """All tasks scheduled for one calendar date."""

    id: str = Field(..., description="Day identifier")
    name: str = Field(..., description="Display label")
    date: str = Field(..., description="ISO calendar date (YYYY-MM-DD)")
    tasks: List[Task] = Field(default_factory=list, description="Tasks in insertion order")


class TaskFormData(BaseModel):
    """User-supplied task fields for add/update operations."""

    title: str
    start_time: str
    end_time: str
    category: str = DEFAULT_CATEGORY
    color: str = DEFAULT_COLOR


class DaySummary(BaseModel):
    """Derived view of a day: ordering, current/next task and load."""

    model_config = ConfigDict(frozen=True)

    date: str
    tasks: List[Task] = Field(default_factory=list, description="Tasks sorted by start time")
    current_task: Optional[Task] = None
    next_task: Optional[Task] = None
    total_minutes: int = 0
    load_percent: float = Field(0.0, ge=0.0, le=100.0)
