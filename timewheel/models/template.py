"""Template models for timewheel.

A template is a reusable task pattern. Three variants exist, discriminated by ``type``:

- ``day``: one flat task list applied verbatim to any chosen date
- ``week``: one task list per weekday (monday..sunday)
- ``month``: task lists keyed by ISO date; only the day-of-month of each key is used,
  so a month recorded against January can be replayed against March
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Dict, List, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator, model_validator

from timewheel.models.constants import DEFAULT_CATEGORY, DEFAULT_COLOR
from timewheel.models.task import Day


class Weekday(str, Enum):
    """Weekday ids in ISO order (Monday first)."""
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


WEEKDAY_ORDER: List[Weekday] = list(Weekday)


class TemplateApplyPolicy(str, Enum):
    """How template tasks interact with a target day's existing tasks."""
    EMPTY_ONLY = "empty_only"
    REPLACE = "replace"
    MERGE_SKIP_CONFLICTS = "merge_skip_conflicts"


class TemplateTask(BaseModel):
    """A task pattern: a Task without id, date and calendar linkage.

    Times are zero-padded on validation and a pattern must not be zero-length,
    so every materialized Task satisfies the same rules as one added by hand.
    """

    title: str
    start_time: str
    end_time: str
    category: str = DEFAULT_CATEGORY
    color: str = DEFAULT_COLOR

    @field_validator("title")
    @classmethod
    def _require_title(cls, v):
        if not v.strip():
            raise ValueError("Template task title is empty")
        return v

    @field_validator("start_time", "end_time")
    @classmethod
    def _normalize_time(cls, v):
        # time_utils depends on Weekday from this module
        from timewheel.engine.time_utils import is_valid_time, minutes_to_time, time_to_minutes

        if not is_valid_time(v):
            raise ValueError(f"Invalid time: {v!r}")
        return minutes_to_time(time_to_minutes(v))

    @model_validator(mode="after")
    def _reject_zero_length(self):
        if self.start_time == self.end_time:
            raise ValueError(f"Zero-length time range {self.start_time}-{self.end_time}")
        return self


class _TemplateBase(BaseModel):
    id: str = Field(..., description="Template identifier")
    name: str = Field(..., description="Display name")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class DayTemplate(_TemplateBase):
    type: Literal["day"] = "day"
    tasks: List[TemplateTask] = Field(default_factory=list)


class WeekTemplate(_TemplateBase):
    type: Literal["week"] = "week"
    days: Dict[Weekday, List[TemplateTask]] = Field(default_factory=dict)


class MonthTemplate(_TemplateBase):
    type: Literal["month"] = "month"
    days: Dict[str, List[TemplateTask]] = Field(
        default_factory=dict,
        description="Task lists keyed by ISO date; matched by day-of-month",
    )


Template = Annotated[Union[DayTemplate, WeekTemplate, MonthTemplate], Field(discriminator="type")]

_template_adapter: TypeAdapter = TypeAdapter(Template)


def parse_template(data: dict) -> Union[DayTemplate, WeekTemplate, MonthTemplate]:
    """Validate a raw dict into the matching template variant."""
    return _template_adapter.validate_python(data)


class TemplateApplyOptions(BaseModel):
    """Options for previewing/applying a template."""

    policy: TemplateApplyPolicy = TemplateApplyPolicy.EMPTY_ONLY
    target_dates: List[str] = Field(default_factory=list, description="ISO dates to apply to")

    @field_validator("target_dates")
    @classmethod
    def _strip_dates(cls, v):
        return [d.strip() for d in v]

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


class TemplateApplyPreview(BaseModel):
    """Summary of a template application (dry run or actual)."""

    template_id: str
    policy: TemplateApplyPolicy
    target_dates_count: int = 0
    affected_dates: List[str] = Field(default_factory=list)
    added_tasks: int = 0
    replaced_days: int = 0
    skipped_conflicts: int = 0
    untouched_days: int = 0

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


class TemplateApplyResult(BaseModel):
    """Updated day snapshot plus the summary of what changed."""

    days: List[Day]
    preview: TemplateApplyPreview
