"""Data models for timewheel."""

from timewheel.models.task import Task, Day, TaskFormData, DaySummary
from timewheel.models.template import (
    Weekday,
    TemplateTask,
    DayTemplate,
    WeekTemplate,
    MonthTemplate,
    Template,
    TemplateApplyPolicy,
    TemplateApplyOptions,
    TemplateApplyPreview,
    TemplateApplyResult,
    parse_template,
)

__all__ = [
    "Task",
    "Day",
    "TaskFormData",
    "DaySummary",
    "Weekday",
    "TemplateTask",
    "DayTemplate",
    "WeekTemplate",
    "MonthTemplate",
    "Template",
    "TemplateApplyPolicy",
    "TemplateApplyOptions",
    "TemplateApplyPreview",
    "TemplateApplyResult",
    "parse_template",
]
