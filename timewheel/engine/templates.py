"""Template application engine for timewheel.

Expands day/week/month templates onto concrete target dates under a conflict
policy. ``preview_template_application`` and ``apply_template`` share one
planning pass, so an application always reports exactly what a prior preview
of the same inputs reported.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union

from timewheel.engine.conflicts import has_overlap_with_tasks
from timewheel.engine.time_utils import get_weekday_id, parse_date_iso
from timewheel.models.task import Day, Task
from timewheel.models.task_factory import (
    DayNameResolver,
    IdGenerator,
    create_day,
    materialize_template_tasks,
)
from timewheel.models.template import (
    DayTemplate,
    MonthTemplate,
    TemplateApplyOptions,
    TemplateApplyPolicy,
    TemplateApplyPreview,
    TemplateApplyResult,
    TemplateTask,
    WeekTemplate,
)

logger = logging.getLogger(__name__)

AnyTemplate = Union[DayTemplate, WeekTemplate, MonthTemplate]
MonthTemplateMap = Dict[int, List[TemplateTask]]


def normalize_target_dates(target_dates: Sequence[str]) -> List[str]:
    """Drop malformed dates, de-duplicate and sort."""
    return sorted({d for d in target_dates if parse_date_iso(d) is not None})


def build_month_template_map(template: MonthTemplate) -> MonthTemplateMap:
    """Index a month template's task lists by day-of-month.

    Keys are visited in stored order; a later key with the same day-of-month
    replaces an earlier one. Malformed keys are ignored.
    """
    by_day: MonthTemplateMap = {}
    for source_date, tasks in template.days.items():
        parsed = parse_date_iso(source_date)
        if parsed is None:
            continue
        by_day[parsed.day] = tasks
    return by_day


def get_template_tasks_for_date(
    template: AnyTemplate,
    date: str,
    month_map: Optional[MonthTemplateMap] = None,
) -> List[TemplateTask]:
    """Task patterns the template defines for ``date`` ([] if none)."""
    if isinstance(template, DayTemplate):
        return list(template.tasks)

    if isinstance(template, WeekTemplate):
        weekday = get_weekday_id(date)
        if weekday is None:
            return []
        return list(template.days.get(weekday, []))

    if isinstance(template, MonthTemplate):
        parsed = parse_date_iso(date)
        if parsed is None:
            return []
        by_day = month_map if month_map is not None else build_month_template_map(template)
        return list(by_day.get(parsed.day, []))

    raise TypeError(f"Unsupported template type: {type(template).__name__}")


@dataclass
class _DatePlan:
    """What happens to one target date."""
    date: str
    accepted: List[TemplateTask] = field(default_factory=list)
    append: bool = False


def _plan(
    days: List[Day],
    template: AnyTemplate,
    options: TemplateApplyOptions,
) -> Tuple[List[_DatePlan], TemplateApplyPreview]:
    target_dates = normalize_target_dates(options.target_dates)
    policy = TemplateApplyPolicy(options.policy)
    preview = TemplateApplyPreview(
        template_id=template.id,
        policy=policy,
        target_dates_count=len(target_dates),
    )
    day_map = {d.date: d for d in days}
    month_map = build_month_template_map(template) if isinstance(template, MonthTemplate) else None
    plans: List[_DatePlan] = []

    for date in target_dates:
        source_tasks = get_template_tasks_for_date(template, date, month_map)
        if not source_tasks:
            preview.untouched_days += 1
            continue

        existing = day_map[date].tasks if date in day_map else []

        if policy == TemplateApplyPolicy.EMPTY_ONLY:
            if existing:
                preview.untouched_days += 1
                continue
            plans.append(_DatePlan(date=date, accepted=source_tasks))
            preview.affected_dates.append(date)
            preview.added_tasks += len(source_tasks)
            continue

        if policy == TemplateApplyPolicy.REPLACE:
            plans.append(_DatePlan(date=date, accepted=source_tasks))
            preview.affected_dates.append(date)
            if existing:
                preview.replaced_days += 1
            preview.added_tasks += len(source_tasks)
            continue

        # merge_skip_conflicts: earlier template tasks win
        accepted: List[TemplateTask] = []
        for task in source_tasks:
            if has_overlap_with_tasks(task, existing) or has_overlap_with_tasks(task, accepted):
                preview.skipped_conflicts += 1
                continue
            accepted.append(task)

        if not accepted:
            preview.untouched_days += 1
            continue
        plans.append(_DatePlan(date=date, accepted=accepted, append=True))
        preview.affected_dates.append(date)
        preview.added_tasks += len(accepted)

    return plans, preview


def preview_template_application(
    days: List[Day],
    template: AnyTemplate,
    options: TemplateApplyOptions,
) -> TemplateApplyPreview:
    """Dry run: report what ``apply_template`` would do, without changing anything."""
    _, preview = _plan(days, template, options)
    return preview


def apply_template(
    days: List[Day],
    template: AnyTemplate,
    options: TemplateApplyOptions,
    *,
    id_generator: Optional[IdGenerator] = None,
    day_name_resolver: Optional[DayNameResolver] = None,
) -> TemplateApplyResult:
    """Materialize a template onto the target dates.

    Args:
        days: Current day snapshot
        template: Template to apply
        options: Policy and target dates
        id_generator: Id source for materialized tasks
        day_name_resolver: Display name for days created by the application

    Returns:
        TemplateApplyResult with the full updated day list (sorted by date)
        and the same summary ``preview_template_application`` reports
    """
    plans, preview = _plan(days, template, options)
    day_map = {d.date: d for d in days}

    for plan in plans:
        existing_day = day_map.get(plan.date)
        generated: List[Task] = materialize_template_tasks(plan.date, plan.accepted, id_generator)
        if plan.append and existing_day is not None:
            generated = list(existing_day.tasks) + generated
        day_map[plan.date] = create_day(plan.date, generated, existing_day, day_name_resolver)

    affected = set(preview.affected_dates)
    untouched = [d for d in days if d.date not in affected]
    changed = [day_map[date] for date in preview.affected_dates]
    next_days = sorted(untouched + changed, key=lambda d: d.date)

    logger.debug(
        f"Applied template {template.id} ({preview.policy}) to {len(preview.affected_dates)} "
        f"of {preview.target_dates_count} dates: +{preview.added_tasks} tasks, "
        f"{preview.skipped_conflicts} skipped"
    )
    return TemplateApplyResult(days=next_days, preview=preview)
