"""FastAPI web application for timewheel.

Thin orchestration shell: every endpoint loads a snapshot from the database,
hands it to the pure engine and persists whatever snapshot comes back.
"""

import logging
import os
import uuid
from contextlib import asynccontextmanager
from datetime import date as date_cls, datetime
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel, Field, ValidationError
from sqlalchemy.orm import Session

from timewheel.database.database import get_db, init_db
from timewheel.database.day_repository import DayRepository
from timewheel.database.template_repository import TemplateRepository
from timewheel.engine.calendar_merge import (
    attach_calendar_event_id,
    merge_imported_tasks,
    prune_deleted_calendar_tasks,
)
from timewheel.engine.day_summary import summarize_day
from timewheel.engine.errors import (
    InvalidDateError,
    OverlapConflictError,
    SchedulingError,
    TaskNotFoundError,
)
from timewheel.engine.mutations import (
    add_task_to_days,
    delete_task_from_days,
    find_day,
    update_task_in_days,
)
from timewheel.engine.templates import apply_template, preview_template_application
from timewheel.engine.time_utils import (
    format_date_iso,
    get_weekday_id,
    is_valid_time,
    parse_date_iso,
    time_to_minutes,
)
from timewheel.models.task import Day, DaySummary, Task, TaskFormData
from timewheel.models.template import (
    TemplateApplyOptions,
    TemplateApplyPreview,
    TemplateApplyResult,
    parse_template,
)

load_dotenv()

logger = logging.getLogger(__name__)

# Unify update with add: trim neighbours when an update is forced over them.
TRIM_NEIGHBORS_ON_UPDATE = os.getenv("TRIM_NEIGHBORS_ON_UPDATE", "False").lower() == "true"


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(
    title="timewheel API",
    description="Day planner with conflict-aware task editing and recurring templates",
    version="0.1.0",
    lifespan=lifespan,
)


# Request/response models
class AddTaskRequest(TaskFormData):
    """Task form plus overlap handling."""
    allow_overlap: bool = False


class UpdateTaskRequest(TaskFormData):
    allow_overlap: bool = False
    trim_neighbors: Optional[bool] = Field(
        None, description="Override TRIM_NEIGHBORS_ON_UPDATE for this request"
    )


class DayResponse(BaseModel):
    day: Day


class CalendarLinkRequest(BaseModel):
    """Event id the external calendar assigned to a synced task."""
    calendar_event_id: str = Field(..., min_length=1)


class CalendarImportRequest(BaseModel):
    """Tasks already fetched from the external calendar for one day."""
    tasks: List[Task] = Field(default_factory=list)
    live_event_ids: Optional[List[str]] = Field(
        None, description="All event ids still present in the calendar; linked tasks missing from it are removed"
    )


def _day_name(date: str) -> str:
    weekday = get_weekday_id(date)
    return weekday.value.capitalize() if weekday else date


def _require_date(date: str) -> None:
    if parse_date_iso(date) is None:
        raise HTTPException(status_code=400, detail={"kind": InvalidDateError.kind, "message": f"Invalid date: {date}"})


def _scheduling_http_error(e: SchedulingError) -> HTTPException:
    """Translate an engine error into an HTTP error carrying its kind."""
    detail: Dict[str, Any] = {"kind": e.kind, "message": str(e)}
    if isinstance(e, OverlapConflictError):
        return HTTPException(status_code=409, detail={**detail, "conflicting_task_ids": e.conflicting_task_ids})
    if isinstance(e, TaskNotFoundError):
        return HTTPException(status_code=404, detail=detail)
    return HTTPException(status_code=400, detail=detail)


def _get_template_or_404(repo: TemplateRepository, template_id: str):
    template = repo.get(template_id)
    if template is None:
        raise HTTPException(status_code=404, detail=f"Template {template_id} not found")
    return template


def _persist_day(repo: DayRepository, days: List[Day], date: str) -> Day:
    day = find_day(days, date)
    return repo.save_day(day)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


@app.get("/days", response_model=List[Day])
def list_days(db: Session = Depends(get_db)):
    return DayRepository(db).get_all()


@app.get("/days/{date}", response_model=DayResponse)
def get_day(date: str, db: Session = Depends(get_db)):
    """Get a day; an unscheduled date yields an empty day."""
    _require_date(date)
    day = DayRepository(db).get_by_date(date)
    if day is None:
        day = Day(id=date, name=_day_name(date), date=date, tasks=[])
    return DayResponse(day=day)


@app.get("/days/{date}/summary", response_model=DaySummary)
def get_day_summary(
    date: str,
    now: Optional[str] = Query(None, description="Current time (HH:MM); defaults to server local time"),
    db: Session = Depends(get_db),
):
    _require_date(date)
    if now is not None and not is_valid_time(now):
        raise HTTPException(status_code=400, detail=f"Invalid time: {now}")
    current = datetime.now()
    now_minutes = time_to_minutes(now) if now else current.hour * 60 + current.minute
    day = DayRepository(db).get_by_date(date) or Day(id=date, name=_day_name(date), date=date)
    return summarize_day(day, now_minutes, is_current_day=date == format_date_iso(date_cls.today()))


@app.post("/days/{date}/tasks", response_model=DayResponse, status_code=201)
def create_task(date: str, request: AddTaskRequest, db: Session = Depends(get_db)):
    """Add a task; with allow_overlap, overlapping tasks are trimmed."""
    _require_date(date)
    repo = DayRepository(db)
    form = TaskFormData(**request.model_dump(exclude={"allow_overlap"}))
    try:
        days = add_task_to_days(
            repo.get_all(),
            date,
            form,
            allow_overlap=request.allow_overlap,
            day_name_resolver=_day_name,
        )
    except SchedulingError as e:
        raise _scheduling_http_error(e)
    return DayResponse(day=_persist_day(repo, days, date))


@app.put("/days/{date}/tasks/{task_id}", response_model=DayResponse)
def update_task(date: str, task_id: str, request: UpdateTaskRequest, db: Session = Depends(get_db)):
    _require_date(date)
    repo = DayRepository(db)
    form = TaskFormData(**request.model_dump(exclude={"allow_overlap", "trim_neighbors"}))
    trim = TRIM_NEIGHBORS_ON_UPDATE if request.trim_neighbors is None else request.trim_neighbors
    try:
        days = update_task_in_days(
            repo.get_all(),
            date,
            task_id,
            form,
            allow_overlap=request.allow_overlap,
            trim_neighbors=trim,
        )
    except SchedulingError as e:
        raise _scheduling_http_error(e)
    return DayResponse(day=_persist_day(repo, days, date))


@app.delete("/days/{date}/tasks/{task_id}", response_model=DayResponse)
def delete_task(date: str, task_id: str, db: Session = Depends(get_db)):
    """Delete a task (idempotent)."""
    _require_date(date)
    repo = DayRepository(db)
    days = delete_task_from_days(repo.get_all(), date, task_id)
    day = find_day(days, date)
    if day is None:
        return DayResponse(day=Day(id=date, name=_day_name(date), date=date, tasks=[]))
    return DayResponse(day=repo.save_day(day))


@app.post("/days/{date}/calendar-import", response_model=DayResponse)
def import_calendar_tasks(date: str, request: CalendarImportRequest, db: Session = Depends(get_db)):
    """Merge calendar-imported tasks into a day, pruning tasks whose event is gone."""
    _require_date(date)
    repo = DayRepository(db)
    day = repo.get_by_date(date) or Day(id=date, name=_day_name(date), date=date)
    if request.live_event_ids is not None:
        day = day.model_copy(update={"tasks": prune_deleted_calendar_tasks(day.tasks, request.live_event_ids)})
    merged = merge_imported_tasks(day, request.tasks)
    return DayResponse(day=repo.save_day(merged))


@app.put("/days/{date}/tasks/{task_id}/calendar-event", response_model=DayResponse)
def link_calendar_event(date: str, task_id: str, request: CalendarLinkRequest, db: Session = Depends(get_db)):
    """Link a task to the calendar event created for it after a sync."""
    _require_date(date)
    repo = DayRepository(db)
    try:
        days = attach_calendar_event_id(repo.get_all(), date, task_id, request.calendar_event_id)
    except SchedulingError as e:
        raise _scheduling_http_error(e)
    return DayResponse(day=_persist_day(repo, days, date))


@app.post("/templates", status_code=201)
def create_template(body: Dict[str, Any], db: Session = Depends(get_db)):
    """Create a day/week/month template (discriminated by ``type``)."""
    payload = {"id": str(uuid.uuid4()), **body}
    try:
        template = parse_template(payload)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))
    repo = TemplateRepository(db)
    if repo.get(template.id) is not None:
        raise HTTPException(status_code=409, detail=f"Template {template.id} already exists")
    return repo.create(template).model_dump(mode="json")


@app.get("/templates")
def list_templates(db: Session = Depends(get_db)):
    return [t.model_dump(mode="json") for t in TemplateRepository(db).list_all()]


@app.get("/templates/{template_id}")
def get_template(template_id: str, db: Session = Depends(get_db)):
    return _get_template_or_404(TemplateRepository(db), template_id).model_dump(mode="json")


@app.delete("/templates/{template_id}", status_code=204)
def delete_template(template_id: str, db: Session = Depends(get_db)):
    if not TemplateRepository(db).delete(template_id):
        raise HTTPException(status_code=404, detail=f"Template {template_id} not found")


@app.post("/templates/{template_id}/preview", response_model=TemplateApplyPreview)
def preview_template(template_id: str, options: TemplateApplyOptions, db: Session = Depends(get_db)):
    """Dry run of a template application."""
    template = _get_template_or_404(TemplateRepository(db), template_id)
    return preview_template_application(DayRepository(db).get_all(), template, options)


@app.post("/templates/{template_id}/apply", response_model=TemplateApplyResult)
def apply_template_endpoint(template_id: str, options: TemplateApplyOptions, db: Session = Depends(get_db)):
    """Apply a template and persist the resulting snapshot."""
    template = _get_template_or_404(TemplateRepository(db), template_id)
    repo = DayRepository(db)
    result = apply_template(repo.get_all(), template, options, day_name_resolver=_day_name)
    if result.preview.affected_dates:
        repo.save_snapshot(result.days)
    logger.info(
        f"Template {template_id} applied: {result.preview.added_tasks} tasks on "
        f"{len(result.preview.affected_dates)} days"
    )
    return result


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
