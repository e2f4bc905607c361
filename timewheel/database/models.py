"""SQLAlchemy database models for timewheel."""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, JSON

from timewheel.database.database import Base
from timewheel.models.task import Day, Task
from timewheel.models.template import parse_template


class DayDB(Base):
    """Database model for Day.

    One row per calendar date; the day's tasks are stored inline as a JSON
    array since tasks are exclusively owned by their day.
    """

    __tablename__ = "days"

    date = Column(String, primary_key=True)
    day_id = Column(String, nullable=False)
    name = Column(String, nullable=False)
    tasks = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self) -> Day:
        """Convert database model to Pydantic model."""
        return Day(
            id=self.day_id,
            name=self.name,
            date=self.date,
            tasks=[Task.model_validate(t) for t in (self.tasks or [])],
        )

    @classmethod
    def from_pydantic(cls, day: Day) -> "DayDB":
        """Create database model from Pydantic model."""
        return cls(
            date=day.date,
            day_id=day.id,
            name=day.name,
            tasks=[t.model_dump() for t in day.tasks],
        )


class TemplateDB(Base):
    """Database model for Template (any variant)."""

    __tablename__ = "templates"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False, index=True)
    # Variant-specific body (tasks for day templates, days for week/month)
    payload = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to the matching template variant."""
        return parse_template(
            {
                **(self.payload or {}),
                "id": self.id,
                "name": self.name,
                "type": self.type,
                "created_at": self.created_at,
                "updated_at": self.updated_at,
            }
        )

    @classmethod
    def from_pydantic(cls, template) -> "TemplateDB":
        """Create database model from a template variant."""
        body = template.model_dump(
            mode="json",
            exclude={"id", "name", "type", "created_at", "updated_at"},
        )
        return cls(
            id=template.id,
            name=template.name,
            type=template.type,
            payload=body,
            created_at=template.created_at,
            updated_at=template.updated_at,
        )
