"""Repository for Day database operations."""

import logging
import threading
from typing import List, Optional
from sqlalchemy.orm import Session

from timewheel.database.models import DayDB
from timewheel.models.task import Day

logger = logging.getLogger(__name__)

# Serializes snapshot writes so two concurrent saves never interleave.
_write_lock = threading.Lock()


class DayRepository:
    """Repository for Day database operations."""

    def __init__(self, db: Session):
        self.db = db

    def get_all(self) -> List[Day]:
        """Get all days sorted by date."""
        rows = self.db.query(DayDB).order_by(DayDB.date).all()
        return [row.to_pydantic() for row in rows]

    def get_by_date(self, date: str) -> Optional[Day]:
        row = self.db.query(DayDB).filter(DayDB.date == date).first()
        return row.to_pydantic() if row else None

    def save_snapshot(self, days: List[Day]) -> List[Day]:
        """Replace the stored day collection with ``days`` in one transaction.

        Raises:
            ValueError: The snapshot holds more than one Day for a date
        """
        dates = [d.date for d in days]
        if len(dates) != len(set(dates)):
            raise ValueError("Day snapshot contains duplicate dates")

        with _write_lock:
            try:
                existing = {row.date: row for row in self.db.query(DayDB).all()}
                for date, row in existing.items():
                    if date not in dates:
                        self.db.delete(row)
                for day in days:
                    row = existing.get(day.date)
                    if row is None:
                        self.db.add(DayDB.from_pydantic(day))
                        continue
                    fresh = DayDB.from_pydantic(day)
                    row.day_id = fresh.day_id
                    row.name = fresh.name
                    row.tasks = fresh.tasks
                self.db.commit()
                logger.debug(f"Saved snapshot of {len(days)} days")
            except Exception as e:
                self.db.rollback()
                logger.error(f"Failed to save day snapshot: {type(e).__name__}: {str(e)}")
                raise
        return self.get_all()

    def save_day(self, day: Day) -> Day:
        """Insert or replace a single day."""
        with _write_lock:
            try:
                row = self.db.query(DayDB).filter(DayDB.date == day.date).first()
                fresh = DayDB.from_pydantic(day)
                if row is None:
                    self.db.add(fresh)
                else:
                    row.day_id = fresh.day_id
                    row.name = fresh.name
                    row.tasks = fresh.tasks
                self.db.commit()
                logger.debug(f"Saved day {day.date} ({len(day.tasks)} tasks)")
            except Exception as e:
                self.db.rollback()
                logger.error(f"Failed to save day {day.date}: {type(e).__name__}: {str(e)}")
                raise
        return self.get_by_date(day.date)
