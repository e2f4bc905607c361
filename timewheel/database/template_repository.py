"""Repository for Template database operations."""

import logging
from datetime import datetime
from typing import List

from sqlalchemy.orm import Session

from timewheel.database.models import TemplateDB

logger = logging.getLogger(__name__)


class TemplateRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, template):
        try:
            row = TemplateDB.from_pydantic(template)
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
            logger.debug(f"Created {template.type} template {template.id}: {template.name[:50]}")
            return row.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create template {template.id}: {type(e).__name__}: {str(e)}")
            raise

    def get(self, template_id: str):
        row = self.db.query(TemplateDB).filter(TemplateDB.id == template_id).first()
        return row.to_pydantic() if row else None

    def list_all(self) -> List:
        rows = self.db.query(TemplateDB).order_by(TemplateDB.created_at, TemplateDB.id).all()
        return [row.to_pydantic() for row in rows]

    def update(self, template):
        """Overwrite a stored template (variant may change)."""
        row = self.db.query(TemplateDB).filter(TemplateDB.id == template.id).first()
        if not row:
            raise ValueError(f"Template {template.id} not found")
        try:
            fresh = TemplateDB.from_pydantic(template)
            row.name = fresh.name
            row.type = fresh.type
            row.payload = fresh.payload
            row.updated_at = datetime.utcnow()
            self.db.commit()
            self.db.refresh(row)
            return row.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update template {template.id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, template_id: str) -> bool:
        row = self.db.query(TemplateDB).filter(TemplateDB.id == template_id).first()
        if not row:
            return False
        try:
            self.db.delete(row)
            self.db.commit()
            logger.debug(f"Deleted template {template_id}")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete template {template_id}: {type(e).__name__}: {str(e)}")
            raise
