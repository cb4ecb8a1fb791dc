"""Repository for BlockTemplate database operations."""

import logging
from typing import List, Optional
from sqlalchemy.orm import Session

from timeblocks.models.block_template import BlockTemplate
from timeblocks.database.models import BlockTemplateDB, ScheduledBlockDB

logger = logging.getLogger(__name__)


class BlockTemplateRepository:
    """Repository for BlockTemplate database operations."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, template: BlockTemplate) -> BlockTemplate:
        """Create a new block template."""
        try:
            template_db = BlockTemplateDB.from_pydantic(template)
            self.db.add(template_db)
            self.db.commit()
            self.db.refresh(template_db)
            logger.debug(f"Created block template {template.id}: {template.name[:50]}")
            return template_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create block template {template.id}: {type(e).__name__}: {str(e)}")
            raise

    def get(self, template_id: str) -> Optional[BlockTemplate]:
        """Get a block template by ID."""
        row = self.db.query(BlockTemplateDB).filter(BlockTemplateDB.id == template_id).first()
        return row.to_pydantic() if row else None

    def get_all(self) -> List[BlockTemplate]:
        """Get all block templates, oldest first (palette order)."""
        rows = self.db.query(BlockTemplateDB).order_by(BlockTemplateDB.created_at, BlockTemplateDB.id).all()
        return [row.to_pydantic() for row in rows]

    def delete(self, template_id: str) -> Optional[int]:
        """Delete a template and every scheduled block placed from it.

        Returns:
            Number of scheduled blocks removed with the template, or None
            if the template did not exist
        """
        try:
            row = self.db.query(BlockTemplateDB).filter(BlockTemplateDB.id == template_id).first()
            if row is None:
                return None
            # Cascade to placements.
            removed = (
                self.db.query(ScheduledBlockDB)
                .filter(ScheduledBlockDB.template_id == template_id)
                .delete(synchronize_session=False)
            )
            self.db.delete(row)
            self.db.commit()
            logger.debug(f"Deleted block template {template_id} and {removed} scheduled blocks")
            return int(removed)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete block template {template_id}: {type(e).__name__}: {str(e)}")
            raise
