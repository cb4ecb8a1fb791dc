"""Repository for ScheduledBlock database operations."""

import logging
from typing import List, Optional
from sqlalchemy.orm import Session

from timeblocks.models.scheduled_block import ScheduledBlock, Weekday
from timeblocks.database.models import ScheduledBlockDB

logger = logging.getLogger(__name__)


def _to_block(row: ScheduledBlockDB) -> Optional[ScheduledBlock]:
    """Convert a row, skipping rows that are not valid blocks."""
    try:
        return row.to_pydantic()
    except ValueError as e:
        logger.error(f"Skipping invalid scheduled block row {row.id} (day={row.day!r}): {type(e).__name__}")
        return None


class ScheduledBlockRepository:
    """Repository for ScheduledBlock database operations."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, block: ScheduledBlock) -> ScheduledBlock:
        """Create a new scheduled block."""
        try:
            block_db = ScheduledBlockDB.from_pydantic(block)
            self.db.add(block_db)
            self.db.commit()
            self.db.refresh(block_db)
            logger.debug(f"Created scheduled block {block.id}")
            return block_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create scheduled block {block.id}: {type(e).__name__}: {str(e)}")
            raise

    def get_all(self) -> List[ScheduledBlock]:
        """Get all scheduled blocks sorted by day column then start_time."""
        rows = self.db.query(ScheduledBlockDB).order_by(ScheduledBlockDB.start_time).all()
        order = {day.value: i for i, day in enumerate(Weekday)}
        blocks = [b for b in (_to_block(row) for row in rows) if b is not None]
        return sorted(blocks, key=lambda b: (order[b.day], b.start_time))

    def get_for_day(self, day: str) -> List[ScheduledBlock]:
        """Get the scheduled blocks of one weekday sorted by start_time."""
        rows = (
            self.db.query(ScheduledBlockDB)
            .filter(ScheduledBlockDB.day == Weekday(day).value)
            .order_by(ScheduledBlockDB.start_time)
            .all()
        )
        return [b for b in (_to_block(row) for row in rows) if b is not None]

    def get_by_id(self, block_id: str) -> Optional[ScheduledBlock]:
        """Get a scheduled block by ID."""
        row = self.db.query(ScheduledBlockDB).filter(ScheduledBlockDB.id == block_id).first()
        return _to_block(row) if row else None

    def update(self, block: ScheduledBlock) -> Optional[ScheduledBlock]:
        """Write a block's day, start_time and duration back."""
        return self._apply([block])[0]

    def update_batch(self, blocks: List[ScheduledBlock]) -> List[Optional[ScheduledBlock]]:
        """Write several blocks back in one transaction (used after a repack)."""
        return self._apply(blocks)

    def _apply(self, blocks: List[ScheduledBlock]) -> List[Optional[ScheduledBlock]]:
        try:
            rows = []
            for block in blocks:
                row = self.db.query(ScheduledBlockDB).filter(ScheduledBlockDB.id == block.id).first()
                if row is not None:
                    row.day = Weekday(block.day).value
                    row.start_time = block.start_time
                    row.duration = block.duration
                rows.append(row)
            self.db.commit()
            for row in rows:
                if row is not None:
                    self.db.refresh(row)
            logger.debug(f"Updated {sum(1 for r in rows if r is not None)} scheduled blocks")
            return [row.to_pydantic() if row is not None else None for row in rows]
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update scheduled blocks: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, block_id: str) -> bool:
        """Delete a scheduled block. Returns False if it did not exist."""
        try:
            deleted_count = (
                self.db.query(ScheduledBlockDB)
                .filter(ScheduledBlockDB.id == block_id)
                .delete(synchronize_session=False)
            )
            self.db.commit()
            logger.debug(f"Deleted {deleted_count} scheduled block {block_id}")
            return deleted_count > 0
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete scheduled block {block_id}: {type(e).__name__}: {str(e)}")
            raise

