"""Week planner facade for timeblocks.

Binds the engine entry points to a caller-owned block arena and template
catalog. The planner keeps references to the caller's dicts and mutates
them in place; it holds no other state.
"""

import logging
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field, model_validator

from timeblocks.engine.grid import DEFAULT_GRID, GridConfig
from timeblocks.engine.layout import BlockLayout, layout
from timeblocks.engine.placement import move, place
from timeblocks.engine.reorder import day_blocks, move_within_day, reorder
from timeblocks.engine.resize import resize
from timeblocks.engine.results import Rejected
from timeblocks.models.block_template import BlockTemplate
from timeblocks.models.scheduled_block import ScheduledBlock, Weekday, WEEKDAYS

logger = logging.getLogger(__name__)


class DropEvent(BaseModel):
    """A drag/drop gesture already resolved to grid coordinates.

    Exactly one of template_id (drop from the palette) or block_id
    (drag of an already scheduled block) is set.
    """

    template_id: Optional[str] = None
    block_id: Optional[str] = None
    day: Weekday
    target_start: float = Field(..., description="Drop position in hours")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    @model_validator(mode="after")
    def _one_source(self):
        if (self.template_id is None) == (self.block_id is None):
            raise ValueError("exactly one of template_id or block_id is required")
        return self


class WeekPlanner:
    """Engine operations over one week of scheduled blocks."""

    def __init__(
        self,
        blocks: Dict[str, ScheduledBlock],
        templates: Dict[str, BlockTemplate],
        grid: GridConfig = DEFAULT_GRID,
    ):
        self.blocks = blocks
        self.templates = templates
        self.grid = grid

    def place(self, template_id: str, day: str, start_time: float) -> Union[ScheduledBlock, Rejected]:
        return place(template_id, day, start_time, self.blocks, grid=self.grid, templates=self.templates)

    def move(self, block_id: str, day: str, start_time: float) -> Union[ScheduledBlock, Rejected]:
        return move(block_id, day, start_time, self.blocks, grid=self.grid, templates=self.templates)

    def resize(self, block_id: str, new_duration: float) -> Union[ScheduledBlock, Rejected]:
        return resize(block_id, new_duration, self.blocks, grid=self.grid, templates=self.templates)

    def reorder(self, day: str, new_order: List[str]) -> Union[List[ScheduledBlock], Rejected]:
        return reorder(day, new_order, self.blocks, grid=self.grid)

    def move_within_day(self, day: str, active_id: str, over_id: str) -> Union[List[ScheduledBlock], Rejected]:
        return move_within_day(day, active_id, over_id, self.blocks, grid=self.grid)

    def remove(self, block_id: str) -> None:
        """Delete a block; unknown ids are ignored."""
        if self.blocks.pop(block_id, None) is not None:
            logger.debug(f"Removed block {block_id}")

    def layout(self, block: ScheduledBlock) -> BlockLayout:
        return layout(block, grid=self.grid)

    def handle_drop(self, event: DropEvent) -> Union[ScheduledBlock, Rejected]:
        """Apply a resolved drop gesture: place a template or move a block."""
        if event.template_id is not None:
            return self.place(event.template_id, event.day, event.target_start)
        return self.move(event.block_id, event.day, event.target_start)

    def delete_template(self, template_id: str) -> List[str]:
        """Delete a template and every block placed from it.

        Returns:
            IDs of the removed blocks
        """
        self.templates.pop(template_id, None)
        removed = [b.id for b in self.blocks.values() if b.template_id == template_id]
        for block_id in removed:
            del self.blocks[block_id]
        logger.debug(f"Deleted template {template_id} and {len(removed)} scheduled blocks")
        return removed

    def day_schedule(self, day: str) -> List[ScheduledBlock]:
        """All blocks of a day, ordered by start time."""
        return day_blocks(day, self.blocks)

    def renderable_blocks(self, day: str) -> List[ScheduledBlock]:
        """Blocks of a day whose template still exists."""
        return [b for b in self.day_schedule(day) if b.template_id in self.templates]

    def week_layout(self) -> Dict[str, List[BlockLayout]]:
        """Layouts of every renderable block, grouped by weekday."""
        return {day: [self.layout(b) for b in self.renderable_blocks(day)] for day in WEEKDAYS}
