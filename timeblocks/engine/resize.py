"""Resize engine for timeblocks.

Changes a block's duration in place. Durations below one grid unit are
raised to one unit rather than refused; a resize that would collide with
another block on the same day is refused as a whole (never shrunk to fit).
A resize past the end of the day is capped at the end of the day.
"""

import logging
from typing import Mapping, MutableMapping, Optional, Union

from timeblocks.engine.grid import DEFAULT_GRID, GridConfig
from timeblocks.engine.overlap import PlacementCandidate, find_overlaps
from timeblocks.engine.results import Rejected, RejectionReason
from timeblocks.models.block_template import BlockTemplate
from timeblocks.models.scheduled_block import ScheduledBlock

logger = logging.getLogger(__name__)


def resize(
    block_id: str,
    requested_duration: float,
    blocks: MutableMapping[str, ScheduledBlock],
    grid: GridConfig = DEFAULT_GRID,
    templates: Optional[Mapping[str, BlockTemplate]] = None,
) -> Union[ScheduledBlock, Rejected]:
    """Resize a scheduled block.

    Args:
        block_id: Block to resize
        requested_duration: New duration in hours
        blocks: Block arena, keyed by block id
        grid: Grid configuration
        templates: Template catalog; when given, dangling blocks do not block the resize

    Returns:
        The updated ScheduledBlock, or Rejected (OVERLAP / NOT_FOUND).
        The stored duration can differ from the request: it is raised to one
        unit, snapped, and capped at the end of the day. Callers that need
        the exact request honored compare the returned block's duration.
    """
    block = blocks.get(block_id)
    if block is None:
        logger.debug(f"Rejected resize of unknown block {block_id}")
        return Rejected(reason=RejectionReason.NOT_FOUND, detail=f"Unknown scheduled block {block_id}")

    start_index = grid.to_grid_index(block.start_time)
    steps = max(1, grid.duration_steps(max(requested_duration, grid.unit)))
    # Blocks never span into the next day.
    if steps > grid.total_steps - start_index:
        logger.debug(
            f"Capping resize of {block_id} at end of day: {grid.steps_to_hours(steps):g}h requested, "
            f"{grid.steps_to_hours(grid.total_steps - start_index):g}h available"
        )
        steps = max(1, grid.total_steps - start_index)

    candidate = PlacementCandidate(
        day=block.day,
        start_time=block.start_time,
        duration=grid.steps_to_hours(steps),
        exclude_id=block_id,
    )
    conflicts = find_overlaps(candidate, blocks.values(), grid=grid, templates=templates)
    if conflicts:
        detail = (
            f"{block.day} [{block.start_time:g}, {block.start_time + candidate.duration:g}) "
            f"overlaps {', '.join(b.id for b in conflicts)}"
        )
        logger.debug(f"Rejected resize of {block_id}: {detail}")
        return Rejected(reason=RejectionReason.OVERLAP, detail=detail)

    block.duration = candidate.duration
    logger.debug(f"Resized block {block_id} to {block.duration:g}h")
    return block
