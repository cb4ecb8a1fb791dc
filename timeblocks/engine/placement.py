"""Placement engine for timeblocks.

Turns drop events into scheduled blocks. A new block gets the default
duration, a snapped start clamped into the day, and is only written to the
block arena when it overlaps nothing on its day.
"""

import logging
import uuid
from typing import Mapping, MutableMapping, Optional, Union

from timeblocks.engine.grid import DEFAULT_GRID, GridConfig
from timeblocks.engine.overlap import PlacementCandidate, find_overlaps
from timeblocks.engine.results import Rejected, RejectionReason
from timeblocks.models.block_template import BlockTemplate
from timeblocks.models.scheduled_block import ScheduledBlock

logger = logging.getLogger(__name__)


def _rejected_overlap(candidate: PlacementCandidate, conflicts) -> Rejected:
    ids = ", ".join(b.id for b in conflicts)
    detail = (
        f"{candidate.day} [{candidate.start_time:g}, {candidate.start_time + candidate.duration:g}) "
        f"overlaps {ids}"
    )
    logger.debug(f"Rejected placement: {detail}")
    return Rejected(reason=RejectionReason.OVERLAP, detail=detail)


def place(
    template_id: str,
    day: str,
    requested_start: float,
    blocks: MutableMapping[str, ScheduledBlock],
    grid: GridConfig = DEFAULT_GRID,
    templates: Optional[Mapping[str, BlockTemplate]] = None,
) -> Union[ScheduledBlock, Rejected]:
    """Create a scheduled block from a dropped template.

    Args:
        template_id: Template being dropped
        day: Target weekday label
        requested_start: Drop position in hours (snapped to the grid)
        blocks: Block arena, keyed by block id; the new block is added on success
        grid: Grid configuration
        templates: Template catalog; when given, unknown templates are rejected

    Returns:
        The created ScheduledBlock, or Rejected (OVERLAP / NOT_FOUND)
    """
    if templates is not None and template_id not in templates:
        logger.debug(f"Rejected placement of unknown template {template_id}")
        return Rejected(reason=RejectionReason.NOT_FOUND, detail=f"Unknown block template {template_id}")

    steps = grid.default_block_steps
    start_index = grid.clamp_start_index(grid.to_grid_index(requested_start), steps)
    candidate = PlacementCandidate(
        day=day,
        start_time=grid.from_grid_index(start_index),
        duration=grid.steps_to_hours(steps),
    )

    conflicts = find_overlaps(candidate, blocks.values(), grid=grid, templates=templates)
    if conflicts:
        return _rejected_overlap(candidate, conflicts)

    block = ScheduledBlock(
        id=str(uuid.uuid4()),
        template_id=template_id,
        day=candidate.day,
        start_time=candidate.start_time,
        duration=candidate.duration,
    )
    blocks[block.id] = block
    logger.debug(f"Placed block {block.id} ({template_id}) on {block.day} at {block.start_time:g}")
    return block


def move(
    block_id: str,
    day: str,
    requested_start: float,
    blocks: MutableMapping[str, ScheduledBlock],
    grid: GridConfig = DEFAULT_GRID,
    templates: Optional[Mapping[str, BlockTemplate]] = None,
) -> Union[ScheduledBlock, Rejected]:
    """Move an existing block to another start time and/or day.

    The duration is kept. The block is validated against its target day
    while ignoring its own former interval.

    Returns:
        The moved ScheduledBlock, or Rejected (OVERLAP / NOT_FOUND)
    """
    block = blocks.get(block_id)
    if block is None:
        logger.debug(f"Rejected move of unknown block {block_id}")
        return Rejected(reason=RejectionReason.NOT_FOUND, detail=f"Unknown scheduled block {block_id}")

    steps = grid.duration_steps(block.duration)
    start_index = grid.clamp_start_index(grid.to_grid_index(requested_start), steps)
    candidate = PlacementCandidate(
        day=day,
        start_time=grid.from_grid_index(start_index),
        duration=grid.steps_to_hours(steps),
        exclude_id=block_id,
    )

    conflicts = find_overlaps(candidate, blocks.values(), grid=grid, templates=templates)
    if conflicts:
        return _rejected_overlap(candidate, conflicts)

    block.day = candidate.day
    block.start_time = candidate.start_time
    logger.debug(f"Moved block {block.id} to {block.day} at {block.start_time:g}")
    return block
