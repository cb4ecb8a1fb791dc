"""Reorder/repack engine for timeblocks.

After a manual reorder, a day's blocks are laid out back to back from the
start of the day in the requested order. Durations are kept; only start
times change. The output cannot overlap, so the overlap validator is not
consulted.
"""

import logging
from typing import List, MutableMapping, Sequence, Union

from timeblocks.engine.grid import DEFAULT_GRID, GridConfig
from timeblocks.engine.results import Rejected, RejectionReason
from timeblocks.models.scheduled_block import ScheduledBlock, Weekday

logger = logging.getLogger(__name__)


def day_blocks(day: str, blocks: MutableMapping[str, ScheduledBlock]) -> List[ScheduledBlock]:
    """Blocks of one day in their current order (by start time, then id)."""
    day = Weekday(day).value
    return sorted(
        (b for b in blocks.values() if b.day == day),
        key=lambda b: (b.start_time, b.id),
    )


def _invalid(day: str, detail: str) -> Rejected:
    logger.warning(f"Invalid reorder for {day}: {detail}")
    return Rejected(reason=RejectionReason.INVALID_REORDER, detail=detail)


def reorder(
    day: str,
    new_order: Sequence[str],
    blocks: MutableMapping[str, ScheduledBlock],
    grid: GridConfig = DEFAULT_GRID,
) -> Union[List[ScheduledBlock], Rejected]:
    """Repack a day's blocks contiguously in a new order.

    The first block starts at the grid's day start; each next block starts
    where the previous one ends.

    Args:
        day: Weekday label
        new_order: Every block id of the day, exactly once, in the new order
        blocks: Block arena, keyed by block id
        grid: Grid configuration

    Returns:
        The day's blocks in their new order, or Rejected (INVALID_REORDER).
        On rejection no block is modified.
    """
    current = day_blocks(day, blocks)
    if not current:
        return _invalid(day, "day has no blocks")
    if not new_order:
        return _invalid(day, "empty order")

    by_id = {b.id: b for b in current}
    unknown = [block_id for block_id in new_order if block_id not in by_id]
    if unknown:
        return _invalid(day, f"unknown block ids {unknown}")
    if len(set(new_order)) != len(new_order):
        return _invalid(day, "duplicate block ids")
    missing = [b.id for b in current if b.id not in set(new_order)]
    if missing:
        return _invalid(day, f"order omits block ids {missing}")

    ordered = [by_id[block_id] for block_id in new_order]
    starts = []
    index = 0
    for block in ordered:
        starts.append(index)
        index += grid.duration_steps(block.duration)
    if index > grid.total_steps:
        return _invalid(day, "repacked blocks run past the end of the day")

    for block, start in zip(ordered, starts):
        block.start_time = grid.from_grid_index(start)
    logger.debug(f"Repacked {len(ordered)} blocks on {Weekday(day).value}")
    return ordered


def move_within_day(
    day: str,
    active_id: str,
    over_id: str,
    blocks: MutableMapping[str, ScheduledBlock],
    grid: GridConfig = DEFAULT_GRID,
) -> Union[List[ScheduledBlock], Rejected]:
    """Move one block to the position of another, then repack the day.

    Args:
        day: Weekday label
        active_id: Block being dragged
        over_id: Block whose position it takes

    Returns:
        The day's blocks in their new order, or Rejected (INVALID_REORDER)
    """
    order = [b.id for b in day_blocks(day, blocks)]
    if active_id not in order or over_id not in order:
        return _invalid(day, f"unknown block ids {[i for i in (active_id, over_id) if i not in order]}")

    old_index, new_index = order.index(active_id), order.index(over_id)
    order.insert(new_index, order.pop(old_index))
    return reorder(day, order, blocks, grid=grid)
