"""Overlap validation for timeblocks.

A single half-open interval predicate decides every placement, move and
resize: [s1, s1 + d1) and [s2, s2 + d2) overlap iff s1 < s2 + d2 and
s2 < s1 + d1. Touching endpoints are not an overlap.

Blocks on different days never constrain each other.
"""

from itertools import combinations
from typing import Iterable, List, Mapping, Optional, Tuple

from pydantic import BaseModel, Field

from timeblocks.engine.grid import DEFAULT_GRID, GridConfig
from timeblocks.models.block_template import BlockTemplate
from timeblocks.models.scheduled_block import ScheduledBlock, Weekday


class PlacementCandidate(BaseModel):
    """An interval the engine is about to commit."""

    day: Weekday
    start_time: float
    duration: float = Field(..., gt=0)
    exclude_id: Optional[str] = Field(
        None, description="Existing block to ignore (the block being resized or moved)"
    )

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


def intervals_overlap(s1, d1, s2, d2) -> bool:
    """Half-open interval intersection test."""
    return s1 < s2 + d2 and s2 < s1 + d1


def find_overlaps(
    candidate: PlacementCandidate,
    existing: Iterable[ScheduledBlock],
    grid: GridConfig = DEFAULT_GRID,
    templates: Optional[Mapping[str, BlockTemplate]] = None,
) -> List[ScheduledBlock]:
    """Return the blocks the candidate would collide with.

    Comparison is done in whole grid cells so float error can never turn
    touching blocks into overlapping ones.

    Args:
        candidate: Interval being validated
        existing: Blocks already scheduled (any days)
        grid: Grid configuration used to convert hours to cells
        templates: Template catalog; when given, blocks whose template is
            missing are dangling and ignored

    Returns:
        Conflicting blocks, in the order they were given
    """
    c_start = grid.to_grid_index(candidate.start_time)
    c_steps = grid.duration_steps(candidate.duration)

    conflicts = []
    for block in existing:
        if block.day != candidate.day:
            continue
        if candidate.exclude_id is not None and block.id == candidate.exclude_id:
            continue
        if templates is not None and block.template_id not in templates:
            continue
        b_start, b_end = grid.span(block)
        if intervals_overlap(c_start, c_steps, b_start, b_end - b_start):
            conflicts.append(block)
    return conflicts


def has_overlap(
    candidate: PlacementCandidate,
    existing: Iterable[ScheduledBlock],
    grid: GridConfig = DEFAULT_GRID,
    templates: Optional[Mapping[str, BlockTemplate]] = None,
) -> bool:
    """True if the candidate interval intersects any same-day block."""
    return bool(find_overlaps(candidate, existing, grid=grid, templates=templates))


def find_invariant_violations(
    blocks: Iterable[ScheduledBlock],
    grid: GridConfig = DEFAULT_GRID,
) -> List[Tuple[str, str]]:
    """List every pair of same-day blocks whose intervals intersect."""
    violations = []
    for a, b in combinations(list(blocks), 2):
        if a.day != b.day:
            continue
        a_start, a_end = grid.span(a)
        b_start, b_end = grid.span(b)
        if intervals_overlap(a_start, a_end - a_start, b_start, b_end - b_start):
            violations.append((a.id, b.id))
    return violations
