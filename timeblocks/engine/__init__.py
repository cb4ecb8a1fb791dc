"""Time-block scheduling and layout engine for timeblocks."""

from timeblocks.engine.grid import GridConfig, DEFAULT_GRID, snap
from timeblocks.engine.overlap import PlacementCandidate, has_overlap, find_overlaps, intervals_overlap
from timeblocks.engine.placement import place, move
from timeblocks.engine.resize import resize
from timeblocks.engine.reorder import reorder, move_within_day
from timeblocks.engine.layout import BlockLayout, layout
from timeblocks.engine.results import Rejected, RejectionReason, is_rejected
from timeblocks.engine.planner import WeekPlanner, DropEvent

__all__ = [
    "GridConfig",
    "DEFAULT_GRID",
    "snap",
    "PlacementCandidate",
    "has_overlap",
    "find_overlaps",
    "intervals_overlap",
    "place",
    "move",
    "resize",
    "reorder",
    "move_within_day",
    "BlockLayout",
    "layout",
    "Rejected",
    "RejectionReason",
    "is_rejected",
    "WeekPlanner",
    "DropEvent",
]
