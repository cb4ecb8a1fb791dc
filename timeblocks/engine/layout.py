"""Layout geometry for timeblocks.

Pure derivation of where a block sits on the day column, in hours from the
top of the grid and in pixels, for the grid renderer.
"""

import math
from typing import List, Tuple

from pydantic import BaseModel, Field

from timeblocks.engine.grid import DEFAULT_GRID, GridConfig
from timeblocks.models.scheduled_block import ScheduledBlock


class BlockLayout(BaseModel):
    """Geometry of one scheduled block."""

    offset: float = Field(..., description="Hours from the top of the grid")
    extent: float = Field(..., description="Height in hours")
    top_px: float = Field(..., description="Offset in pixels")
    height_px: float = Field(..., description="Height in pixels")
    label: str = Field(..., description="Start and end time, e.g. '09:00 - 10:30'")


def format_time(hour: float) -> str:
    """Format an hour value as HH:MM."""
    hours = math.floor(hour)
    minutes = round((hour - hours) * 60)
    if minutes == 60:
        hours, minutes = hours + 1, 0
    return f"{hours:02d}:{minutes:02d}"


def layout(block: ScheduledBlock, grid: GridConfig = DEFAULT_GRID) -> BlockLayout:
    """Compute rendering geometry for a block."""
    start, end = grid.span(block)
    offset = grid.steps_to_hours(start)
    extent = grid.steps_to_hours(end - start)
    return BlockLayout(
        offset=offset,
        extent=extent,
        top_px=offset * grid.px_per_hour,
        height_px=extent * grid.px_per_hour,
        label=f"{format_time(block.start_time)} - {format_time(block.start_time + block.duration)}",
    )


def span_from_layout(block_layout: BlockLayout, grid: GridConfig = DEFAULT_GRID) -> Tuple[float, float]:
    """Rebuild (start_time, duration) from a layout via the grid conversions."""
    start = grid.duration_steps(block_layout.offset)
    steps = grid.duration_steps(block_layout.extent)
    return grid.from_grid_index(start), grid.steps_to_hours(steps)


def hour_markers(grid: GridConfig = DEFAULT_GRID) -> List[Tuple[float, str]]:
    """(top_px, label) for every whole hour line drawn on the grid."""
    first = math.ceil(grid.day_start_hour)
    markers = []
    hour = first
    while hour < grid.day_end_hour:
        markers.append(((hour - grid.day_start_hour) * grid.px_per_hour, format_time(hour)))
        hour += 1
    return markers
