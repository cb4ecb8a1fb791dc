"""Time unit and grid model for timeblocks.

Converts between continuous hour values and discrete grid steps.
The grid unit is held in whole minutes so an aligned hour value is always
recomputed the same way (``index * unit_minutes / 60``) and compares exactly
after any number of conversions.
"""

import math
import os
from typing import Tuple

from pydantic import BaseModel, Field, model_validator

from timeblocks.models.constants import (
    DEFAULT_BLOCK_DURATION_HOURS,
    DEFAULT_DAY_LENGTH_HOURS,
    DEFAULT_DAY_START_HOUR,
    DEFAULT_GRID_UNIT_MINUTES,
    DEFAULT_PX_PER_HOUR,
)
from timeblocks.models.scheduled_block import ScheduledBlock

_MAX_SNAP_MULTIPLE = 2 ** 50


def snap(value: float, unit: float) -> float:
    """Round value to the nearest multiple of unit (ties round up).

    Idempotent: snap(snap(x, u), u) == snap(x, u). Values more than
    2**50 units away from zero are refused, since beyond that the product
    of the multiple and the unit no longer rounds back to the same multiple.

    Args:
        value: Hour value to snap
        unit: Grid unit in hours (must be positive)

    Returns:
        Nearest multiple of unit
    """
    if not math.isfinite(unit) or unit <= 0:
        raise ValueError(f"unit must be positive and finite, got {unit}")
    if not math.isfinite(value):
        raise ValueError(f"value must be finite, got {value}")
    multiple = math.floor(value / unit + 0.5)
    if abs(multiple) >= _MAX_SNAP_MULTIPLE:
        raise ValueError(f"value {value} is outside the snapping range for unit {unit}")
    return multiple * unit


class GridConfig(BaseModel):
    """Grid granularity and bounds.

    The minimum legal block duration is exactly one unit.
    """

    unit_minutes: int = Field(DEFAULT_GRID_UNIT_MINUTES, gt=0, description="Grid unit in minutes")
    day_start_hour: float = Field(DEFAULT_DAY_START_HOUR, ge=0, lt=24, description="Hour the grid starts at")
    day_length_hours: float = Field(DEFAULT_DAY_LENGTH_HOURS, gt=0, le=24, description="Visible length of a day")
    px_per_hour: float = Field(DEFAULT_PX_PER_HOUR, gt=0, description="Rendering scale for layout geometry")

    class Config:
        """Pydantic configuration."""
        frozen = True

    @model_validator(mode="after")
    def _validate_bounds(self):
        if self.day_start_hour + self.day_length_hours > 24:
            raise ValueError("day_start_hour + day_length_hours must not exceed 24")
        total_minutes = self.day_length_hours * 60
        if abs(total_minutes - round(total_minutes)) > 1e-9 or round(total_minutes) % self.unit_minutes:
            raise ValueError("day_length_hours must be a whole number of grid units")
        return self

    @classmethod
    def from_env(cls) -> "GridConfig":
        """Build the grid configuration from TIMEBLOCKS_* environment variables."""
        return cls(
            unit_minutes=int(os.getenv("TIMEBLOCKS_GRID_UNIT_MINUTES", str(DEFAULT_GRID_UNIT_MINUTES))),
            day_start_hour=float(os.getenv("TIMEBLOCKS_DAY_START_HOUR", str(DEFAULT_DAY_START_HOUR))),
            day_length_hours=float(os.getenv("TIMEBLOCKS_DAY_LENGTH_HOURS", str(DEFAULT_DAY_LENGTH_HOURS))),
            px_per_hour=float(os.getenv("TIMEBLOCKS_PX_PER_HOUR", str(DEFAULT_PX_PER_HOUR))),
        )

    @property
    def unit(self) -> float:
        """Grid unit in hours."""
        return self.unit_minutes / 60

    @property
    def day_end_hour(self) -> float:
        return self.from_grid_index(self.total_steps)

    @property
    def total_steps(self) -> int:
        """Number of grid cells in one day."""
        return round(self.day_length_hours * 60) // self.unit_minutes

    @property
    def default_block_steps(self) -> int:
        """Steps used by a newly dropped block.

        One hour when an hour is a whole number of units, otherwise one unit.
        """
        default_minutes = DEFAULT_BLOCK_DURATION_HOURS * 60
        steps = default_minutes / self.unit_minutes
        if steps >= 1 and steps == int(steps):
            return min(int(steps), self.total_steps)
        return 1

    def to_grid_index(self, hour: float) -> int:
        """Grid cell index of an hour value (nearest cell)."""
        return math.floor((hour - self.day_start_hour) * 60 / self.unit_minutes + 0.5)

    def from_grid_index(self, index: int) -> float:
        """Hour value at the start of a grid cell."""
        return self.day_start_hour + index * self.unit_minutes / 60

    def duration_steps(self, hours: float) -> int:
        """Number of grid units in a duration (nearest)."""
        return math.floor(hours * 60 / self.unit_minutes + 0.5)

    def steps_to_hours(self, steps: int) -> float:
        return steps * self.unit_minutes / 60

    def snap(self, hour: float) -> float:
        """Snap an hour value onto the grid."""
        return self.from_grid_index(self.to_grid_index(hour))

    def clamp_start_index(self, index: int, steps: int) -> int:
        """Clamp a start cell so a block of `steps` cells fits inside the day."""
        return max(0, min(index, self.total_steps - steps))

    def span(self, block: ScheduledBlock) -> Tuple[int, int]:
        """Half-open [start, end) interval of a block in grid cells."""
        start = self.to_grid_index(block.start_time)
        return start, start + self.duration_steps(block.duration)


DEFAULT_GRID = GridConfig()
