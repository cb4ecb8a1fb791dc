"""ScheduledBlock data model for timeblocks."""

from enum import Enum
from pydantic import BaseModel, Field


class Weekday(str, Enum):
    """Weekday labels used by the weekly grid."""
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"


WEEKDAYS = [day.value for day in Weekday]


class ScheduledBlock(BaseModel):
    """ScheduledBlock represents one placement of a block template on the grid."""

    id: str = Field(..., description="Unique scheduled block identifier")
    template_id: str = Field(..., description="ID of the block template being placed")
    day: Weekday = Field(..., description="Weekday the block is placed on")
    start_time: float = Field(..., ge=0, lt=24, description="Start, in hours from the start of the day")
    duration: float = Field(..., gt=0, description="Duration in hours")

    @property
    def end_time(self) -> float:
        """End of the half-open interval [start_time, end_time)."""
        return self.start_time + self.duration

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
