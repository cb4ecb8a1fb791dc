"""Data models for timeblocks."""

from timeblocks.models.block_template import BlockTemplate
from timeblocks.models.scheduled_block import ScheduledBlock, Weekday, WEEKDAYS

__all__ = [
    "BlockTemplate",
    "ScheduledBlock",
    "Weekday",
    "WEEKDAYS",
]
