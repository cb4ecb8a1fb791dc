"""SQLAlchemy database models for timeblocks."""

from datetime import datetime
import uuid
from sqlalchemy import Column, String, Float, DateTime, ForeignKey

from typing import Union, TypeVar
from timeblocks.database.database import Base

T = TypeVar('T')


def enum_to_value(enum_obj: Union[str, T]) -> str:
    """Convert enum to string value (handles both enum and string).

    Args:
        enum_obj: Enum instance or string value

    Returns:
        String value of the enum, or the string itself if already a string
    """
    if hasattr(enum_obj, 'value'):
        return enum_obj.value
    return str(enum_obj)


class BlockTemplateDB(Base):
    """Database model for BlockTemplate."""

    __tablename__ = "block_templates"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")
    color = Column(String, nullable=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from timeblocks.models.block_template import BlockTemplate
        return BlockTemplate(
            id=self.id,
            name=self.name,
            description=self.description or "",
            color=self.color,
            created_at=self.created_at,
        )

    @classmethod
    def from_pydantic(cls, template):
        """Create database model from Pydantic model."""
        return cls(
            id=template.id,
            name=template.name,
            description=template.description,
            color=template.color,
            created_at=template.created_at,
        )


class ScheduledBlockDB(Base):
    """Database model for ScheduledBlock."""

    __tablename__ = "scheduled_blocks"

    # Primary key
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    # Deleting a template deletes its placements.
    template_id = Column(String, ForeignKey("block_templates.id", ondelete="CASCADE"), nullable=False, index=True)

    # Block details
    day = Column(String, nullable=False, index=True)
    start_time = Column(Float, nullable=False)
    duration = Column(Float, nullable=False)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model.

        Raises:
            pydantic.ValidationError: If the stored row is not a valid block
                (e.g. an unknown weekday label)
        """
        from timeblocks.models.scheduled_block import ScheduledBlock
        return ScheduledBlock(
            id=self.id,
            template_id=self.template_id,
            day=self.day,
            start_time=self.start_time,
            duration=self.duration,
        )

    @classmethod
    def from_pydantic(cls, block):
        """Create database model from Pydantic model."""
        return cls(
            id=block.id,
            template_id=block.template_id,
            day=enum_to_value(block.day),
            start_time=block.start_time,
            duration=block.duration,
        )
