"""BlockTemplate data model for timeblocks."""

from datetime import datetime
from pydantic import BaseModel, Field, field_validator


class BlockTemplate(BaseModel):
    """Reusable activity definition placed onto the grid by scheduled blocks."""

    id: str = Field(..., description="Unique, stable template identifier")
    name: str = Field(..., min_length=1, description="Display name")
    description: str = Field("", description="Optional description")
    color: str = Field(..., description="Palette token or arbitrary styling value")
    created_at: datetime = Field(default_factory=datetime.utcnow, description="Template creation timestamp")

    @field_validator("name")
    @classmethod
    def _validate_name(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("name must be non-empty")
        return v

    @field_validator("description", mode="before")
    @classmethod
    def _none_description(cls, v):
        return "" if v is None else v
