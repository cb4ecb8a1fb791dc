"""Outcome values returned by the scheduling engine.

Mutating engine operations never raise for a refused request; they return
either the mutated block(s) or a Rejected value.
"""

from enum import Enum
from typing import Any
from pydantic import BaseModel, Field


class RejectionReason(str, Enum):
    """Why the engine refused a mutation."""
    OVERLAP = "overlap"
    INVALID_REORDER = "invalid_reorder"
    NOT_FOUND = "not_found"


class Rejected(BaseModel):
    """A refused mutation. The block arena is unchanged."""

    reason: RejectionReason = Field(..., description="Rejection kind")
    detail: str = Field("", description="Human-readable explanation for logs")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


def is_rejected(outcome: Any) -> bool:
    """True when an engine outcome is a Rejected value."""
    return isinstance(outcome, Rejected)
