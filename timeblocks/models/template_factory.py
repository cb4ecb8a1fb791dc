"""Block template creation factory for timeblocks.

This module centralizes template creation logic so the palette editor,
the API and database seeding apply the same defaults.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from timeblocks.models.block_template import BlockTemplate
from timeblocks.models.constants import (
    DEFAULT_TEMPLATE_COLOR,
    DEFAULT_TEMPLATES,
    PASTEL_COLORS,
)


def is_palette_color(color: str) -> bool:
    """Check whether a color is one of the editor's palette tokens.

    Arbitrary styling values are still accepted on templates; this only
    tells the editor whether to highlight a palette swatch.
    """
    return color in PASTEL_COLORS


def create_template(
    name: str,
    description: Optional[str] = None,
    color: Optional[str] = None,
    template_id: Optional[str] = None,
) -> BlockTemplate:
    """Create a block template with defaults, allowing overrides.

    Args:
        name: Display name (required, surrounding whitespace is stripped)
        description: Optional description
        color: Palette token or styling value (defaults to the first palette color)
        template_id: Explicit id (a new UUID v4 is generated when omitted)

    Returns:
        BlockTemplate with defaults applied

    Raises:
        pydantic.ValidationError: If the name is empty
    """
    return BlockTemplate(
        id=template_id or str(uuid.uuid4()),
        name=name,
        description=description or "",
        color=color or DEFAULT_TEMPLATE_COLOR,
        created_at=datetime.utcnow(),
    )


def default_templates() -> List[BlockTemplate]:
    """Starter templates offered before the user creates any of their own."""
    return [
        create_template(name, description, color, template_id=template_id)
        for template_id, name, description, color in DEFAULT_TEMPLATES
    ]
