"""Constants for timeblocks.

This module centralizes all magic numbers and default values used throughout the application.
"""


# Grid defaults
DEFAULT_GRID_UNIT_MINUTES = 10
DEFAULT_DAY_START_HOUR = 0
DEFAULT_DAY_LENGTH_HOURS = 24
DEFAULT_PX_PER_HOUR = 120

# Newly dropped blocks
DEFAULT_BLOCK_DURATION_HOURS = 1.0

# Palette offered by the template editor
PASTEL_COLORS = [
    "bg-red-200",
    "bg-orange-200",
    "bg-yellow-200",
    "bg-lime-200",
    "bg-green-200",
    "bg-cyan-200",
    "bg-blue-200",
    "bg-violet-200",
    "bg-purple-200",
    "bg-pink-200",
    "bg-rose-200",
]
DEFAULT_TEMPLATE_COLOR = PASTEL_COLORS[0]

# Starter templates seeded into an empty catalog: (id, name, description, color)
DEFAULT_TEMPLATES = [
    ("work", "Work", "Work time", "bg-blue-300"),
    ("eat", "Eat", "Meal time", "bg-green-300"),
    ("sleep", "Sleep", "Sleep time", "bg-purple-300"),
]
