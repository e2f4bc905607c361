"""Constants for timewheel.

This module centralizes all magic numbers and default values used throughout the application.
"""


# Clock
MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 24 * MINUTES_PER_HOUR

# Task form defaults
DEFAULT_CATEGORY = "custom"
DEFAULT_COLOR = "#4CAF50"

# Id prefixes
TASK_ID_PREFIX = "task"
TEMPLATE_TASK_ID_PREFIX = "template"
