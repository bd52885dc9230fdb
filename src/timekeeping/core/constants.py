"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

DEFAULT_HISTORY_LIMIT = 30
DEFAULT_REGULAR_CAP_HOURS = 9.0
DEFAULT_SHIFT_START = time(9, 0)
DEFAULT_SHIFT_END = time(18, 0)
WEEKLY_VIEW_DAYS = 7

# Night differential premium windows (organizational policy).
NIGHT_WINDOW_EVENING_START = time(22, 0)
NIGHT_WINDOW_MORNING_END = time(6, 0)
