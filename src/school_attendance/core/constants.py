"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_ABSENCE_THRESHOLD = 3
DEFAULT_LOOKBACK_DAYS = 14
DEFAULT_MAX_BACKDATE_DAYS = 30

# Lower bound (days overdue) of each overdue tier.
OVERDUE_15_DAYS = 15
OVERDUE_30_DAYS = 30
OVERDUE_60_DAYS = 60

PRE_NOTIFIED_NOTE_PREFIX = "Parent notified"
