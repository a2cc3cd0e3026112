"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import timedelta

EARTH_RADIUS_M = 6_371_000
DEFAULT_ALLOWED_RADIUS_M = 150

DEFAULT_SHIFT_DURATION = timedelta(hours=4)
MIN_SHIFT_DURATION = timedelta(minutes=30)
MAX_SHIFT_DURATION = timedelta(hours=72)

DEFAULT_WEEKLY_WINDOW_DAYS = 35
DEFAULT_CUSTOM_WINDOW_DAYS = 60
DEFAULT_MONTHLY_WINDOW_MONTHS = 6
MAX_GENERATED_OCCURRENCES = 365

UNKNOWN_WORKER = "Unknown Worker"
UNTITLED_ROLE = "Untitled Role"
LOCATION_TBD = "Location TBD"
