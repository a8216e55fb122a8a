"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Academic years run July through June.
SCHOOL_YEAR_START_MONTH = 7
DEFAULT_SCHOOL_YEAR_OPTIONS = 12

DEFAULT_POOL_SIZE = 5
# Seconds a caller waits for a free pooled connection before giving up.
DEFAULT_POOL_TIMEOUT = 5.0
POOL_RETRY_INTERVAL = 0.05
DEFAULT_POOL_NAME = "homeschool_attendance"

ISO_DATE_FORMAT = "%Y-%m-%d"
