"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_LATE_GRACE_MINUTES = 15
DEFAULT_SWEEP_INTERVAL_MINUTES = 15
DEFAULT_SESSION_LIFETIME_HOURS = 24
DEFAULT_RESET_TOKEN_TTL_MINUTES = 60

NO_TIME = "--"

STUDENT_SEQ_KEY_PREFIX = "last_student_seq_"
SESSION_CODE_BYTES = 3

DEFAULT_PAGE_SIZE = 10
AUDIT_PAGE_SIZE = 20
RECENT_SESSIONS_LIMIT = 20
EXCUSE_HISTORY_LIMIT = 50
PROFILE_HISTORY_DAYS = 30

WEEKDAY_TAGS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
