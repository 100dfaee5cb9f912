import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_attendance_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False

LATE_GRACE_MINUTES = 15
# Tests drive the sweep by hand
AUTO_ABSENT_ENABLED = False
AUTO_ABSENT_INTERVAL_MINUTES = 15

SESSION_LIFETIME_HOURS = 24
PASSWORD_RESET_TTL_MINUTES = 60
PUBLIC_BASE_URL = "http://localhost"
