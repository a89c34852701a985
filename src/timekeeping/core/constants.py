"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_API_BASE_URL = "http://localhost:3000/api"
DEFAULT_API_TIMEOUT_SECONDS = 30.0

DEFAULT_MAX_RETRIES = 3
DEFAULT_SYNC_INTERVAL_SECONDS = 30

DEFAULT_STANDARD_DAILY_HOURS = 8.0
DEFAULT_LATE_GRACE_MINUTES = 5

DEFAULT_EMPLOYEE_ID_PATTERN = r"^EMP\d{3,}$"

# Cooldowns between two actions of the same employee, in seconds.
MIN_ACTION_INTERVAL_SECONDS = 1.0
CLOCK_COOLDOWN_SECONDS = 5.0
BREAK_COOLDOWN_SECONDS = 2.0

CLOCK_STATE_KEY_PREFIX = "clock_state:"
PENDING_ACTIONS_KEY = "pending_actions"
APPLIED_ACTIONS_KEY = "applied_actions"
