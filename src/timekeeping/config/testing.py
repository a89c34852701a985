import os

API_BASE_URL = os.getenv("API_BASE_URL", "http://testserver/api")
API_TIMEOUT = float(os.getenv("API_TIMEOUT", "5"))

# Empty path keeps everything in memory
STORE_PATH = ""

MAX_RETRIES = 3
SYNC_INTERVAL_SECONDS = 30.0

STANDARD_DAILY_HOURS = 8.0
EMPLOYEE_ID_PATTERN = r"^EMP\d{3,}$"

SHIFT_START = ""
LATE_GRACE_MINUTES = 5

PAYROLL_GROSS_RULE = "standard"

LOG_LEVEL = "WARNING"
DEBUG = False
TESTING = True
