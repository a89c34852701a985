import os

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:3000/api")
API_TIMEOUT = float(os.getenv("API_TIMEOUT", "30"))

STORE_PATH = os.getenv("STORE_PATH", "/var/lib/timekeeping/store.json")

MAX_RETRIES = int(os.getenv("MAX_RETRIES", "3"))
SYNC_INTERVAL_SECONDS = float(os.getenv("SYNC_INTERVAL_SECONDS", "30"))

STANDARD_DAILY_HOURS = float(os.getenv("STANDARD_DAILY_HOURS", "8"))
EMPLOYEE_ID_PATTERN = os.getenv("EMPLOYEE_ID_PATTERN", r"^EMP\d{3,}$")

SHIFT_START = os.getenv("SHIFT_START", "")
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "5"))

PAYROLL_GROSS_RULE = os.getenv("PAYROLL_GROSS_RULE", "standard")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
DEBUG = bool(int(os.getenv("DEBUG", "0")))
