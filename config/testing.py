import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "pickup_test_db"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

FACILITY_ID = "KG-TEST"
FACILITY_TIMEZONE = "Asia/Baghdad"
QR_VALIDITY = "daily"

ACTION_COOLDOWN_MINUTES = 5
CACHE_SWEEP_SECONDS = 60.0
# Sequential processing keeps test runs deterministic
SCAN_WORKERS = 0
SCAN_TIMEOUT_SECONDS = 10.0

TWILIO_ACCOUNT_SID = None
TWILIO_AUTH_TOKEN = None
TWILIO_FROM_NUMBER = None
SMS_TIMEOUT_SECONDS = 5.0
