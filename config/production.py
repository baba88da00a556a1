import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "pickup_db"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

FACILITY_ID = os.getenv("FACILITY_ID", "KG-001")
FACILITY_TIMEZONE = os.getenv("FACILITY_TIMEZONE", "Asia/Baghdad")
QR_VALIDITY = os.getenv("QR_VALIDITY", "daily")

ACTION_COOLDOWN_MINUTES = int(os.getenv("ACTION_COOLDOWN_MINUTES", "5"))
CACHE_SWEEP_SECONDS = float(os.getenv("CACHE_SWEEP_SECONDS", "60"))
SCAN_WORKERS = int(os.getenv("SCAN_WORKERS", "8"))
SCAN_TIMEOUT_SECONDS = float(os.getenv("SCAN_TIMEOUT_SECONDS", "10"))

TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN")
TWILIO_FROM_NUMBER = os.getenv("TWILIO_FROM_NUMBER")
SMS_TIMEOUT_SECONDS = float(os.getenv("SMS_TIMEOUT_SECONDS", "5"))
