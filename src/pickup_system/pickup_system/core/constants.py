"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_COOLDOWN_MINUTES = 5
DEFAULT_SWEEP_INTERVAL_SECONDS = 60
DEFAULT_SCAN_WORKERS = 8
DEFAULT_SCAN_TIMEOUT_SECONDS = 10.0
DEFAULT_SMS_TIMEOUT_SECONDS = 5.0
DEFAULT_FEED_LIMIT = 100
DEFAULT_STREAM_HEARTBEAT_SECONDS = 15.0
DEFAULT_STREAM_QUEUE_SIZE = 16
DEFAULT_RECENT_ACTIVITY_LIMIT = 10
DEFAULT_FACILITY_TIMEZONE = "Asia/Baghdad"

DISPLAY_TIME_FORMAT = "%I:%M %p"
QR_DATE_FORMAT = "%Y-%m-%d"
