import os

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "console")

LOCATION_HISTORY_LIMIT = int(os.getenv("LOCATION_HISTORY_LIMIT", "50"))
ALERT_HISTORY_LIMIT = int(os.getenv("ALERT_HISTORY_LIMIT", "50"))

API_VERSION = "2.0.0"
