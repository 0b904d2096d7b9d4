# config.py

from starlette.config import Config

# Environment variables take precedence over the .env file
config = Config(".env")

# --- Storage ---
DATABASE_URL: str = config("DATABASE_URL", default="sqlite+aiosqlite:///./expense_tracker.db")
SQL_ECHO: bool = config("SQL_ECHO", cast=bool, default=False)

# --- API access ---
API_KEY: str = config("EXPENSE_TRACKER_API_KEY", default="")

# --- Logging ---
LOG_LEVEL: str = config("LOG_LEVEL", default="INFO")

# --- SMS pipeline ---
# Most-recent N messages read by one backlog scan
SMS_BACKLOG_MAX_COUNT: int = config("SMS_BACKLOG_MAX_COUNT", cast=int, default=1000)

# 0 keeps unparseable messages pending forever (re-attempted on every scan).
# N > 0 moves a message to processed-unparseable after N failed attempts.
SMS_UNPARSEABLE_MAX_ATTEMPTS: int = config("SMS_UNPARSEABLE_MAX_ATTEMPTS", cast=int, default=0)

# Initial permission state reported for the device bridge
SMS_PERMISSION_GRANTED: bool = config("SMS_PERMISSION_GRANTED", cast=bool, default=False)
SMS_TRACKING_AUTOSTART: bool = config("SMS_TRACKING_AUTOSTART", cast=bool, default=True)
