import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# Shared secret for the recurring trigger (sent as "Authorization: Bearer <secret>")
CRON_SECRET = os.getenv("CRON_SECRET")

# Business clock - the deployment clock runs in UTC, the salon runs in UTC-3
BUSINESS_UTC_OFFSET_HOURS = int(os.getenv("BUSINESS_UTC_OFFSET_HOURS", "-3"))
SUMMARY_HOUR = int(os.getenv("SUMMARY_HOUR", "8"))
REMINDER_LOOKAHEAD_MINUTES = int(os.getenv("REMINDER_LOOKAHEAD_MINUTES", "120"))
REMINDER_TOLERANCE_MINUTES = int(os.getenv("REMINDER_TOLERANCE_MINUTES", "10"))
# "true" keeps the digest suppressed for the day even when every delivery failed
SUMMARY_MARK_ON_ATTEMPT = os.getenv("SUMMARY_MARK_ON_ATTEMPT", "false").lower() == "true"

# Record store: "rest" (mockapi-style JSON collections) or "database" (SQLAlchemy)
RECORD_STORE_BACKEND = os.getenv("RECORD_STORE_BACKEND", "rest").lower()
APPOINTMENTS_API_URL = os.getenv("APPOINTMENTS_API_URL", "http://localhost:3001/appointments")
CONFIG_API_URL = os.getenv("CONFIG_API_URL", "http://localhost:3001/config")
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./salon.db")

# Telegram Bot API
TELEGRAM_API_BASE = os.getenv("TELEGRAM_API_BASE", "https://api.telegram.org")
# Used only when the config register holds no SYSTEM_TOKEN entry
TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN")
TELEGRAM_WEBHOOK_SECRET = os.getenv("TELEGRAM_WEBHOOK_SECRET")
# New-booking alerts go here when the register lists no recipients
TELEGRAM_CHAT_ID = os.getenv("TELEGRAM_CHAT_ID")

HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))

# ARQ worker cadence for the in-process trigger
SCAN_INTERVAL_MINUTES = int(os.getenv("SCAN_INTERVAL_MINUTES", "5"))
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379")
ARQ_JOB_TIMEOUT = int(os.getenv("ARQ_JOB_TIMEOUT", "300"))
ARQ_KEEP_RESULT = int(os.getenv("ARQ_KEEP_RESULT", "3600"))

# Name shown in reminder messages
BUSINESS_NAME = os.getenv("BUSINESS_NAME", "I Lash Studio")
