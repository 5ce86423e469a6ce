"""
Runtime configuration read from the environment (.env supported).

Values are read once at import time; tests override them by passing explicit
arguments to the functions that consume them.
"""
import os

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./arenabook.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")

# Recurring series without an end date stop this many years after the anchor
RECURRENCE_HORIZON_YEARS = int(os.getenv("RECURRENCE_HORIZON_YEARS", "1"))

DEFAULT_SLOT_MINUTES = int(os.getenv("DEFAULT_SLOT_MINUTES", "60"))

# Clients may book from today up to today + N days
PUBLIC_BOOKING_HORIZON_DAYS = int(os.getenv("PUBLIC_BOOKING_HORIZON_DAYS", "7"))

PAST_BOOKING_GRACE_MINUTES = int(os.getenv("PAST_BOOKING_GRACE_MINUTES", "1"))
