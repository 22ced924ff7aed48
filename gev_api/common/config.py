"""
Application settings read from environment variables.

Values are read once at import time; ``main.py`` calls ``load_dotenv()`` before
importing anything from ``gev_api`` so a local ``.env`` file is honoured.
"""
import os
from datetime import datetime

import pytz

APP_NAME = "GEV App Backend"
APP_VERSION = "1.0.0"

DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///gev_app.db")

# Sales are bucketed by calendar day in this timezone
APP_TIMEZONE = pytz.timezone(os.environ.get("APP_TIMEZONE", "America/Sao_Paulo"))

UPLOAD_DIR = os.environ.get("UPLOAD_DIR", "uploads")
IMAGE_STORAGE = os.environ.get("IMAGE_STORAGE", "local").lower()

SESSION_TTL_HOURS = int(os.environ.get("SESSION_TTL_HOURS", 24))
RESET_TOKEN_TTL_MINUTES = int(os.environ.get("RESET_TOKEN_TTL_MINUTES", 30))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()


def env_flag(name: str, default: bool) -> bool:
    """Interpret an environment variable as a boolean flag."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def now_local() -> datetime:
    """Current wall-clock time in the application timezone, without tzinfo."""
    return datetime.now(APP_TIMEZONE).replace(tzinfo=None)
