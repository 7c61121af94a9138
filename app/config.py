import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv(dotenv_path=".env")

# Logging / HTTP
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ALLOW_ORIGINS = [o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if o.strip()]

# Supabase
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

# Base URL the session engine uses to reach the sessions API
SESSIONS_API_BASE_URL = os.getenv("SESSIONS_API_BASE_URL", "http://localhost:8000")
SESSIONS_API_TIMEOUT = float(os.getenv("SESSIONS_API_TIMEOUT", "10.0"))

# Persist each completed/skipped action as it happens instead of only at session end
SESSION_PERSIST_ACTION_PROGRESS = os.getenv("SESSION_PERSIST_ACTION_PROGRESS", "false").lower() in ("1", "true", "yes")

DEFAULT_SESSION_DURATION_MINUTES = 30
TIMER_WARNING_THRESHOLD_SECONDS = 300  # 5 minutes


@dataclass(frozen=True)
class SessionTimings:
    """Delays (in seconds) driving the session engine"""
    tick_interval: float = 1.0
    celebration: float = 3.0
    prompt_after_complete: float = 3.5
    prompt_after_skip: float = 1.0
    swipe_animation: float = 0.3
    intro_overlay: float = 5.0


DEFAULT_TIMINGS = SessionTimings()
