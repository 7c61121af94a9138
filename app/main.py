import logging

from app import config

# Log configuration (before other imports)
# ruff: noqa: E402
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    force=True
)

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from app.api.base import api_router  # noqa: E402

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Cultivate HQ Sessions API",
    description="Relationship session timing, action progress and completion for Cultivate HQ",
    version="1.0.0"
)

# Session screens call the API straight from the browser
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(api_router)

if not (config.SUPABASE_URL and config.SUPABASE_SERVICE_ROLE_KEY):
    logger.warning("Supabase is not configured; session endpoints will fail until it is")


@app.get("/")
def read_root():
    return {
        "message": "Cultivate HQ Sessions API",
        "sessions": "/api/relationship-sessions",
        "health": "/api/health/",
        "docs": "/docs",
        "version": "1.0.0"
    }
