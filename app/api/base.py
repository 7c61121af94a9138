from fastapi import APIRouter
from app.api import health
from app.features import relationship_sessions

api_router = APIRouter()

# Include all sub-routers
api_router.include_router(health.router)
api_router.include_router(relationship_sessions.router)
