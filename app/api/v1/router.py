"""Main API router for v1."""
from fastapi import APIRouter

from app.api.v1.endpoints import attendees, checkins

api_router = APIRouter(prefix="/api/v1")

# Include all endpoint routers
api_router.include_router(checkins.router, prefix="/checkin", tags=["Check-in"])
api_router.include_router(attendees.router, prefix="/attendees", tags=["Roster"])
