# live_sessions/api/v1/api.py

from fastapi import APIRouter
from live_sessions.api.v1.endpoints import (
    analytics,
    attendance,
    feedback,
    health,
    live_sessions,
    registrations,
)

api_router = APIRouter()

api_router.include_router(health.router)
# Before live_sessions so /live-sessions/dashboard is not read as a session id
api_router.include_router(analytics.router)
api_router.include_router(live_sessions.router)
api_router.include_router(registrations.router)
api_router.include_router(attendance.router)
api_router.include_router(feedback.router)
