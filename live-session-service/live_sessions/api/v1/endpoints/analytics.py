# live_sessions/api/v1/endpoints/analytics.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from live_sessions.api import deps
from live_sessions.db.session import get_db
from live_sessions.schemas.analytics import DashboardSummary, SessionAnalytics
from live_sessions.schemas.token import TokenPayload
from live_sessions.services.analytics import analytics_service

router = APIRouter(prefix="/live-sessions", tags=["Analytics"])


@router.get("/dashboard", response_model=DashboardSummary)
def get_live_session_dashboard(
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """**[ADMIN]** Platform-wide session counts and upcoming/recent sessions."""
    return analytics_service.dashboard_summary(db, actor=current_user)


@router.get("/{session_id}/analytics", response_model=SessionAnalytics)
def get_live_session_analytics(
    session_id: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Attendance and feedback breakdown for the session's instructor."""
    return analytics_service.session_analytics(
        db, session_id=session_id, actor=current_user
    )
