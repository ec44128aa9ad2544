# live_sessions/api/v1/endpoints/attendance.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from live_sessions.api import deps
from live_sessions.db.session import get_db
from live_sessions.schemas.participant import AttendanceUpdate
from live_sessions.schemas.token import TokenPayload
from live_sessions.services.attendance import attendance_service

router = APIRouter(prefix="/live-sessions", tags=["Attendance"])


@router.post("/{session_id}/attendance/join", response_model=AttendanceUpdate)
def join_live_session(
    session_id: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Record that the current user entered the session room."""
    live_session, recorded = attendance_service.mark_joined(
        db, session_id=session_id, user_id=current_user.sub
    )
    return AttendanceUpdate(
        session_id=session_id,
        user_id=current_user.sub,
        session_status=live_session.status,
        recorded=recorded,
    )


@router.post("/{session_id}/attendance/leave", response_model=AttendanceUpdate)
def leave_live_session(
    session_id: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    live_session, recorded = attendance_service.mark_left(
        db, session_id=session_id, user_id=current_user.sub
    )
    return AttendanceUpdate(
        session_id=session_id,
        user_id=current_user.sub,
        session_status=live_session.status,
        recorded=recorded,
    )
