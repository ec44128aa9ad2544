# live_sessions/api/v1/endpoints/registrations.py
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from live_sessions.api import deps
from live_sessions.core.limiter import REGISTRATION_RATE_LIMIT, limiter
from live_sessions.db.session import get_db
from live_sessions.schemas.live_session import LiveSessionSummary
from live_sessions.schemas.token import TokenPayload
from live_sessions.services.registrar import registration_service

router = APIRouter(prefix="/live-sessions", tags=["Registrations"])


@router.post(
    "/{session_id}/registrations",
    response_model=LiveSessionSummary,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(REGISTRATION_RATE_LIMIT)
def register_for_live_session(
    session_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    Register the current user for a live session.

    Spots are first come, first served. Fails with 409 when the session is
    full, the user is already registered, or registration is closed.
    """
    return registration_service.register(
        db, session_id=session_id, user_id=current_user.sub
    )


@router.delete("/{session_id}/registrations", response_model=LiveSessionSummary)
def unregister_from_live_session(
    session_id: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Drop the current user's registration. Safe to repeat."""
    return registration_service.unregister(
        db, session_id=session_id, user_id=current_user.sub
    )
