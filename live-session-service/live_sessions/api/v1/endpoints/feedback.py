# live_sessions/api/v1/endpoints/feedback.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from live_sessions.api import deps
from live_sessions.db.session import get_db
from live_sessions.schemas.feedback import FeedbackCreate, FeedbackResult
from live_sessions.schemas.token import TokenPayload
from live_sessions.services.feedback_aggregator import feedback_aggregator

router = APIRouter(prefix="/live-sessions", tags=["Feedback"])


@router.post("/{session_id}/feedback", response_model=FeedbackResult)
def submit_live_session_feedback(
    session_id: str,
    feedback_in: FeedbackCreate,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    Rate a completed session the current user attended.

    Submitting again replaces the previous rating and comment.
    """
    return feedback_aggregator.submit_feedback(
        db,
        session_id=session_id,
        user_id=current_user.sub,
        rating=feedback_in.rating,
        comment=feedback_in.comment,
    )
