# live_sessions/services/feedback_aggregator.py
"""
Feedback collection for completed sessions.

Each attendee has at most one feedback entry per session; resubmitting
replaces it. The session's average rating is recomputed from the full set of
entries in the same write that stores the feedback, rounded half-up to one
decimal place.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from live_sessions.constants.session import MAX_RATING, MIN_RATING
from live_sessions.core.exceptions import InvalidRating
from live_sessions.crud.crud_live_session import CRUDLiveSession, live_session as live_session_store
from live_sessions.schemas.feedback import FeedbackResult

logger = logging.getLogger(__name__)


class FeedbackAggregator:
    def __init__(self, store: CRUDLiveSession = live_session_store):
        self.store = store

    def submit_feedback(
        self,
        db: Session,
        *,
        session_id: str,
        user_id: str,
        rating: int,
        comment: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> FeedbackResult:
        # Reject bad ratings before touching the session at all
        if isinstance(rating, bool) or not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
            raise InvalidRating(rating, session_id=session_id)

        live_session, _ = self.store.apply(
            db,
            session_id,
            lambda s: s.upsert_feedback(user_id, rating, comment, now=now),
        )
        result = FeedbackResult(
            average_rating=live_session.average_rating,
            feedback_count=len(live_session.feedback),
        )
        logger.info(
            f"Feedback from {user_id} on session {session_id}: rating={rating}, "
            f"average now {result.average_rating} over {result.feedback_count}"
        )
        return result


feedback_aggregator = FeedbackAggregator()
