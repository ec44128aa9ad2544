# live_sessions/services/analytics.py
"""
Read-only reporting over live sessions: per-session analytics for the
owning instructor and a platform dashboard for administrators.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy.orm import Session

from live_sessions.constants.session import MAX_RATING, MIN_RATING, ParticipantStatus, SessionStatus
from live_sessions.crud.crud_live_session import CRUDLiveSession, live_session as live_session_store
from live_sessions.schemas.analytics import (
    AnalyticsOverview,
    DashboardSessionItem,
    DashboardSummary,
    FeedbackEntry,
    ParticipantAttendance,
    SessionAnalytics,
)
from live_sessions.schemas.token import TokenPayload
from live_sessions.services.access import require_admin, require_session_manager

logger = logging.getLogger(__name__)


def attendance_rate(attended: int, registered: int) -> int:
    """Percentage of registrants who attended, rounded half-up; 0 with no registrants."""
    if registered == 0:
        return 0
    rate = Decimal(attended) * 100 / Decimal(registered)
    return int(rate.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class AnalyticsService:
    def __init__(self, store: CRUDLiveSession = live_session_store):
        self.store = store

    def session_analytics(
        self, db: Session, *, session_id: str, actor: TokenPayload
    ) -> SessionAnalytics:
        live_session = self.store.get_required(db, session_id)
        require_session_manager(actor, live_session)

        participants = live_session.participants
        attended = sum(1 for p in participants if p.status == ParticipantStatus.ATTENDED)

        distribution = {str(value): 0 for value in range(MIN_RATING, MAX_RATING + 1)}
        for entry in live_session.feedback:
            distribution[str(entry.rating)] += 1

        return SessionAnalytics(
            session_id=live_session.id,
            status=live_session.status,
            overview=AnalyticsOverview(
                total_registrations=len(participants),
                total_attendees=attended,
                attendance_rate=attendance_rate(attended, len(participants)),
                average_rating=live_session.average_rating,
                feedback_count=len(live_session.feedback),
            ),
            participants=[
                ParticipantAttendance(
                    user_id=p.user_id,
                    status=p.status,
                    registered_at=p.registered_at,
                    joined_at=p.joined_at,
                    left_at=p.left_at,
                    duration_minutes=p.duration_minutes(),
                )
                for p in participants
            ],
            feedback=[
                FeedbackEntry(
                    user_id=f.user_id,
                    rating=f.rating,
                    comment=f.comment,
                    submitted_at=f.submitted_at,
                )
                for f in live_session.feedback
            ],
            rating_distribution=distribution,
        )

    def dashboard_summary(
        self, db: Session, *, actor: TokenPayload, limit: int = 5
    ) -> DashboardSummary:
        require_admin(actor)
        counts = self.store.count_by_status(db)
        status_counts = {status: counts.get(status, 0) for status in SessionStatus.all_values()}
        logger.debug(f"Dashboard requested by {actor.sub}: {status_counts}")
        return DashboardSummary(
            status_counts=status_counts,
            upcoming_sessions=[
                DashboardSessionItem.model_validate(s)
                for s in self.store.get_upcoming(db, limit=limit)
            ],
            recent_sessions=[
                DashboardSessionItem.model_validate(s)
                for s in self.store.get_recent_completed(db, limit=limit)
            ],
            total_participants=self.store.total_participants(db),
        )


analytics_service = AnalyticsService()
