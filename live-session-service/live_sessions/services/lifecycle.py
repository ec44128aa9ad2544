# live_sessions/services/lifecycle.py
"""
Live Session Lifecycle Service

Handles the instructor-driven side of a session:
- Scheduling and rescheduling
- Lifecycle transitions (scheduled -> live -> completed, scheduled -> cancelled)
- Guarded deletion

Every transition is applied through the record store's conditional write, so
two instructors racing to start/end the same session see exactly one success
and one INVALID_TRANSITION.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from live_sessions.core.exceptions import InvalidSchedule, NotAuthorized
from live_sessions.constants.session import UserRole
from live_sessions.crud.crud_live_session import CRUDLiveSession, live_session as live_session_store
from live_sessions.models.live_session import LiveSession
from live_sessions.schemas.live_session import LiveSessionCreate, LiveSessionUpdate
from live_sessions.schemas.token import TokenPayload
from live_sessions.services.access import require_instructor, require_session_manager
from live_sessions.services.catalog_client import CatalogClient, catalog_client
from live_sessions.utils import kafka_helpers
from live_sessions.utils.time import as_utc, utcnow

logger = logging.getLogger(__name__)

# Optional columns an update may explicitly reset to null
_CLEARABLE_FIELDS = {"description", "related_course_id", "related_museum_id"}


class LiveSessionLifecycleService:
    """Service for scheduling live sessions and driving their lifecycle."""

    def __init__(
        self,
        store: CRUDLiveSession = live_session_store,
        catalog: CatalogClient = catalog_client,
    ):
        self.store = store
        self.catalog = catalog

    # ========================================
    # Scheduling
    # ========================================

    def create_session(
        self,
        db: Session,
        *,
        obj_in: LiveSessionCreate,
        actor: TokenPayload,
        producer=None,
        now: Optional[datetime] = None,
    ) -> LiveSession:
        require_instructor(actor)
        instructor_id = obj_in.instructor_id or actor.sub
        if instructor_id != actor.sub and not UserRole.is_admin(actor.role):
            raise NotAuthorized("Only administrators can schedule sessions for other instructors")

        self._ensure_future(obj_in.scheduled_at, now)
        self.catalog.validate_references(
            related_course_id=obj_in.related_course_id,
            related_museum_id=obj_in.related_museum_id,
        )

        live_session = self.store.create_with_instructor(
            db, obj_in=obj_in, instructor_id=instructor_id
        )
        logger.info(
            f"Live session {live_session.id} scheduled by {actor.sub} for {obj_in.scheduled_at.isoformat()}"
        )
        kafka_helpers.publish_lifecycle_event(
            producer,
            event_type=kafka_helpers.SESSION_CREATED,
            session_id=live_session.id,
            instructor_id=instructor_id,
            status=live_session.status,
            payload={
                "scheduledAt": obj_in.scheduled_at.isoformat(),
                "maxParticipants": live_session.max_participants,
            },
        )
        return live_session

    def update_session(
        self,
        db: Session,
        *,
        session_id: str,
        obj_in: LiveSessionUpdate,
        actor: TokenPayload,
        now: Optional[datetime] = None,
    ) -> LiveSession:
        require_session_manager(actor, self.store.get_required(db, session_id))

        changes = {
            field: value
            for field, value in obj_in.model_dump(exclude_unset=True).items()
            if value is not None or field in _CLEARABLE_FIELDS
        }
        if changes.get("scheduled_at") is not None:
            self._ensure_future(changes["scheduled_at"], now)
        self.catalog.validate_references(
            related_course_id=changes.get("related_course_id"),
            related_museum_id=changes.get("related_museum_id"),
        )

        updated, _ = self.store.apply(
            db, session_id, lambda s: s.update_details(changes, now=now)
        )
        logger.info(f"Live session {session_id} updated by {actor.sub}: {sorted(changes)}")
        return updated

    @staticmethod
    def _ensure_future(scheduled_at: datetime, now: Optional[datetime]) -> None:
        if as_utc(scheduled_at) <= (now or utcnow()):
            raise InvalidSchedule("Session must be scheduled in the future")

    # ========================================
    # Transitions
    # ========================================

    def start(
        self,
        db: Session,
        *,
        session_id: str,
        actor: TokenPayload,
        meeting_link: Optional[str] = None,
        producer=None,
        now: Optional[datetime] = None,
    ) -> LiveSession:
        require_session_manager(actor, self.store.get_required(db, session_id))
        started, _ = self.store.apply(
            db, session_id, lambda s: s.start(meeting_link=meeting_link, now=now)
        )
        logger.info(f"Live session {session_id} started by {actor.sub}")
        kafka_helpers.publish_lifecycle_event(
            producer,
            event_type=kafka_helpers.SESSION_STARTED,
            session_id=session_id,
            instructor_id=started.instructor_id,
            status=started.status,
            payload={
                "meetingLink": started.meeting_link,
                "participantCount": started.participant_count,
            },
        )
        return started

    def end(
        self,
        db: Session,
        *,
        session_id: str,
        actor: TokenPayload,
        recording_url: Optional[str] = None,
        producer=None,
        now: Optional[datetime] = None,
    ) -> LiveSession:
        require_session_manager(actor, self.store.get_required(db, session_id))
        ended, attendance = self.store.apply(
            db, session_id, lambda s: s.end(recording_url=recording_url, now=now)
        )
        logger.info(
            f"Live session {session_id} ended by {actor.sub}: "
            f"{attendance['attended']} attended, {attendance['absent']} absent"
        )
        kafka_helpers.publish_lifecycle_event(
            producer,
            event_type=kafka_helpers.SESSION_ENDED,
            session_id=session_id,
            instructor_id=ended.instructor_id,
            status=ended.status,
            payload={
                "recordingUrl": ended.recording_url,
                "attendedCount": attendance["attended"],
                "absentCount": attendance["absent"],
            },
        )
        return ended

    def cancel(
        self,
        db: Session,
        *,
        session_id: str,
        actor: TokenPayload,
        producer=None,
        now: Optional[datetime] = None,
    ) -> LiveSession:
        require_session_manager(actor, self.store.get_required(db, session_id))
        cancelled, _ = self.store.apply(db, session_id, lambda s: s.cancel(now=now))
        logger.info(f"Live session {session_id} cancelled by {actor.sub}")
        kafka_helpers.publish_lifecycle_event(
            producer,
            event_type=kafka_helpers.SESSION_CANCELLED,
            session_id=session_id,
            instructor_id=cancelled.instructor_id,
            status=cancelled.status,
            payload={
                "participantIds": [p.user_id for p in cancelled.participants],
            },
        )
        return cancelled

    def delete_session(
        self,
        db: Session,
        *,
        session_id: str,
        actor: TokenPayload,
        producer=None,
    ) -> None:
        existing = self.store.get_required(db, session_id)
        require_session_manager(actor, existing)
        instructor_id = existing.instructor_id
        self.store.remove_guarded(db, session_id)
        logger.info(f"Live session {session_id} deleted by {actor.sub}")
        kafka_helpers.publish_lifecycle_event(
            producer,
            event_type=kafka_helpers.SESSION_DELETED,
            session_id=session_id,
            instructor_id=instructor_id,
        )


lifecycle_service = LiveSessionLifecycleService()
