# live_sessions/crud/crud_live_session.py
"""
Record store for the LiveSession aggregate.

All mutations of a stored session go through ``apply``: it serializes the
read-check-write sequence for one session id, re-reads the row with
``SELECT ... FOR UPDATE``, runs the caller's mutation against the fresh
aggregate and commits it as a single transaction. A mutation that raises
leaves nothing behind.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple, TypeVar

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from .base import CRUDBase
from live_sessions.constants.session import SessionStatus
from live_sessions.core.exceptions import (
    ConcurrentModification,
    LiveSessionError,
    SessionNotFound,
)
from live_sessions.db.locks import SessionLockRegistry, session_locks
from live_sessions.models.live_session import LiveSession
from live_sessions.models.session_participant import SessionParticipant
from live_sessions.schemas.live_session import (
    LiveSessionCreate,
    LiveSessionFilters,
    LiveSessionUpdate,
)
from live_sessions.utils.time import utcnow

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CRUDLiveSession(CRUDBase[LiveSession, LiveSessionCreate, LiveSessionUpdate]):
    def __init__(self, model, locks: SessionLockRegistry = session_locks):
        super().__init__(model)
        self.locks = locks

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def get_required(self, db: Session, session_id: str) -> LiveSession:
        live_session = self.get(db, session_id)
        if live_session is None:
            raise SessionNotFound(session_id)
        return live_session

    def _by_status(self, query, status: Optional[str], now: Optional[datetime] = None):
        if status == SessionStatus.UPCOMING:
            return query.filter(
                self.model.status == SessionStatus.SCHEDULED,
                self.model.scheduled_at >= (now or utcnow()),
            )
        if status:
            return query.filter(self.model.status == status)
        return query

    def _filtered_query(
        self, db: Session, filters: LiveSessionFilters, now: Optional[datetime] = None
    ):
        query = db.query(self.model)
        if filters.status:
            query = self._by_status(query, filters.status, now)
        else:
            # Cancelled sessions only show up when asked for
            query = query.filter(self.model.status.in_(SessionStatus.publicly_listed()))
        if filters.category:
            query = query.filter(self.model.category == filters.category)
        if filters.language:
            query = query.filter(self.model.language == filters.language)
        if filters.instructor_id:
            query = query.filter(self.model.instructor_id == filters.instructor_id)
        if filters.scheduled_from:
            query = query.filter(self.model.scheduled_at >= filters.scheduled_from)
        if filters.scheduled_to:
            query = query.filter(self.model.scheduled_at <= filters.scheduled_to)
        if filters.search:
            pattern = f"%{filters.search}%"
            query = query.filter(
                or_(self.model.title.ilike(pattern), self.model.description.ilike(pattern))
            )
        return query

    def get_multi_filtered(
        self,
        db: Session,
        *,
        filters: LiveSessionFilters,
        skip: int = 0,
        limit: int = 20,
        now: Optional[datetime] = None,
    ) -> Tuple[List[LiveSession], int]:
        """Return one page of sessions plus the total number of matches."""
        query = self._filtered_query(db, filters, now)
        total = query.count()

        # Past sessions read newest first, everything else soonest first
        if filters.status == SessionStatus.COMPLETED:
            order = self.model.scheduled_at.desc()
        else:
            order = self.model.scheduled_at.asc()
        items = query.order_by(order, self.model.id).offset(skip).limit(limit).all()
        return items, total

    def get_multi_by_participant(
        self,
        db: Session,
        *,
        user_id: str,
        status: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> List[LiveSession]:
        """Sessions the user holds a registration for."""
        query = (
            db.query(self.model)
            .join(SessionParticipant, SessionParticipant.session_id == self.model.id)
            .filter(SessionParticipant.user_id == user_id)
        )
        query = self._by_status(query, status, now)
        if status == SessionStatus.COMPLETED:
            query = query.order_by(self.model.scheduled_at.desc())
        else:
            query = query.order_by(self.model.scheduled_at.asc())
        return query.all()

    def count_by_status(self, db: Session) -> Dict[str, int]:
        rows = (
            db.query(self.model.status, func.count(self.model.id))
            .group_by(self.model.status)
            .all()
        )
        return {status: count for status, count in rows}

    def get_upcoming(
        self, db: Session, *, limit: int = 5, now: Optional[datetime] = None
    ) -> List[LiveSession]:
        return (
            db.query(self.model)
            .filter(
                self.model.status == SessionStatus.SCHEDULED,
                self.model.scheduled_at >= (now or utcnow()),
            )
            .order_by(self.model.scheduled_at.asc())
            .limit(limit)
            .all()
        )

    def get_recent_completed(self, db: Session, *, limit: int = 5) -> List[LiveSession]:
        return (
            db.query(self.model)
            .filter(self.model.status == SessionStatus.COMPLETED)
            .order_by(self.model.scheduled_at.desc())
            .limit(limit)
            .all()
        )

    def total_participants(self, db: Session) -> int:
        return db.query(func.coalesce(func.sum(self.model.participant_count), 0)).scalar() or 0

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #

    def create_with_instructor(
        self, db: Session, *, obj_in: LiveSessionCreate, instructor_id: str
    ) -> LiveSession:
        obj_in_data = obj_in.model_dump(exclude={"instructor_id"})
        now = utcnow()
        db_obj = self.model(
            **obj_in_data,
            instructor_id=instructor_id,
            status=SessionStatus.SCHEDULED,
            participant_count=0,
            average_rating=0.0,
            created_at=now,
            updated_at=now,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def _load_for_update(self, db: Session, session_id: str) -> LiveSession:
        # populate_existing discards anything the identity map cached before
        # the lock was taken.
        live_session = (
            db.query(self.model)
            .filter(self.model.id == session_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if live_session is None:
            raise SessionNotFound(session_id)
        return live_session

    def apply(
        self,
        db: Session,
        session_id: str,
        mutation: Callable[[LiveSession], T],
    ) -> Tuple[LiveSession, T]:
        """
        Run ``mutation`` against the stored session as one conditional write.

        Returns the refreshed session and whatever the mutation returned.
        Domain errors raised by the mutation roll the transaction back and
        propagate unchanged.
        """
        with self.locks.hold(session_id):
            try:
                live_session = self._load_for_update(db, session_id)
                outcome = mutation(live_session)
                db.commit()
            except LiveSessionError:
                db.rollback()
                raise
            except (StaleDataError, IntegrityError) as e:
                db.rollback()
                logger.warning(
                    f"Conflicting write on session {session_id}: {str(e)}",
                    extra={"session_id": session_id},
                )
                raise ConcurrentModification(session_id) from e
            except Exception as e:
                logger.error(
                    f"Failed to apply mutation to session {session_id}: {str(e)}",
                    exc_info=True,
                    extra={"session_id": session_id},
                )
                db.rollback()
                raise
            db.refresh(live_session)
        return live_session, outcome

    def remove_guarded(self, db: Session, session_id: str) -> None:
        """Delete the session and its children unless it is live or has history."""
        with self.locks.hold(session_id):
            try:
                live_session = self._load_for_update(db, session_id)
                live_session.ensure_deletable()
                db.delete(live_session)
                db.commit()
            except LiveSessionError:
                db.rollback()
                raise
            except Exception as e:
                logger.error(
                    f"Failed to delete session {session_id}: {str(e)}",
                    exc_info=True,
                    extra={"session_id": session_id},
                )
                db.rollback()
                raise


live_session = CRUDLiveSession(LiveSession)
