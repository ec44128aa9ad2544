# live_sessions/services/attendance.py
"""
Attendance tracking for live sessions.

Join and leave signals are only meaningful while a session is live; outside
that window they are accepted and ignored. Final attended/absent statuses are
settled when the instructor ends the session.
"""

import logging
from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from live_sessions.crud.crud_live_session import CRUDLiveSession, live_session as live_session_store
from live_sessions.models.live_session import LiveSession

logger = logging.getLogger(__name__)


class AttendanceService:
    def __init__(self, store: CRUDLiveSession = live_session_store):
        self.store = store

    def mark_joined(
        self,
        db: Session,
        *,
        session_id: str,
        user_id: str,
        now: Optional[datetime] = None,
    ) -> Tuple[LiveSession, bool]:
        """Returns the session and whether the join was recorded."""
        live_session, recorded = self.store.apply(
            db, session_id, lambda s: s.mark_joined(user_id, now=now)
        )
        if recorded:
            logger.info(f"User {user_id} joined live session {session_id}")
        else:
            logger.debug(
                f"Ignoring join from {user_id}: session {session_id} is {live_session.status}"
            )
        return live_session, recorded

    def mark_left(
        self,
        db: Session,
        *,
        session_id: str,
        user_id: str,
        now: Optional[datetime] = None,
    ) -> Tuple[LiveSession, bool]:
        live_session, recorded = self.store.apply(
            db, session_id, lambda s: s.mark_left(user_id, now=now)
        )
        if recorded:
            logger.info(f"User {user_id} left live session {session_id}")
        else:
            logger.debug(
                f"Ignoring leave from {user_id}: session {session_id} is {live_session.status}"
            )
        return live_session, recorded


attendance_service = AttendanceService()
