# live_sessions/services/registrar.py
"""
Registration service for live sessions.

Registration is first come, first served: the capacity check and the insert
happen inside one conditional write on the session, so with N spots and more
than N concurrent registrants exactly N succeed and the rest get SESSION_FULL.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from live_sessions.core.config import settings
from live_sessions.core.exceptions import AlreadyRegistered, SessionFull
from live_sessions.crud.crud_live_session import CRUDLiveSession, live_session as live_session_store
from live_sessions.models.live_session import LiveSession

logger = logging.getLogger(__name__)


class RegistrationService:
    def __init__(
        self,
        store: CRUDLiveSession = live_session_store,
        allow_live: Optional[bool] = None,
    ):
        self.store = store
        self._allow_live = allow_live

    @property
    def allow_live(self) -> bool:
        if self._allow_live is not None:
            return self._allow_live
        return settings.ALLOW_LIVE_REGISTRATION

    def register(
        self,
        db: Session,
        *,
        session_id: str,
        user_id: str,
        now: Optional[datetime] = None,
    ) -> LiveSession:
        """
        Add the user to the session's participants.

        Raises:
            SessionNotFound: unknown session
            RegistrationClosed: session is completed, cancelled or (when
                live registration is disabled) already live
            AlreadyRegistered: the user holds a registration already
            SessionFull: no spots left
        """
        try:
            live_session, _ = self.store.apply(
                db,
                session_id,
                lambda s: s.add_participant(user_id, now=now, allow_live=self.allow_live),
            )
        except (AlreadyRegistered, SessionFull) as e:
            logger.info(
                f"Registration for session {session_id} rejected: {e.code}",
                extra={"session_id": session_id, "user_id": user_id},
            )
            raise

        logger.info(
            f"User {user_id} registered for session {session_id} "
            f"({live_session.participant_count}/{live_session.max_participants})"
        )
        return live_session

    def unregister(
        self,
        db: Session,
        *,
        session_id: str,
        user_id: str,
        now: Optional[datetime] = None,
    ) -> LiveSession:
        """Remove the user's registration. Unregistering twice is a no-op."""
        live_session, removed = self.store.apply(
            db, session_id, lambda s: s.remove_participant(user_id, now=now)
        )
        if removed:
            logger.info(f"User {user_id} unregistered from session {session_id}")
        return live_session


registration_service = RegistrationService()
