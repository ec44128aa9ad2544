# live_sessions/services/access.py
"""Role checks for instructor-driven operations."""

from live_sessions.constants.session import UserRole
from live_sessions.core.exceptions import NotAuthorized
from live_sessions.models.live_session import LiveSession
from live_sessions.schemas.token import TokenPayload


def require_instructor(actor: TokenPayload) -> None:
    if not UserRole.is_instructor(actor.role):
        raise NotAuthorized("Only instructors can manage live sessions")


def require_admin(actor: TokenPayload) -> None:
    if not UserRole.is_admin(actor.role):
        raise NotAuthorized("Administrator role required")


def require_session_manager(actor: TokenPayload, live_session: LiveSession) -> None:
    """Instructor who owns the session, or an administrator."""
    require_instructor(actor)
    if live_session.instructor_id != actor.sub and not UserRole.is_admin(actor.role):
        raise NotAuthorized(
            "Only the session's instructor or an administrator can manage this session",
            session_id=live_session.id,
        )
