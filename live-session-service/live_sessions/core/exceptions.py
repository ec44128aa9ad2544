# live_sessions/core/exceptions.py
"""
Error hierarchy for the live session engine.

Every error carries a machine-readable ``code`` and a ``category``. The
category decides the HTTP status the API layer answers with:

- validation: malformed input, rejected before any mutation (400)
- not_found: unknown session or participant (404)
- forbidden: caller lacks the role or ownership required (403)
- conflict: the session's current state does not allow the action (409)

None of these are fatal; the caller can always choose a different action.
"""

from typing import Optional


class ErrorCategory:
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"


_STATUS_BY_CATEGORY = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.FORBIDDEN: 403,
    ErrorCategory.CONFLICT: 409,
}


class LiveSessionError(Exception):
    """Base exception for all live session errors."""

    code = "LIVE_SESSION_ERROR"
    category = ErrorCategory.CONFLICT

    def __init__(self, message: str, *, session_id: Optional[str] = None):
        self.message = message
        self.session_id = session_id
        super().__init__(message)

    @property
    def http_status(self) -> int:
        return _STATUS_BY_CATEGORY.get(self.category, 400)

    def to_response(self) -> dict:
        return {"detail": self.message, "code": self.code}


# --- Validation errors ---

class InvalidSchedule(LiveSessionError):
    code = "INVALID_SCHEDULE"
    category = ErrorCategory.VALIDATION


class InvalidRating(LiveSessionError):
    code = "INVALID_RATING"
    category = ErrorCategory.VALIDATION

    def __init__(self, rating, *, session_id: Optional[str] = None):
        self.rating = rating
        super().__init__(
            f"Rating must be an integer between 1 and 5, got {rating!r}",
            session_id=session_id,
        )


class InvalidReference(LiveSessionError):
    code = "INVALID_REFERENCE"
    category = ErrorCategory.VALIDATION


# --- Not-found errors ---

class SessionNotFound(LiveSessionError):
    code = "SESSION_NOT_FOUND"
    category = ErrorCategory.NOT_FOUND

    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} not found", session_id=session_id)


class ParticipantNotFound(LiveSessionError):
    code = "PARTICIPANT_NOT_FOUND"
    category = ErrorCategory.NOT_FOUND

    def __init__(self, session_id: str, user_id: str):
        self.user_id = user_id
        super().__init__(
            f"User {user_id} is not registered for session {session_id}",
            session_id=session_id,
        )


# --- Authorization errors ---

class NotAuthorized(LiveSessionError):
    code = "NOT_AUTHORIZED"
    category = ErrorCategory.FORBIDDEN


# --- State-conflict errors ---

class SessionFull(LiveSessionError):
    code = "SESSION_FULL"

    def __init__(self, session_id: str, max_participants: int):
        self.max_participants = max_participants
        super().__init__(
            f"Session {session_id} has reached its capacity of {max_participants}",
            session_id=session_id,
        )


class AlreadyRegistered(LiveSessionError):
    code = "ALREADY_REGISTERED"

    def __init__(self, session_id: str, user_id: str):
        self.user_id = user_id
        super().__init__(
            f"User {user_id} is already registered for session {session_id}",
            session_id=session_id,
        )


class RegistrationClosed(LiveSessionError):
    code = "REGISTRATION_CLOSED"

    def __init__(self, session_id: str, status: str):
        self.status = status
        super().__init__(
            f"Registration is closed for session {session_id} ({status})",
            session_id=session_id,
        )


class InvalidTransition(LiveSessionError):
    code = "INVALID_TRANSITION"

    def __init__(self, session_id: str, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(
            f"Session {session_id} cannot move from '{current}' to '{target}'",
            session_id=session_id,
        )


class SessionNotCompleted(LiveSessionError):
    code = "SESSION_NOT_COMPLETED"

    def __init__(self, session_id: str):
        super().__init__(
            "Feedback can only be submitted for completed sessions",
            session_id=session_id,
        )


class NotAnAttendee(LiveSessionError):
    code = "NOT_AN_ATTENDEE"

    def __init__(self, session_id: str, user_id: str):
        self.user_id = user_id
        super().__init__(
            "You can only provide feedback for sessions you attended",
            session_id=session_id,
        )


class SessionLive(LiveSessionError):
    code = "SESSION_LIVE"

    def __init__(self, session_id: str):
        super().__init__("Cannot delete a live session", session_id=session_id)


class HasAttendees(LiveSessionError):
    code = "HAS_ATTENDEES"

    def __init__(self, session_id: str):
        super().__init__(
            "Cannot delete completed sessions with participants",
            session_id=session_id,
        )


class CapacityBelowRegistrations(LiveSessionError):
    code = "CAPACITY_BELOW_REGISTRATIONS"

    def __init__(self, session_id: str, requested: int, registered: int):
        super().__init__(
            f"Cannot lower capacity to {requested}: {registered} participants already registered",
            session_id=session_id,
        )


class ConcurrentModification(LiveSessionError):
    code = "CONCURRENT_MODIFICATION"

    def __init__(self, session_id: str):
        super().__init__(
            f"Session {session_id} was modified concurrently, please retry",
            session_id=session_id,
        )
