# live_sessions/constants/session.py
"""
Constants for live session, participant and role values.

Provides type-safe constants to replace hardcoded strings throughout the codebase.
"""


class SessionStatus:
    """Live session lifecycle states."""
    SCHEDULED = "scheduled"
    LIVE = "live"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    # Listing filter only: scheduled sessions that have not started yet
    UPCOMING = "upcoming"

    # The only legal edges of the lifecycle.
    TRANSITIONS = {
        SCHEDULED: (LIVE, CANCELLED),
        LIVE: (COMPLETED,),
        COMPLETED: (),
        CANCELLED: (),
    }

    @classmethod
    def all_values(cls) -> list[str]:
        """Return all valid status values."""
        return [cls.SCHEDULED, cls.LIVE, cls.COMPLETED, cls.CANCELLED]

    @classmethod
    def filter_values(cls) -> list[str]:
        """Values accepted by the `status` filter of session listings."""
        return cls.all_values() + [cls.UPCOMING]

    @classmethod
    def publicly_listed(cls) -> list[str]:
        """Statuses shown by an unfiltered listing."""
        return [cls.SCHEDULED, cls.LIVE, cls.COMPLETED]

    @classmethod
    def is_valid(cls, status: str) -> bool:
        """Check if a status value is valid."""
        return status in cls.all_values()

    @classmethod
    def is_terminal(cls, status: str) -> bool:
        return status in (cls.COMPLETED, cls.CANCELLED)

    @classmethod
    def can_transition(cls, current: str, target: str) -> bool:
        return target in cls.TRANSITIONS.get(current, ())

    @classmethod
    def accepts_registrations(cls, status: str, allow_live: bool = True) -> bool:
        if status == cls.SCHEDULED:
            return True
        return allow_live and status == cls.LIVE


class ParticipantStatus:
    """Attendance state of a registered participant."""
    REGISTERED = "registered"
    ATTENDED = "attended"
    ABSENT = "absent"

    @classmethod
    def all_values(cls) -> list[str]:
        return [cls.REGISTERED, cls.ATTENDED, cls.ABSENT]


class SessionCategory:
    """Subject categories a live session can be filed under."""
    HERITAGE = "heritage"
    HISTORY = "history"
    CULTURE = "culture"
    ARTIFACTS = "artifacts"
    GEOGRAPHY = "geography"
    GUIDED_TOUR = "guided-tour"
    WORKSHOP = "workshop"

    @classmethod
    def all_values(cls) -> list[str]:
        return [
            cls.HERITAGE,
            cls.HISTORY,
            cls.CULTURE,
            cls.ARTIFACTS,
            cls.GEOGRAPHY,
            cls.GUIDED_TOUR,
            cls.WORKSHOP,
        ]

    @classmethod
    def is_valid(cls, category: str) -> bool:
        return category in cls.all_values()


class UserRole:
    """Platform roles relevant to live sessions."""
    VISITOR = "visitor"
    INSTRUCTOR = "instructor"
    STAFF = "staff"
    MUSEUM_ADMIN = "museum-admin"
    ADMIN = "admin"
    SUPER_ADMIN = "super-admin"

    # Roles allowed to create and run sessions
    INSTRUCTOR_ROLES = (INSTRUCTOR, STAFF, MUSEUM_ADMIN, ADMIN, SUPER_ADMIN)
    # Roles allowed to manage sessions they do not own
    ADMIN_ROLES = (ADMIN, SUPER_ADMIN)

    @classmethod
    def is_instructor(cls, role: str | None) -> bool:
        return role in cls.INSTRUCTOR_ROLES

    @classmethod
    def is_admin(cls, role: str | None) -> bool:
        return role in cls.ADMIN_ROLES


MIN_DURATION_MINUTES = 15
MAX_DURATION_MINUTES = 300
MIN_PARTICIPANTS = 1
MAX_PARTICIPANTS = 1000
DEFAULT_MAX_PARTICIPANTS = 50
MIN_RATING = 1
MAX_RATING = 5
