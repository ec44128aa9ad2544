# live_sessions/models/live_session.py
"""
LiveSession aggregate root.

A live session owns its participants and feedback. Every change to those
collections, to the lifecycle status, or to the derived average rating goes
through the methods below so the capacity, uniqueness, lifecycle and rating
rules are enforced in one place. The record store is responsible for calling
them under a per-session lock and committing the result atomically.
"""

import uuid
from decimal import Decimal, ROUND_HALF_UP
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import (
    Column, String, Text, DateTime, Integer, Float, Boolean, JSON, CheckConstraint, Index, text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from live_sessions.db.base_class import Base
from live_sessions.constants.session import SessionStatus, ParticipantStatus, MIN_RATING, MAX_RATING
from live_sessions.core.exceptions import (
    AlreadyRegistered,
    CapacityBelowRegistrations,
    HasAttendees,
    InvalidRating,
    InvalidTransition,
    NotAnAttendee,
    ParticipantNotFound,
    RegistrationClosed,
    SessionFull,
    SessionLive,
    SessionNotCompleted,
)
from live_sessions.models.session_participant import SessionParticipant
from live_sessions.models.session_feedback import SessionFeedback
from live_sessions.utils.time import utcnow


def rounded_mean(ratings: Iterable[int]) -> float:
    """Arithmetic mean rounded half-up to one decimal place, 0 when empty."""
    values = list(ratings)
    if not values:
        return 0.0
    mean = Decimal(sum(values)) / Decimal(len(values))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


class LiveSession(Base):
    __tablename__ = "live_sessions"

    id = Column(
        String, primary_key=True, default=lambda: f"lses_{uuid.uuid4().hex[:12]}"
    )
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(32), nullable=False, index=True)
    language = Column(String(8), nullable=False, server_default="en", default="en")
    tags = Column(JSON, nullable=False, default=list)

    instructor_id = Column(String, nullable=False, index=True)
    related_course_id = Column(String, nullable=True)
    related_museum_id = Column(String, nullable=True)

    scheduled_at = Column(DateTime(timezone=True), nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    max_participants = Column(Integer, nullable=False, server_default="50")
    participant_count = Column(Integer, nullable=False, default=0, server_default="0")

    status = Column(
        String(20), nullable=False, default=SessionStatus.SCHEDULED,
        server_default=SessionStatus.SCHEDULED,
    )
    meeting_link = Column(String, nullable=True)
    recording_url = Column(String, nullable=True)
    average_rating = Column(Float, nullable=False, default=0.0, server_default=text("0"))

    # Feature toggles carried over from the platform's session settings
    is_recorded = Column(Boolean, nullable=False, default=False, server_default=text("false"))
    chat_enabled = Column(Boolean, nullable=False, default=True, server_default=text("true"))
    requires_registration = Column(Boolean, nullable=False, default=True, server_default=text("true"))

    started_at = Column(DateTime(timezone=True), nullable=True)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    # Bumped by SQLAlchemy on every UPDATE; a stale writer fails with StaleDataError
    version = Column(Integer, nullable=False)

    participants = relationship(
        "SessionParticipant",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by=SessionParticipant.registered_at,
        lazy="selectin",
    )
    feedback = relationship(
        "SessionFeedback",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by=SessionFeedback.submitted_at,
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint("duration_minutes >= 15 AND duration_minutes <= 300", name="check_duration_range"),
        CheckConstraint("max_participants >= 1 AND max_participants <= 1000", name="check_capacity_range"),
        CheckConstraint("participant_count >= 0", name="check_participant_count_positive"),
        CheckConstraint("participant_count <= max_participants", name="check_participants_lte_capacity"),
        CheckConstraint("average_rating >= 0 AND average_rating <= 5", name="check_average_rating_range"),
        Index("ix_live_sessions_status_scheduled", "status", "scheduled_at"),
    )

    def __repr__(self):
        return f"<LiveSession(id={self.id}, status={self.status}, participants={self.participant_count}/{self.max_participants})>"

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    @property
    def available_spots(self) -> int:
        return max(0, self.max_participants - len(self.participants))

    @property
    def is_full(self) -> bool:
        return len(self.participants) >= self.max_participants

    def find_participant(self, user_id: str) -> Optional[SessionParticipant]:
        for participant in self.participants:
            if participant.user_id == user_id:
                return participant
        return None

    def is_registered(self, user_id: str) -> bool:
        return self.find_participant(user_id) is not None

    def find_feedback(self, user_id: str) -> Optional[SessionFeedback]:
        for entry in self.feedback:
            if entry.user_id == user_id:
                return entry
        return None

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #

    def add_participant(
        self, user_id: str, *, now: Optional[datetime] = None, allow_live: bool = True
    ) -> SessionParticipant:
        if not SessionStatus.accepts_registrations(self.status, allow_live=allow_live):
            raise RegistrationClosed(self.id, self.status)
        if self.is_registered(user_id):
            raise AlreadyRegistered(self.id, user_id)
        if self.is_full:
            raise SessionFull(self.id, self.max_participants)

        participant = SessionParticipant(
            user_id=user_id,
            status=ParticipantStatus.REGISTERED,
            registered_at=now or utcnow(),
        )
        self.participants.append(participant)
        self._sync_participant_count(now)
        return participant

    def remove_participant(self, user_id: str, *, now: Optional[datetime] = None) -> bool:
        """Drop the user's registration (and their feedback). False if absent."""
        participant = self.find_participant(user_id)
        if participant is None:
            return False
        self.participants.remove(participant)
        entry = self.find_feedback(user_id)
        if entry is not None:
            self.feedback.remove(entry)
            self.recompute_average_rating()
        self._sync_participant_count(now)
        return True

    def _sync_participant_count(self, now: Optional[datetime]) -> None:
        self.participant_count = len(self.participants)
        self.updated_at = now or utcnow()

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def transition_to(self, target: str, *, now: Optional[datetime] = None) -> None:
        if not SessionStatus.can_transition(self.status, target):
            raise InvalidTransition(self.id, self.status, target)
        now = now or utcnow()
        self.status = target
        self.updated_at = now
        if target == SessionStatus.LIVE:
            self.started_at = now
        elif target == SessionStatus.COMPLETED:
            self.ended_at = now
        elif target == SessionStatus.CANCELLED:
            self.cancelled_at = now

    def start(self, *, meeting_link: Optional[str] = None, now: Optional[datetime] = None) -> None:
        self.transition_to(SessionStatus.LIVE, now=now)
        if meeting_link:
            self.meeting_link = meeting_link

    def end(self, *, recording_url: Optional[str] = None, now: Optional[datetime] = None) -> dict:
        now = now or utcnow()
        self.transition_to(SessionStatus.COMPLETED, now=now)
        if recording_url:
            self.recording_url = recording_url
        return self.finalize_attendance(now=now)

    def cancel(self, *, now: Optional[datetime] = None) -> None:
        self.transition_to(SessionStatus.CANCELLED, now=now)

    def ensure_deletable(self) -> None:
        if self.status == SessionStatus.LIVE:
            raise SessionLive(self.id)
        if self.status == SessionStatus.COMPLETED and self.participants:
            raise HasAttendees(self.id)

    def update_details(self, changes: dict, *, now: Optional[datetime] = None) -> None:
        """Apply descriptive / scheduling changes while the session is still scheduled."""
        if self.status != SessionStatus.SCHEDULED:
            raise InvalidTransition(self.id, self.status, SessionStatus.SCHEDULED)
        new_capacity = changes.get("max_participants")
        if new_capacity is not None and new_capacity < len(self.participants):
            raise CapacityBelowRegistrations(self.id, new_capacity, len(self.participants))
        for field, value in changes.items():
            setattr(self, field, value)
        self.updated_at = now or utcnow()

    # ------------------------------------------------------------------ #
    # Attendance
    # ------------------------------------------------------------------ #

    def _require_participant(self, user_id: str) -> SessionParticipant:
        participant = self.find_participant(user_id)
        if participant is None:
            raise ParticipantNotFound(self.id, user_id)
        return participant

    def mark_joined(self, user_id: str, *, now: Optional[datetime] = None) -> bool:
        """Record that the participant is in the room. False when not live."""
        if self.status != SessionStatus.LIVE:
            return False
        participant = self._require_participant(user_id)
        now = now or utcnow()
        if participant.joined_at is None:
            participant.joined_at = now
        # Rejoining after leaving
        participant.left_at = None
        self.updated_at = now
        return True

    def mark_left(self, user_id: str, *, now: Optional[datetime] = None) -> bool:
        if self.status != SessionStatus.LIVE:
            return False
        participant = self._require_participant(user_id)
        now = now or utcnow()
        participant.left_at = now
        self.updated_at = now
        return True

    def finalize_attendance(self, *, now: Optional[datetime] = None) -> dict:
        """
        Settle every participant's attendance status when the session ends.

        Participants who joined at some point become ``attended`` and get a
        ``left_at`` if they were still in the room. Participants who never
        joined are marked ``absent``.
        """
        now = now or utcnow()
        attended = absent = 0
        for participant in self.participants:
            if participant.has_joined:
                participant.status = ParticipantStatus.ATTENDED
                if participant.left_at is None:
                    participant.left_at = now
                attended += 1
            else:
                participant.status = ParticipantStatus.ABSENT
                absent += 1
        return {"attended": attended, "absent": absent}

    # ------------------------------------------------------------------ #
    # Feedback
    # ------------------------------------------------------------------ #

    def upsert_feedback(
        self,
        user_id: str,
        rating: int,
        comment: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> SessionFeedback:
        if isinstance(rating, bool) or not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
            raise InvalidRating(rating, session_id=self.id)
        if self.status != SessionStatus.COMPLETED:
            raise SessionNotCompleted(self.id)
        participant = self.find_participant(user_id)
        if participant is None or participant.status != ParticipantStatus.ATTENDED:
            raise NotAnAttendee(self.id, user_id)

        now = now or utcnow()
        entry = self.find_feedback(user_id)
        if entry is None:
            entry = SessionFeedback(user_id=user_id, rating=rating, comment=comment, submitted_at=now)
            self.feedback.append(entry)
        else:
            entry.rating = rating
            entry.comment = comment
            entry.submitted_at = now
        self.recompute_average_rating()
        self.updated_at = now
        return entry

    def recompute_average_rating(self) -> float:
        self.average_rating = rounded_mean(entry.rating for entry in self.feedback)
        return self.average_rating
