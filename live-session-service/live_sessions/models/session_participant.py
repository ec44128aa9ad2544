# live_sessions/models/session_participant.py
import uuid

from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from live_sessions.db.base_class import Base
from live_sessions.constants.session import ParticipantStatus
from live_sessions.utils.time import as_utc


class SessionParticipant(Base):
    """
    A user's registration for a live session, carrying attendance state.

    Owned by the LiveSession aggregate; created and mutated only through
    LiveSession methods.
    """
    __tablename__ = "session_participants"

    id = Column(
        String, primary_key=True, default=lambda: f"lspart_{uuid.uuid4().hex[:12]}"
    )
    session_id = Column(
        String, ForeignKey("live_sessions.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(String, nullable=False, index=True)
    status = Column(
        String(20), nullable=False, default=ParticipantStatus.REGISTERED,
        server_default=ParticipantStatus.REGISTERED,
    )
    registered_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    joined_at = Column(DateTime(timezone=True), nullable=True)
    left_at = Column(DateTime(timezone=True), nullable=True)

    session = relationship("LiveSession", back_populates="participants")

    __table_args__ = (
        UniqueConstraint("session_id", "user_id", name="unique_session_participant_user"),
        Index("ix_session_participants_session_status", "session_id", "status"),
    )

    def __repr__(self):
        return f"<SessionParticipant(session={self.session_id}, user={self.user_id}, status={self.status})>"

    @property
    def has_joined(self) -> bool:
        return self.joined_at is not None

    def duration_minutes(self):
        """Minutes between joining and leaving, or None while still unknown."""
        if self.joined_at and self.left_at:
            return round((as_utc(self.left_at) - as_utc(self.joined_at)).total_seconds() / 60)
        return None
