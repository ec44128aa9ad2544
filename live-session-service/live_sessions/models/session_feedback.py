# live_sessions/models/session_feedback.py
import uuid

from sqlalchemy import (
    Column, String, Integer, Text, DateTime, ForeignKey, UniqueConstraint, CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from live_sessions.db.base_class import Base


class SessionFeedback(Base):
    """Post-session rating and comment, at most one per attendee."""
    __tablename__ = "session_feedback"

    id = Column(
        String, primary_key=True, default=lambda: f"lsfb_{uuid.uuid4().hex[:12]}"
    )
    session_id = Column(
        String, ForeignKey("live_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(String, nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    session = relationship("LiveSession", back_populates="feedback")

    __table_args__ = (
        UniqueConstraint("session_id", "user_id", name="unique_session_feedback_user"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="check_feedback_rating_range"),
    )

    def __repr__(self):
        return f"<SessionFeedback(session={self.session_id}, user={self.user_id}, rating={self.rating})>"
