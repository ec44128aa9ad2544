# live_sessions/models/__init__.py

from .live_session import LiveSession
from .session_participant import SessionParticipant
from .session_feedback import SessionFeedback
