# live_sessions/schemas/participant.py
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class Participant(BaseModel):
    user_id: str
    status: str
    registered_at: datetime
    joined_at: Optional[datetime] = None
    left_at: Optional[datetime] = None
    model_config = {"from_attributes": True}


class AttendanceUpdate(BaseModel):
    session_id: str
    user_id: str
    session_status: str
    # False when the signal arrived outside the live window and was ignored
    recorded: bool
