# live_sessions/schemas/analytics.py
from pydantic import BaseModel
from typing import Dict, List, Optional
from datetime import datetime


class AnalyticsOverview(BaseModel):
    total_registrations: int
    total_attendees: int
    attendance_rate: int  # percent, rounded
    average_rating: float
    feedback_count: int


class ParticipantAttendance(BaseModel):
    user_id: str
    status: str
    registered_at: datetime
    joined_at: Optional[datetime] = None
    left_at: Optional[datetime] = None
    duration_minutes: Optional[int] = None


class FeedbackEntry(BaseModel):
    user_id: str
    rating: int
    comment: Optional[str] = None
    submitted_at: datetime


class SessionAnalytics(BaseModel):
    session_id: str
    status: str
    overview: AnalyticsOverview
    participants: List[ParticipantAttendance]
    feedback: List[FeedbackEntry]
    # rating value ("1".."5") -> number of submissions
    rating_distribution: Dict[str, int]


class DashboardSessionItem(BaseModel):
    id: str
    title: str
    scheduled_at: datetime
    instructor_id: str
    participant_count: int
    average_rating: float
    model_config = {"from_attributes": True}


class DashboardSummary(BaseModel):
    status_counts: Dict[str, int]
    upcoming_sessions: List[DashboardSessionItem]
    recent_sessions: List[DashboardSessionItem]
    total_participants: int
