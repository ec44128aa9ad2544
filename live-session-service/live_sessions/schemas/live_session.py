# live_sessions/schemas/live_session.py
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime

from live_sessions.constants.session import (
    SessionCategory,
    SessionStatus,
    MIN_DURATION_MINUTES,
    MAX_DURATION_MINUTES,
    MIN_PARTICIPANTS,
    MAX_PARTICIPANTS,
    DEFAULT_MAX_PARTICIPANTS,
)
from live_sessions.utils.time import as_utc
from .participant import Participant
from .feedback import Feedback


def _check_category(value: Optional[str]) -> Optional[str]:
    if value is not None and not SessionCategory.is_valid(value):
        raise ValueError(
            f"category must be one of {', '.join(SessionCategory.all_values())}"
        )
    return value


class LiveSessionCreate(BaseModel):
    title: str = Field(
        ..., min_length=1, max_length=200,
        json_schema_extra={"example": "Reading the Rosetta Stone"},
    )
    description: Optional[str] = None
    category: str = Field(..., json_schema_extra={"example": "artifacts"})
    # Absolute instant; naive values are treated as UTC
    scheduled_at: datetime
    duration_minutes: int = Field(..., ge=MIN_DURATION_MINUTES, le=MAX_DURATION_MINUTES)
    max_participants: int = Field(
        DEFAULT_MAX_PARTICIPANTS, ge=MIN_PARTICIPANTS, le=MAX_PARTICIPANTS
    )
    # Admins may schedule on behalf of another instructor
    instructor_id: Optional[str] = None
    language: str = "en"
    tags: List[str] = []
    is_recorded: bool = False
    chat_enabled: bool = True
    requires_registration: bool = True
    related_course_id: Optional[str] = None
    related_museum_id: Optional[str] = None

    @field_validator("category")
    @classmethod
    def validate_category(cls, value: Optional[str]) -> Optional[str]:
        return _check_category(value)

    @field_validator("scheduled_at")
    @classmethod
    def normalize_scheduled_at(cls, value: datetime) -> datetime:
        return as_utc(value)


class LiveSessionUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    duration_minutes: Optional[int] = Field(None, ge=MIN_DURATION_MINUTES, le=MAX_DURATION_MINUTES)
    max_participants: Optional[int] = Field(None, ge=MIN_PARTICIPANTS, le=MAX_PARTICIPANTS)
    language: Optional[str] = None
    tags: Optional[List[str]] = None
    is_recorded: Optional[bool] = None
    chat_enabled: Optional[bool] = None
    requires_registration: Optional[bool] = None
    related_course_id: Optional[str] = None
    related_museum_id: Optional[str] = None

    @field_validator("category")
    @classmethod
    def validate_category(cls, value: Optional[str]) -> Optional[str]:
        return _check_category(value)

    @field_validator("scheduled_at")
    @classmethod
    def normalize_scheduled_at(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)


class LiveSessionSummary(BaseModel):
    id: str
    title: str
    category: str
    language: str
    instructor_id: str
    scheduled_at: datetime
    duration_minutes: int
    max_participants: int
    participant_count: int
    available_spots: int
    status: str
    average_rating: float
    tags: List[str] = []
    model_config = {"from_attributes": True}


class LiveSession(LiveSessionSummary):
    description: Optional[str] = None
    meeting_link: Optional[str] = None
    recording_url: Optional[str] = None
    is_recorded: bool = False
    chat_enabled: bool = True
    requires_registration: bool = True
    related_course_id: Optional[str] = None
    related_museum_id: Optional[str] = None
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    participants: List[Participant] = []
    feedback: List[Feedback] = []


class LiveSessionDetail(LiveSession):
    # Whether the calling user holds a registration
    is_registered: bool = False


class Pagination(BaseModel):
    current: int
    pages: int
    total: int
    has_next: bool
    has_prev: bool


class LiveSessionPage(BaseModel):
    items: List[LiveSessionSummary]
    pagination: Pagination


class LiveSessionFilters(BaseModel):
    status: Optional[str] = None
    category: Optional[str] = None
    language: Optional[str] = None
    instructor_id: Optional[str] = None
    search: Optional[str] = None
    scheduled_from: Optional[datetime] = None
    scheduled_to: Optional[datetime] = None

    @field_validator("category")
    @classmethod
    def validate_category(cls, value: Optional[str]) -> Optional[str]:
        return _check_category(value)

    @field_validator("status")
    @classmethod
    def check_status(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in SessionStatus.filter_values():
            raise ValueError(
                f"status must be one of {', '.join(SessionStatus.filter_values())}"
            )
        return value

    @field_validator("scheduled_from", "scheduled_to")
    @classmethod
    def normalize_range(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)


class StartSessionRequest(BaseModel):
    meeting_link: Optional[str] = None


class EndSessionRequest(BaseModel):
    recording_url: Optional[str] = None
