# live_sessions/schemas/feedback.py
from pydantic import BaseModel, Field, StrictBool, StrictFloat, StrictInt, StrictStr
from typing import Optional, Union
from datetime import datetime


class Feedback(BaseModel):
    user_id: str
    rating: int
    comment: Optional[str] = None
    submitted_at: datetime
    model_config = {"from_attributes": True}


class FeedbackCreate(BaseModel):
    # Strict types keep the raw value so the aggregator can reject
    # fractional, string or out-of-range ratings with INVALID_RATING.
    rating: Union[StrictBool, StrictInt, StrictFloat, StrictStr] = Field(
        ..., json_schema_extra={"example": 5}
    )
    comment: Optional[str] = Field(None, max_length=2000)


class FeedbackResult(BaseModel):
    average_rating: float
    feedback_count: int
