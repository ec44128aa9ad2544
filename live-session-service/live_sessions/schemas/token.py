# live_sessions/schemas/token.py
from pydantic import BaseModel, Field
from typing import Optional

from live_sessions.constants.session import UserRole


class TokenPayload(BaseModel):
    sub: str  # "sub" is the standard claim for subject (user ID)
    # Platform role issued by the identity service, e.g. "instructor"
    role: str = UserRole.VISITOR
    org_id: Optional[str] = Field(default=None, alias="orgId")
    exp: Optional[int] = None  # Standard claim for expiration time

    model_config = {
        "populate_by_name": True,  # Allow populating by alias
        "from_attributes": True,
    }
