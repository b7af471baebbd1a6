"""
Pydantic schemas for the authenticated staff member.
"""
from pydantic import BaseModel, Field

from app.core.vocabulary import Position


class Actor(BaseModel):
    """Staff member performing a request, taken from the access token."""
    staff_id: int = Field(..., description="Staff ID used for audit attribution")
    position: Position = Field(..., description="Staff position used for authorization")
    username: str | None = None
