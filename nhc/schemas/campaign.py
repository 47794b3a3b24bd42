"""
Pydantic models for campaign globals and admin messages.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class UpdateGlobalsRequest(BaseModel):
    """Campaign globals; omitted values keep their current setting."""
    challengeStart: Optional[datetime] = None
    challengeEnd: Optional[datetime] = None
    registrationOpen: Optional[bool] = None
    scorecardEnabled: Optional[bool] = None


class SendMessageRequest(BaseModel):
    """Announcement e-mail to a filtered set of users."""
    subject: Optional[str] = None
    body: Optional[str] = None
    status: List[str] = Field(default_factory=list, description="User statuses to address")
    roles: Optional[List[str]] = None
