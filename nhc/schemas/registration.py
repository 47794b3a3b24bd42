"""
Pydantic models for household registration and scorecards.
"""

from typing import Optional, List
from pydantic import BaseModel, Field


class ParticipantInput(BaseModel):
    """One household member taking part in the challenge."""
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    ageRange: Optional[List[int]] = Field(None, min_length=2, max_length=2, description="[min, max] age")
    category: Optional[str] = None
    commitment: Optional[str] = None
    customCommitment: bool = Field(default=False, description="commitment is free text")


class RegistrationRequest(BaseModel):
    """
    Registration form.

    Choice fields are validated by the registration pipeline so that all
    problems come back together as per-field details.
    """
    organization: Optional[str] = None
    team: Optional[str] = None
    sharing: Optional[str] = None
    comment: Optional[str] = None
    referral: Optional[str] = None
    donation: Optional[str] = None
    family: bool = Field(default=False, description="Generate a family code")
    familyCode: Optional[str] = None
    participants: List[ParticipantInput] = Field(default_factory=list)


class ScorecardUpdateRequest(BaseModel):
    """A participant's full scorecard grid."""
    id: int = Field(..., ge=0, description="Participant id")
    scorecard: List[List[int]]
