"""
Pydantic models for user profile and admin user management.
"""

from typing import Optional
from pydantic import BaseModel, Field


class UpdateProfileRequest(BaseModel):
    """Caller's own profile changes."""
    firstName: Optional[str] = Field(None, max_length=50)
    lastName: Optional[str] = Field(None, max_length=50)
    organization: Optional[str] = Field(None, max_length=100)


class AdminUpdateUserRequest(BaseModel):
    """Admin edit of another user, addressed by e-mail."""
    email: str = Field(..., min_length=1, description="E-mail of the user to edit")
    newEmail: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    organization: Optional[str] = None
    team: Optional[str] = None
    family: Optional[str] = None
    comment: Optional[str] = None
    referral: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None

    def to_updates(self) -> dict:
        """Set fields in user-document form."""
        updates = self.model_dump(exclude={"email", "newEmail"}, exclude_none=True)
        if self.newEmail:
            updates["email"] = self.newEmail
        return updates
