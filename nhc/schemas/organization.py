"""
Pydantic models for organization management.
"""

from typing import List
from pydantic import BaseModel, Field


class CreateOrganizationRequest(BaseModel):
    """Request to create an organization."""
    name: str = Field(..., min_length=1, max_length=100)
    needsApproval: bool = Field(default=False)


class UpdateOrganizationRequest(BaseModel):
    """Request to rename or re-flag an organization."""
    id: str
    name: str = Field(..., min_length=1, max_length=100)
    needsApproval: bool = Field(default=False)


class MergeOrganizationsRequest(BaseModel):
    """Request to merge organizations under a single name."""
    ids: List[str] = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
