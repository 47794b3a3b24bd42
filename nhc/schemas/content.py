"""
Pydantic models for news, FAQ and bonus questions.
"""

from typing import List, Optional
from pydantic import BaseModel, Field


class CreateNewsRequest(BaseModel):
    """Request to create a news item."""
    subject: Optional[str] = None
    body: Optional[str] = None
    published: bool = Field(default=False)
    adminOnly: bool = Field(default=False)


class CreateFAQRequest(BaseModel):
    """Request to create an FAQ entry."""
    question: Optional[str] = None
    answer: Optional[str] = None
    category: Optional[str] = None


class UpdateFAQRequest(CreateFAQRequest):
    """Request to replace an FAQ entry."""
    id: str


class CreateQuestionRequest(BaseModel):
    """Request to create a bonus question."""
    text: Optional[str] = None
    answers: List[str] = Field(default_factory=list)
    correctAnswer: Optional[str] = None


class AnswerQuestionRequest(BaseModel):
    """A participant's answer to the enabled bonus question."""
    answer: str = Field(..., min_length=1)
