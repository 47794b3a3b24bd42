"""
Pydantic models for authentication request validation.

Defines schemas for login, signup, verification, OAuth and password resets.
"""

from typing import Optional
from pydantic import BaseModel, Field, EmailStr


class LoginRequest(BaseModel):
    """Request body for password login."""
    email: Optional[str] = None
    password: Optional[str] = None


class SignupRequest(BaseModel):
    """Request body for account creation."""
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    firstName: str = Field(default="", max_length=50)
    lastName: str = Field(default="", max_length=50)


class VerifyEmailRequest(BaseModel):
    """Request body for confirming an e-mail address."""
    code: str = Field(..., min_length=1)


class OAuthLoginRequest(BaseModel):
    """Authorization code handed over by the frontend after the provider redirect."""
    code: str = Field(..., min_length=1)
    clientId: str = Field(..., min_length=1)
    redirectUri: str = Field(..., min_length=1)


class ForgotPasswordRequest(BaseModel):
    """Request body for requesting a password reset."""
    email: Optional[str] = None


class ResetPasswordRequest(BaseModel):
    """Request body for setting a new password."""
    resetCode: str = Field(..., min_length=1)
    password: Optional[str] = None
