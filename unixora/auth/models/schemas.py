"""Pydantic schemas for authentication."""

from typing import Optional
from pydantic import BaseModel, Field


class UserProfile(BaseModel):
    """Public profile returned to the client and stored alongside the token."""
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field("", alias="lastName")
    email: str

    class Config:
        from_attributes = True
        populate_by_name = True


class SignupRequest(BaseModel):
    """Signup request schema.

    Fields are optional here so that missing values are reported with the
    service's own 400 messages instead of a validation error.
    """
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field("", alias="lastName")
    email: Optional[str] = None
    password: Optional[str] = None

    class Config:
        populate_by_name = True


class LoginRequest(BaseModel):
    """Login request schema."""
    email: Optional[str] = None
    password: Optional[str] = None


class AuthResponse(BaseModel):
    """Signup/login response schema."""
    message: str
    token: str
    user: UserProfile


class VerifyResponse(BaseModel):
    """Token verification response schema."""
    valid: bool = True
    user: UserProfile
