"""Authentication API endpoints."""

import logging
from typing import Any
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from unixora.config.database import get_db
from unixora.auth.models.schemas import (
    SignupRequest, LoginRequest, AuthResponse, VerifyResponse, UserProfile
)
from unixora.auth.services.auth_service import AuthService
from unixora.core.dependencies import get_token_profile

router = APIRouter(prefix="/auth", tags=["authentication"])
logger = logging.getLogger(__name__)


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    signup_data: SignupRequest,
    db: Session = Depends(get_db)
) -> Any:
    """Create an account and return a token for it."""
    user = AuthService.create_user(
        db=db,
        first_name=signup_data.first_name,
        last_name=signup_data.last_name,
        email=signup_data.email,
        password=signup_data.password
    )

    return {
        "message": "Account created successfully.",
        "token": AuthService.issue_token(user),
        "user": AuthService.profile_for(user)
    }


@router.post("/login", response_model=AuthResponse)
async def login(
    login_data: LoginRequest,
    db: Session = Depends(get_db)
) -> Any:
    """Authenticate user and return a JWT token."""
    user = AuthService.authenticate_user(
        db=db,
        email=login_data.email,
        password=login_data.password
    )
    logger.info(f"User {user.id} logged in")

    return {
        "message": "Login successful.",
        "token": AuthService.issue_token(user),
        "user": AuthService.profile_for(user)
    }


@router.get("/verify", response_model=VerifyResponse)
async def verify(
    profile: UserProfile = Depends(get_token_profile)
) -> Any:
    """Check a bearer token and return the profile it carries."""
    return {"valid": True, "user": profile}
