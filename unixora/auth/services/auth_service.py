"""Authentication service for user management."""

import logging
import re
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from fastapi import HTTPException, status

from unixora.auth.models.user import User
from unixora.auth.models.schemas import UserProfile
from unixora.auth.utils.security import (
    create_access_token, hash_password, password_matches, read_access_token
)

logger = logging.getLogger(__name__)

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PASSWORD_REGEX = re.compile(
    r"^(?=.*[A-Za-z])(?=.*\d)(?=.*[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]).{8,}$"
)
PASSWORD_RULE_MESSAGE = (
    "Password must be at least 8 characters and include a number and a special character."
)


class AuthService:
    """Service for handling authentication operations."""

    @staticmethod
    def normalize_email(email: str) -> str:
        return email.strip().lower()

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        """Get user by email."""
        return db.query(User).filter(User.email == AuthService.normalize_email(email)).first()

    @staticmethod
    def create_user(
        db: Session,
        first_name: Optional[str],
        email: Optional[str],
        password: Optional[str],
        last_name: Optional[str] = ""
    ) -> User:
        """Validate signup input and create a new user."""
        if not first_name or not email or not password:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Missing required fields."
            )

        if not EMAIL_REGEX.match(email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid email format."
            )

        if not PASSWORD_REGEX.match(password):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=PASSWORD_RULE_MESSAGE
            )

        if AuthService.get_user_by_email(db, email):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email already exists."
            )

        db_user = User(
            first_name=first_name,
            last_name=last_name or "",
            email=AuthService.normalize_email(email),
            hashed_password=hash_password(password)
        )

        db.add(db_user)
        try:
            db.commit()
        except IntegrityError:
            # Lost a race with a concurrent signup for the same email
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email already exists."
            )
        db.refresh(db_user)
        logger.info(f"Created user {db_user.id}")
        return db_user

    @staticmethod
    def authenticate_user(db: Session, email: Optional[str], password: Optional[str]) -> User:
        """Authenticate a user with email and password."""
        if not email or not password:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Missing email or password."
            )

        if not EMAIL_REGEX.match(email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid email format."
            )

        user = AuthService.get_user_by_email(db, email)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Email not found."
            )

        if not password_matches(password, user.hashed_password):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Incorrect password.",
                headers={"WWW-Authenticate": "Bearer"},
            )

        return user

    @staticmethod
    def profile_for(user: User) -> UserProfile:
        return UserProfile(firstName=user.first_name, lastName=user.last_name or "", email=user.email)

    @staticmethod
    def issue_token(user: User) -> str:
        """Create a token whose claims carry the user profile."""
        return create_access_token(
            subject=user.id,
            claims={
                "email": user.email,
                "firstName": user.first_name,
                "lastName": user.last_name or "",
            }
        )

    @staticmethod
    def profile_from_token(token: str) -> Optional[UserProfile]:
        """Decode a token and rebuild the profile from its claims."""
        payload = read_access_token(token)
        if payload is None:
            return None
        return UserProfile(
            firstName=payload.get("firstName") or "",
            lastName=payload.get("lastName") or "",
            email=payload.get("email") or ""
        )
