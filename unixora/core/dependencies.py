"""FastAPI dependencies for authentication."""

from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from unixora.auth.models.schemas import UserProfile
from unixora.auth.services.auth_service import AuthService

# auto_error is off so a missing header gets the service's own 401 message
security = HTTPBearer(auto_error=False)


async def get_token_profile(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> UserProfile:
    """
    Dependency to get the profile carried by the bearer token.
    Raises HTTPException if the token is missing or invalid.
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token provided.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    profile = AuthService.profile_from_token(credentials.credentials)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return profile
