"""Password hashing and profile-carrying JWTs."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Any, Dict, Union
from jose import JWTError, jwt
from passlib.context import CryptContext

from unixora.config.settings import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

password_hasher = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Claims a token must carry to stand in for the user's profile
REQUIRED_CLAIMS = ("sub", "email")


def hash_password(password: str) -> str:
    return password_hasher.hash(password)


def password_matches(password: str, stored_hash: str) -> bool:
    return password_hasher.verify(password, stored_hash)


def create_access_token(
    subject: Union[str, Any],
    claims: Optional[Dict[str, Any]] = None,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create a JWT access token carrying the given profile claims."""
    lifetime = expires_delta or timedelta(days=settings.access_token_expire_days)
    payload = dict(claims or {})
    payload.update({"exp": datetime.now(timezone.utc) + lifetime, "sub": str(subject)})
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def read_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Claims of a valid, unexpired token that names a user; otherwise None."""
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as e:
        logger.debug(f"Rejected token: {e}")
        return None

    if any(not claims.get(name) for name in REQUIRED_CLAIMS):
        logger.debug("Rejected token without user claims")
        return None
    return claims
