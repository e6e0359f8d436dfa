"""
FastAPI Dependencies

Provides dependency injection for database sessions and caller identity.

- The trend analysis endpoint only checks that a bearer token is present;
  validating it is left to the gateway in front of the service.
- Per-user endpoints decode the JWT to find the caller's profile.
- JWT payloads are never logged.
"""

from typing import Annotated, Optional
from fastapi import Depends, Header
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from jose import JWTError, jwt
from datetime import datetime, timedelta
import logging

from umrah_feedback.database import get_db
from umrah_feedback.config import settings
from umrah_feedback.exceptions import AuthorizationMissingError, UnauthorizedError, ForbiddenError
from umrah_feedback.models.profile import Profile

logger = logging.getLogger(__name__)


security = HTTPBearer(auto_error=False)


def require_bearer_token(authorization: Optional[str]) -> str:
    """
    Return the token from an ``Authorization: Bearer <token>`` header.

    Raises:
        AuthorizationMissingError: header absent, empty, or not a bearer token.
    """
    if not authorization:
        raise AuthorizationMissingError()
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthorizationMissingError()
    return token.strip()


async def get_bearer_token(
    authorization: Annotated[Optional[str], Header()] = None,
) -> str:
    """Dependency form of require_bearer_token."""
    return require_bearer_token(authorization)


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_subject(token: str) -> tuple[str, Optional[str]]:
    """Return (sub, email) from a signed token."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        logger.warning("JWT validation failed")
        raise UnauthorizedError()

    sub = payload.get("sub")
    if not sub:
        raise UnauthorizedError()
    return str(sub), payload.get("email")


async def _find_profile(db: AsyncSession, user_id: str) -> Optional[Profile]:
    result = await db.execute(select(Profile).where(Profile.id == user_id))
    return result.scalar_one_or_none()


async def get_or_create_profile(db: AsyncSession, user_id: str, email: Optional[str]) -> Profile:
    """
    Profile for ``user_id``, inserted on first sight.

    Two first requests for the same subject may both miss the lookup; the
    one that loses the insert rolls back and reads the winner's row.
    """
    profile = await _find_profile(db, user_id)
    if profile is not None:
        return profile

    profile = Profile(id=user_id, email=email)
    db.add(profile)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        profile = await _find_profile(db, user_id)
        if profile is None:
            raise
        return profile

    await db.refresh(profile)
    logger.info("Created profile on first request", extra={"profile_id": user_id})
    return profile


async def get_current_profile(
    db: Annotated[AsyncSession, Depends(get_db)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)] = None,
) -> Profile:
    """
    Profile of the authenticated caller.

    Profiles are created on first sight of a subject, mirroring the
    sign-up trigger of the identity provider.
    """
    if credentials is None:
        raise AuthorizationMissingError()

    user_id, email = decode_subject(credentials.credentials)
    return await get_or_create_profile(db, user_id, email)


async def get_admin_profile(
    profile: Annotated[Profile, Depends(get_current_profile)]
) -> Profile:
    if not profile.is_admin:
        raise ForbiddenError("Administrator access required")
    return profile


# Type aliases for dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db)]
CurrentProfile = Annotated[Profile, Depends(get_current_profile)]
AdminProfile = Annotated[Profile, Depends(get_admin_profile)]
BearerToken = Annotated[str, Depends(get_bearer_token)]
