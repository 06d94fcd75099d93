"""Dependencies for API endpoints."""

import uuid
from dataclasses import dataclass
from typing import AsyncGenerator, Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.db import get_db_session
from app.models.user import Role
from app.services.roles import RoleCreationError, resolve_user_role
from app.utils.jwt_manager import decode_access_token
from app.utils.logging_config import logger

reusable_oauth2 = HTTPBearer(scheme_name="Bearer", auto_error=False)


@dataclass
class AuthSession:
    """The signed-in user as seen by one request."""

    user_id: uuid.UUID
    email: str
    role: Optional[Role]

    @property
    def is_staff_or_admin(self) -> bool:
        return self.role in (Role.STAFF, Role.ADMIN)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_customer(self) -> bool:
        return self.role == Role.CUSTOMER


async def get_auth_session(
    token: Optional[HTTPAuthorizationCredentials] = Depends(reusable_oauth2),
    db: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[AuthSession, None]:
    """
    Decodes the bearer token, resolves (or creates) the user's role and yields
    the session for the duration of the request.

    A user whose role row could not be created gets a session without a role;
    role-gated dependencies reject it.
    """
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        claims = decode_access_token(token.credentials)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has expired."
        ) from None
    except jwt.InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail=f"Invalid token: {e}"
        ) from e

    try:
        role = await resolve_user_role(
            db, claims.user_id, claims.email, claims.requested_role
        )
    except RoleCreationError as e:
        logger.error(f"Role resolution failed for {claims.email}: {e}")
        role = None

    session = AuthSession(user_id=claims.user_id, email=claims.email, role=role)
    logger.debug(f"Session opened for {session.email} ({role.value if role else 'no role'})")
    yield session
    logger.debug(f"Session closed for {session.email}")


async def require_role(
    session: AuthSession = Depends(get_auth_session),
) -> AuthSession:
    """Rejects sessions whose role could not be resolved."""
    if session.role is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account has no role yet. Please try again later.",
        )
    return session


async def require_staff(session: AuthSession = Depends(require_role)) -> AuthSession:
    if not session.is_staff_or_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Staff access required."
        )
    return session


async def require_admin(session: AuthSession = Depends(require_role)) -> AuthSession:
    if not session.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required."
        )
    return session
