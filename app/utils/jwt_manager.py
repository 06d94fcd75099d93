"""Helpers for Supabase access tokens."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from app.settings import settings

AUDIENCE = "authenticated"
ALGORITHM = "HS256"


@dataclass(frozen=True)
class TokenClaims:
    user_id: uuid.UUID
    email: str
    requested_role: Optional[str] = None


def decode_access_token(token: str) -> TokenClaims:
    """
    Decodes a Supabase-issued access token.

    Args:
        token (str): The raw bearer token.

    Returns:
        TokenClaims: The user id, email and role requested at sign-up.

    Raises:
        jwt.InvalidTokenError: If the signature, audience or expiry is invalid,
            or a required claim is missing or malformed.
    """
    payload = jwt.decode(
        token,
        settings.SUPABASE_JWT_SECRET,
        algorithms=[ALGORITHM],
        audience=AUDIENCE,
    )
    subject = payload.get("sub")
    email = payload.get("email")
    if not subject or not email:
        raise jwt.InvalidTokenError("Token is missing the 'sub' or 'email' claim.")
    try:
        user_id = uuid.UUID(subject)
    except ValueError as e:
        raise jwt.InvalidTokenError(f"Malformed subject: {subject}") from e

    metadata = payload.get("user_metadata") or {}
    return TokenClaims(
        user_id=user_id,
        email=email.lower(),
        requested_role=metadata.get("requested_role"),
    )


def create_access_token(
    user_id: uuid.UUID,
    email: str,
    requested_role: Optional[str] = None,
    expires_in: timedelta = timedelta(hours=1),
) -> str:
    """
    Signs a token shaped like the ones Supabase Auth issues. Used by local
    tooling and the test suite.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "iat": now,
        "exp": now + expires_in,
        "aud": AUDIENCE,
        "sub": str(user_id),
        "email": email,
        "role": "authenticated",
        "user_metadata": {"requested_role": requested_role} if requested_role else {},
    }
    return jwt.encode(payload, settings.SUPABASE_JWT_SECRET, algorithm=ALGORITHM)
