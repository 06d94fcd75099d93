"""
Role resolution for signed-in users.

Every user gets exactly one row in `user_roles`, created the first time they
are seen. The very first user of a deployment becomes an admin.
"""

import asyncio
import uuid
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import Role, UserRole
from app.settings import settings
from app.utils.logging_config import logger

ELEVATED_ROLES = (Role.STAFF, Role.ADMIN)


class RoleCreationError(Exception):
    """Raised when the role row could not be written after all attempts."""


async def get_user_role(db: AsyncSession, user_id: uuid.UUID) -> Optional[UserRole]:
    return await db.scalar(select(UserRole).where(UserRole.user_id == user_id))


async def count_user_roles(db: AsyncSession) -> int:
    return await db.scalar(select(func.count()).select_from(UserRole)) or 0


def _parse_role(value: Optional[str]) -> Optional[Role]:
    if not value:
        return None
    try:
        return Role(value)
    except ValueError:
        logger.warning(f"Ignoring unknown requested role: {value}")
        return None


def default_role_for(email: str, requested: Optional[str] = None) -> Role:
    """
    Picks the role for a user who has none yet: the requested role, else staff
    for addresses on the staff domain, else customer.

    Elevated roles requested at sign-up are not honoured here; only the
    first-user rule or an admin can grant them.
    """
    requested_role = _parse_role(requested)
    if requested_role is not None and requested_role not in ELEVATED_ROLES:
        return requested_role
    if requested_role in ELEVATED_ROLES:
        logger.warning(
            f"Requested role '{requested_role.value}' for {email} needs an administrator"
        )
    if email.lower().endswith(f"@{settings.STAFF_EMAIL_DOMAIN.lower()}"):
        return Role.STAFF
    return Role.CUSTOMER


async def create_user_role(
    db: AsyncSession,
    user_id: uuid.UUID,
    email: str,
    role: Role,
    attempts: Optional[int] = None,
    retry_delay: Optional[float] = None,
) -> UserRole:
    """
    Inserts the role row, retrying with a fixed delay.

    Args:
        db: The database session.
        user_id: The platform auth user id.
        email: The user's email address.
        role: The role to store.
        attempts: Number of insert attempts (defaults to ROLE_CREATE_ATTEMPTS).
        retry_delay: Seconds between attempts (defaults to ROLE_CREATE_RETRY_DELAY).

    Returns:
        UserRole: The stored row. If a concurrent request stored one first,
        that row is returned instead.

    Raises:
        RoleCreationError: If every attempt failed.
    """
    attempts = attempts or settings.ROLE_CREATE_ATTEMPTS
    retry_delay = settings.ROLE_CREATE_RETRY_DELAY if retry_delay is None else retry_delay

    for attempt in range(1, attempts + 1):
        try:
            row = UserRole(user_id=user_id, email=email, role=role)
            db.add(row)
            await db.commit()
            logger.info(f"Created role '{role.value}' for {email}")
            return row
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Error creating user role (attempt {attempt}): {e}")
            existing = await get_user_role(db, user_id)
            if existing is not None:
                return existing
            if attempt < attempts:
                await asyncio.sleep(retry_delay)

    raise RoleCreationError(
        f"Failed to create user role for {email} after {attempts} attempts"
    )


async def resolve_user_role(
    db: AsyncSession,
    user_id: uuid.UUID,
    email: str,
    requested_role: Optional[str] = None,
) -> Role:
    """
    Returns the user's role, creating the role row on first sign-in.

    Raises:
        RoleCreationError: If the row could not be created.
    """
    existing = await get_user_role(db, user_id)
    if existing is not None:
        return existing.role

    role = default_role_for(email, requested_role)
    if await count_user_roles(db) == 0:
        logger.info(f"First user {email} - creating as admin")
        role = Role.ADMIN

    row = await create_user_role(db, user_id, email, role)
    return row.role


async def check_signup_allowed(db: AsyncSession, role: Role) -> tuple[bool, bool]:
    """
    Applies the sign-up rule: staff and admin accounts can only be requested
    while the deployment has no users yet.

    Returns:
        tuple[bool, bool]: (allowed, first_user).
    """
    first_user = await count_user_roles(db) == 0
    if role in ELEVATED_ROLES and not first_user:
        return False, first_user
    return True, first_user
