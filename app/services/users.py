"""User administration: role changes, team membership and staff accounts."""

import secrets
import uuid

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from supabase import AuthError

from app.config.supabase import supabase_admin
from app.models.team import Team
from app.models.user import Role, UserRole
from app.schemas.user import RoleUpdate, StaffCreated
from app.services.roles import create_user_role, get_user_role
from app.utils.logging_config import logger

TEMPORARY_PASSWORD_BYTES = 12


async def list_users(db: AsyncSession) -> list[UserRole]:
    result = await db.scalars(select(UserRole).order_by(UserRole.created_at.asc()))
    return list(result.all())


async def update_user_role(
    db: AsyncSession, user_id: uuid.UUID, data: RoleUpdate
) -> UserRole:
    row = await get_user_role(db, user_id)
    if row is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "User not found")

    fields = data.model_dump(exclude_unset=True)
    if fields.get("team_id") is not None and await db.get(Team, fields["team_id"]) is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Team not found")
    if "role" in fields and fields["role"] is None:
        raise HTTPException(status.HTTP_422_UNPROCESSABLE_ENTITY, "Role cannot be empty")

    for field, value in fields.items():
        setattr(row, field, value)
    await db.commit()
    logger.info(f"Updated user {user_id}: {fields}")
    return row


def generate_temporary_password() -> str:
    return secrets.token_urlsafe(TEMPORARY_PASSWORD_BYTES)


async def create_staff_user(db: AsyncSession, email: str) -> StaffCreated:
    """
    Creates a confirmed platform account with a temporary password and
    records it as staff.

    Raises:
        HTTPException: 409 if the address already has a role, 502 if the
        platform rejects the account.
    """
    email = email.strip().lower()
    existing = await db.scalar(select(UserRole).where(UserRole.email == email))
    if existing is not None:
        raise HTTPException(status.HTTP_409_CONFLICT, "A user with this email already exists")

    password = generate_temporary_password()
    client = await supabase_admin()
    try:
        response = await client.auth.admin.create_user(
            {
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": {"role": Role.STAFF.value},
            }
        )
    except AuthError as e:
        logger.error(f"Failed to create staff account for {email}: {e}")
        raise HTTPException(status.HTTP_502_BAD_GATEWAY, f"Could not create account: {e}") from e

    user_id = uuid.UUID(str(response.user.id))
    row = await create_user_role(db, user_id, email, Role.STAFF)
    return StaffCreated(
        user_id=row.user_id, email=email, role=row.role, temporary_password=password
    )
