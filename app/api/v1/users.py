"""API endpoints for users and roles."""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import AuthSession, get_auth_session, require_admin, require_staff
from app.config.db import get_db_session
from app.schemas.user import (
    RoleRead,
    RoleUpdate,
    SessionUser,
    SignupCheck,
    SignupCheckResult,
    StaffCreate,
    StaffCreated,
)
from app.services import users as user_service
from app.services.roles import check_signup_allowed

router = APIRouter()


@router.get("/me", response_model=SessionUser)
async def read_current_user(session: AuthSession = Depends(get_auth_session)):
    """
    The caller's identity and role. The role is null when it could not be
    resolved.
    """
    return SessionUser(
        user_id=session.user_id,
        email=session.email,
        role=session.role,
        is_staff_or_admin=session.is_staff_or_admin,
    )


@router.post("/signup-check", response_model=SignupCheckResult)
async def signup_check(data: SignupCheck, db: AsyncSession = Depends(get_db_session)):
    """
    Tells the sign-up form whether the requested role may be used. Staff and
    admin roles are only available to the first user.
    """
    allowed, first_user = await check_signup_allowed(db, data.role)
    return SignupCheckResult(allowed=allowed, first_user=first_user)


@router.get("", response_model=list[RoleRead])
async def list_users(
    _: AuthSession = Depends(require_staff),
    db: AsyncSession = Depends(get_db_session),
):
    return await user_service.list_users(db)


@router.post("/staff", response_model=StaffCreated, status_code=status.HTTP_201_CREATED)
async def create_staff(
    data: StaffCreate,
    _: AuthSession = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    return await user_service.create_staff_user(db, data.email)


@router.patch("/{user_id}/role", response_model=RoleRead)
async def update_role(
    user_id: uuid.UUID,
    data: RoleUpdate,
    _: AuthSession = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    return await user_service.update_user_role(db, user_id, data)
