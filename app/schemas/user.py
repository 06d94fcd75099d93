"""Pydantic schemas for users, roles and teams."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.user import Role


class SessionUser(BaseModel):
    user_id: uuid.UUID
    email: str
    role: Optional[Role] = None
    is_staff_or_admin: bool


class RoleRead(BaseModel):
    user_id: uuid.UUID
    email: Optional[str] = None
    role: Role
    team_id: Optional[uuid.UUID] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class RoleUpdate(BaseModel):
    role: Optional[Role] = None
    team_id: Optional[uuid.UUID] = None


class SignupCheck(BaseModel):
    role: Role = Role.CUSTOMER


class SignupCheckResult(BaseModel):
    allowed: bool
    first_user: bool


class StaffCreate(BaseModel):
    email: str = Field(..., min_length=3)


class StaffCreated(BaseModel):
    user_id: uuid.UUID
    email: str
    role: Role
    temporary_password: str = Field(
        ..., description="Shown once; the staff member changes it on first login."
    )


class TeamCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class TeamRead(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}
