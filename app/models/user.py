"""User role model."""

import enum
import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Enum as EnumType
from sqlalchemy import ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.team import Team


class Role(enum.Enum):
    CUSTOMER = "customer"
    STAFF = "staff"
    ADMIN = "admin"


class UserRole(Base, TimestampMixin):
    __tablename__ = "user_roles"

    # Populated with the id from Supabase's auth.users table. There is no
    # foreign key since auth.users is not part of this application's metadata.
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        comment="Corresponds to the id of the user in Supabase auth.users.",
    )
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    role: Mapped[Role] = mapped_column(
        EnumType(
            Role,
            name="user_role",
            native_enum=False,
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
        default=Role.CUSTOMER,
    )
    team_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("teams.id", ondelete="SET NULL"), nullable=True, index=True
    )
    team: Mapped[Optional["Team"]] = relationship("Team", back_populates="members")

    @property
    def is_staff_or_admin(self) -> bool:
        return self.role in (Role.STAFF, Role.ADMIN)

    def __repr__(self) -> str:
        return f"<UserRole(user_id={self.user_id}, role='{self.role.value}')>"
