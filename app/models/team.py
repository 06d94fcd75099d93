"""Team model."""

import re
from typing import TYPE_CHECKING, Optional

from sqlalchemy import String, Text, event
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel

if TYPE_CHECKING:
    from app.models.user import UserRole


class Team(BaseModel):
    __tablename__ = "teams"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Members point at the team through user_roles.team_id; removing a team
    # leaves its members in place with no team.
    members: Mapped[list["UserRole"]] = relationship(
        "UserRole", back_populates="team", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Team(id={self.id}, name='{self.name}')>"


def normalize_team_name(mapper, connection, target):
    """
    Collapses inner whitespace and strips the team name before it is stored.
    """
    name = re.sub(r"\s+", " ", target.name or "").strip()
    if not name:
        raise ValueError("Team name must not be empty")
    target.name = name


# Register event listeners
event.listen(Team, "before_insert", normalize_team_name)
event.listen(Team, "before_update", normalize_team_name)
