import uuid

from fastapi import HTTPException, status
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.team import Team
from app.models.user import UserRole
from app.schemas.user import TeamCreate
from app.utils.logging_config import logger


async def list_teams(db: AsyncSession) -> list[Team]:
    result = await db.scalars(select(Team).order_by(Team.name.asc()))
    return list(result.all())


async def create_team(db: AsyncSession, data: TeamCreate) -> Team:
    team = Team(name=data.name, description=data.description)
    db.add(team)
    try:
        await db.commit()
    except ValueError as e:
        await db.rollback()
        raise HTTPException(status.HTTP_422_UNPROCESSABLE_ENTITY, str(e)) from e
    except IntegrityError as e:
        await db.rollback()
        raise HTTPException(
            status.HTTP_409_CONFLICT, f"Team '{team.name}' already exists"
        ) from e
    logger.info(f"Created team {team.name}")
    return team


async def delete_team(db: AsyncSession, team_id: uuid.UUID) -> None:
    """
    Removes a team. Its members stay and lose their team assignment.
    """
    team = await db.get(Team, team_id)
    if team is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Team not found")

    await db.execute(
        update(UserRole)
        .where(UserRole.team_id == team_id)
        .values(team_id=None)
        .execution_options(synchronize_session=False)
    )
    await db.delete(team)
    await db.commit()
    logger.info(f"Deleted team {team_id}")
