import uuid

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import AuthSession, require_admin, require_staff
from app.config.db import get_db_session
from app.schemas.user import TeamCreate, TeamRead
from app.services import teams as team_service

router = APIRouter()


@router.get("", response_model=list[TeamRead])
async def list_teams(
    _: AuthSession = Depends(require_staff),
    db: AsyncSession = Depends(get_db_session),
):
    return await team_service.list_teams(db)


@router.post("", response_model=TeamRead, status_code=status.HTTP_201_CREATED)
async def create_team(
    data: TeamCreate,
    _: AuthSession = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    return await team_service.create_team(db, data)


@router.delete("/{team_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_team(
    team_id: uuid.UUID,
    _: AuthSession = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    await team_service.delete_team(db, team_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
