from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import AuthSession, require_role, require_staff
from app.config.db import get_db_session
from app.schemas.metrics import Dashboard, PerformanceMetrics
from app.services import metrics as metrics_service

router = APIRouter()


@router.get("/dashboard", response_model=Dashboard)
async def dashboard(
    session: AuthSession = Depends(require_role),
    db: AsyncSession = Depends(get_db_session),
):
    return await metrics_service.dashboard(db, session)


@router.get("/performance", response_model=PerformanceMetrics)
async def performance(
    _: AuthSession = Depends(require_staff),
    db: AsyncSession = Depends(get_db_session),
):
    return await metrics_service.performance(db)
