"""API endpoints for tickets."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import AuthSession, require_role, require_staff
from app.config.db import get_db_session
from app.models.ticket import TicketPriority, TicketStatus
from app.schemas.ticket import (
    BulkUpdateRequest,
    BulkUpdateResult,
    CustomerHistory,
    RatingCreate,
    TicketCreate,
    TicketFilters,
    TicketRead,
    TicketUpdate,
)
from app.services import tickets as ticket_service

router = APIRouter()


def get_filters(
    status: Optional[TicketStatus] = Query(None),
    priority: Optional[TicketPriority] = Query(None),
    q: Optional[str] = Query(None, description="Free-text search"),
) -> TicketFilters:
    return TicketFilters(status=status, priority=priority, q=q or None)


@router.get("", response_model=list[TicketRead])
async def list_tickets(
    filters: TicketFilters = Depends(get_filters),
    session: AuthSession = Depends(require_role),
    db: AsyncSession = Depends(get_db_session),
):
    """
    List the tickets visible to the caller, newest first.
    """
    return await ticket_service.list_tickets(db, session, filters)


@router.post("", response_model=TicketRead, status_code=status.HTTP_201_CREATED)
async def create_ticket(
    data: TicketCreate,
    session: AuthSession = Depends(require_role),
    db: AsyncSession = Depends(get_db_session),
):
    return await ticket_service.create_ticket(db, session, data)


@router.get(
    "/export.csv",
    response_class=Response,
    summary="Export the filtered ticket list as CSV",
)
async def export_tickets(
    filters: TicketFilters = Depends(get_filters),
    session: AuthSession = Depends(require_role),
    db: AsyncSession = Depends(get_db_session),
):
    tickets = await ticket_service.list_tickets(db, session, filters)
    return Response(
        content=ticket_service.export_csv(tickets),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{ticket_service.export_filename()}"'
        },
    )


@router.post("/bulk", response_model=BulkUpdateResult)
async def bulk_update(
    data: BulkUpdateRequest,
    _: AuthSession = Depends(require_staff),
    db: AsyncSession = Depends(get_db_session),
):
    """
    Set one status or priority on all selected tickets in a single update.
    """
    updated = await ticket_service.bulk_update(db, data)
    return BulkUpdateResult(updated=updated)


@router.get("/customers/{email}/history", response_model=CustomerHistory)
async def customer_history(
    email: str,
    _: AuthSession = Depends(require_staff),
    db: AsyncSession = Depends(get_db_session),
):
    return await ticket_service.customer_history(db, email)


@router.get("/{ticket_id}", response_model=TicketRead)
async def get_ticket(
    ticket_id: uuid.UUID,
    session: AuthSession = Depends(require_role),
    db: AsyncSession = Depends(get_db_session),
):
    return await ticket_service.get_ticket(db, session, ticket_id)


@router.patch("/{ticket_id}", response_model=TicketRead)
async def update_ticket(
    ticket_id: uuid.UUID,
    data: TicketUpdate,
    session: AuthSession = Depends(require_role),
    db: AsyncSession = Depends(get_db_session),
):
    return await ticket_service.update_ticket(db, session, ticket_id, data)


@router.post("/{ticket_id}/rating", response_model=TicketRead)
async def rate_ticket(
    ticket_id: uuid.UUID,
    data: RatingCreate,
    session: AuthSession = Depends(require_role),
    db: AsyncSession = Depends(get_db_session),
):
    """
    Rate a resolved ticket. Each ticket can be rated once.
    """
    return await ticket_service.rate_ticket(db, session, ticket_id, data)
