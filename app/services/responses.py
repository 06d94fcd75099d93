"""Service for a ticket's append-only response thread."""

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import AuthSession
from app.models.response import ResponseType, TicketResponse
from app.models.ticket import Ticket
from app.schemas.response import ResponseCreate
from app.utils.html import html_to_text
from app.utils.logging_config import logger


async def list_responses(db: AsyncSession, ticket: Ticket) -> list[TicketResponse]:
    """
    Returns the ticket's responses in the order they were written.
    """
    result = await db.scalars(
        select(TicketResponse)
        .where(TicketResponse.ticket_id == ticket.id)
        .order_by(TicketResponse.created_at.asc(), TicketResponse.id.asc())
    )
    return list(result.all())


async def add_response(
    db: AsyncSession,
    session: AuthSession,
    ticket: Ticket,
    data: ResponseCreate,
) -> list[TicketResponse]:
    """
    Appends a response authored by the session user and returns the full,
    reloaded thread.
    """
    if not html_to_text(data.content) and "<img" not in data.content:
        raise HTTPException(
            status.HTTP_422_UNPROCESSABLE_ENTITY, "Response content must not be empty."
        )
    if not session.is_staff_or_admin and data.response_type != ResponseType.MANUAL:
        raise HTTPException(
            status.HTTP_403_FORBIDDEN, "Customers can only post manual responses."
        )

    response = TicketResponse(
        ticket_id=ticket.id,
        content=data.content,
        author_id=session.user_id,
        author_email=session.email,
        response_type=data.response_type,
    )
    db.add(response)
    await db.commit()
    logger.info(
        f"Response {response.id} ({data.response_type.value}) added to ticket {ticket.id}"
    )
    return await list_responses(db, ticket)
