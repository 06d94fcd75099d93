"""
Ticket queries and mutations.

Visibility follows the caller's role: customers only ever see tickets filed
under their own email address, staff and admins see everything.
"""

import csv
import io
import uuid
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from fastapi import HTTPException, status
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import AuthSession
from app.models.base import utcnow
from app.models.ticket import Ticket, TicketStatus
from app.schemas.ticket import (
    BulkUpdateRequest,
    CustomerHistory,
    RatingCreate,
    TicketCreate,
    TicketFilters,
    TicketRead,
    TicketUpdate,
)
from app.utils.html import strip_tags
from app.utils.logging_config import logger

# Order a ticket moves through on single edits. CLOSED is deliberately absent.
LIFECYCLE = (TicketStatus.OPEN, TicketStatus.IN_PROGRESS, TicketStatus.RESOLVED)

CUSTOMER_EDITABLE_FIELDS = {"title", "description"}

CSV_HEADERS = [
    "ID",
    "Title",
    "Status",
    "Priority",
    "Customer",
    "Created",
    "Resolved",
    "Description",
    "Tags",
]

CSV_DANGEROUS_PREFIXES = ("=", "+", "-", "@")


def ensure_reachable_status(target: TicketStatus) -> None:
    """Rejects writes to a status no control can reach."""
    if target not in LIFECYCLE:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Status '{target.value}' cannot be set.",
        )


def ensure_forward_transition(current: TicketStatus, target: TicketStatus) -> None:
    ensure_reachable_status(target)
    if current == target:
        return
    if current not in LIFECYCLE or LIFECYCLE.index(target) < LIFECYCLE.index(current):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot move a ticket from '{current.value}' to '{target.value}'.",
        )


def matches_search(ticket: Ticket, query: str) -> bool:
    """Case-insensitive substring match on title, description, email and tags."""
    needle = query.lower()
    return (
        needle in (ticket.title or "").lower()
        or needle in (ticket.description or "").lower()
        or needle in (ticket.customer_email or "").lower()
        or any(needle in tag.lower() for tag in ticket.tags or [])
    )


def _visible(session: AuthSession):
    query = select(Ticket)
    if not session.is_staff_or_admin:
        query = query.where(func.lower(Ticket.customer_email) == session.email.lower())
    return query


async def list_tickets(
    db: AsyncSession, session: AuthSession, filters: TicketFilters
) -> list[Ticket]:
    """
    Returns the caller's visible tickets, newest first, narrowed by the filters.
    """
    query = _visible(session).order_by(Ticket.created_at.desc(), Ticket.id.desc())
    if filters.status is not None:
        query = query.where(Ticket.status == filters.status)
    if filters.priority is not None:
        query = query.where(Ticket.priority == filters.priority)

    tickets = list((await db.scalars(query)).all())
    if filters.q:
        tickets = [ticket for ticket in tickets if matches_search(ticket, filters.q)]
    return tickets


async def get_ticket(
    db: AsyncSession, session: AuthSession, ticket_id: uuid.UUID
) -> Ticket:
    ticket = await db.scalar(_visible(session).where(Ticket.id == ticket_id))
    if ticket is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Ticket not found")
    return ticket


async def create_ticket(
    db: AsyncSession, session: AuthSession, data: TicketCreate
) -> Ticket:
    """
    Files a new ticket. Customers always file as themselves; staff may file on
    behalf of a customer.
    """
    customer_email = session.email.lower()
    if session.is_staff_or_admin and data.customer_email:
        customer_email = data.customer_email.strip().lower()

    ticket = Ticket(
        title=data.title,
        description=data.description,
        status=TicketStatus.OPEN,
        priority=data.priority,
        customer_email=customer_email,
        tags=list(data.tags),
        internal_notes=data.internal_notes or None,
        custom_fields=dict(data.custom_fields),
        attachments=[a.model_dump(mode="json") for a in data.attachments],
    )
    db.add(ticket)
    await db.commit()
    logger.info(f"Ticket {ticket.id} created for {customer_email}")
    return ticket


async def update_ticket(
    db: AsyncSession,
    session: AuthSession,
    ticket_id: uuid.UUID,
    data: TicketUpdate,
) -> Ticket:
    ticket = await get_ticket(db, session, ticket_id)
    changes = data.model_dump(exclude_unset=True)

    if not session.is_staff_or_admin:
        forbidden = set(changes) - CUSTOMER_EDITABLE_FIELDS
        if forbidden:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Customers cannot change: {', '.join(sorted(forbidden))}",
            )

    new_status = changes.pop("status", None)
    if new_status is not None:
        ensure_forward_transition(ticket.status, new_status)
        if new_status == TicketStatus.RESOLVED and ticket.status != TicketStatus.RESOLVED:
            ticket.resolved_at = utcnow()
        ticket.status = new_status

    for field, value in changes.items():
        if field == "internal_notes":
            value = value or None
        setattr(ticket, field, value)

    await db.commit()
    logger.info(f"Ticket {ticket.id} updated by {session.email}")
    return ticket


async def bulk_update(db: AsyncSession, data: BulkUpdateRequest) -> int:
    """
    Applies one status or priority to all selected tickets in a single
    statement, so either every row changes or none does.

    Returns:
        int: Number of rows updated.
    """
    ticket_ids = list(dict.fromkeys(data.ticket_ids))
    now = utcnow()
    values: dict = {"updated_at": now}
    if data.status is not None:
        ensure_reachable_status(data.status)
        values["status"] = data.status
        if data.status == TicketStatus.RESOLVED:
            values["resolved_at"] = func.coalesce(Ticket.resolved_at, now)
        else:
            values["resolved_at"] = None
    else:
        values["priority"] = data.priority

    result = await db.execute(
        update(Ticket)
        .where(Ticket.id.in_(ticket_ids))
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    logger.info(f"Bulk update changed {result.rowcount} of {len(ticket_ids)} tickets")
    return result.rowcount


async def rate_ticket(
    db: AsyncSession,
    session: AuthSession,
    ticket_id: uuid.UUID,
    data: RatingCreate,
) -> Ticket:
    """
    Records the customer's rating. Only a resolved, unrated ticket can be
    rated; rating, comment and timestamp are written by one guarded UPDATE.
    """
    ticket = await get_ticket(db, session, ticket_id)
    if ticket.customer_email.lower() != session.email.lower():
        raise HTTPException(
            status.HTTP_403_FORBIDDEN, "Only the customer who filed the ticket can rate it."
        )

    rated_at = utcnow()
    result = await db.execute(
        update(Ticket)
        .where(
            Ticket.id == ticket_id,
            Ticket.status == TicketStatus.RESOLVED,
            Ticket.rating.is_(None),
        )
        .values(rating=data.rating, rating_comment=data.comment, rated_at=rated_at)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        # Read before rollback expires the instance.
        reason = (
            "Ticket has already been rated."
            if ticket.rating is not None
            else "Only resolved tickets can be rated."
        )
        await db.rollback()
        raise HTTPException(status.HTTP_409_CONFLICT, reason)
    await db.commit()
    await db.refresh(ticket)
    return ticket


def average_rating(tickets: Iterable[Ticket]) -> Optional[float]:
    ratings = [t.rating for t in tickets if t.rating]
    if not ratings:
        return None
    return round(sum(ratings) / len(ratings), 1)


async def tickets_for_customer(db: AsyncSession, email: str) -> list[Ticket]:
    result = await db.scalars(
        select(Ticket)
        .where(func.lower(Ticket.customer_email) == email.lower())
        .order_by(Ticket.created_at.desc(), Ticket.id.desc())
    )
    return list(result.all())


async def customer_history(db: AsyncSession, email: str) -> CustomerHistory:
    tickets = await tickets_for_customer(db, email)
    return CustomerHistory(
        customer_email=email.lower(),
        total=len(tickets),
        open=sum(1 for t in tickets if t.status == TicketStatus.OPEN),
        average_rating=average_rating(tickets),
        tickets=[TicketRead.model_validate(t) for t in tickets],
    )


def _format_date(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.date().isoformat()


def export_filename(today: Optional[datetime] = None) -> str:
    today = today or utcnow()
    return f"tickets-{today.date().isoformat()}.csv"


def _csv_safe(value: str) -> str:
    if value and value.startswith(CSV_DANGEROUS_PREFIXES):
        return f"'{value}"
    return value


def export_csv(tickets: Sequence[Ticket]) -> str:
    """
    Renders tickets as CSV with HTML stripped from descriptions. Cells that a
    spreadsheet would read as a formula are prefixed with a quote.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for ticket in tickets:
        row = [
            str(ticket.id),
            ticket.title,
            ticket.status.value,
            ticket.priority.value,
            ticket.customer_email,
            _format_date(ticket.created_at),
            _format_date(ticket.resolved_at),
            strip_tags(ticket.description),
            ", ".join(ticket.tags or []),
        ]
        writer.writerow([_csv_safe(value) for value in row])
    return buffer.getvalue()
