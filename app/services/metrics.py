"""Dashboard and performance figures computed over the visible tickets."""

from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import AuthSession
from app.models.ticket import Ticket, TicketStatus
from app.schemas.metrics import (
    AgeDistribution,
    Dashboard,
    DashboardStats,
    PerformanceMetrics,
    PriorityDistribution,
    StatusDistribution,
)
from app.schemas.ticket import TicketFilters, TicketRead
from app.services.tickets import list_tickets

RECENT_TICKETS = 5
DAY = timedelta(days=1)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def dashboard_stats(tickets: Sequence[Ticket]) -> DashboardStats:
    stats = DashboardStats(total=len(tickets))
    for ticket in tickets:
        if ticket.status == TicketStatus.OPEN:
            stats.open += 1
        elif ticket.status == TicketStatus.IN_PROGRESS:
            stats.in_progress += 1
        elif ticket.status == TicketStatus.RESOLVED:
            stats.resolved += 1
    return stats


async def dashboard(db: AsyncSession, session: AuthSession) -> Dashboard:
    tickets = await list_tickets(db, session, TicketFilters())
    return Dashboard(
        stats=dashboard_stats(tickets),
        recent_tickets=[TicketRead.model_validate(t) for t in tickets[:RECENT_TICKETS]],
    )


def performance_metrics(
    tickets: Sequence[Ticket], now: Optional[datetime] = None
) -> PerformanceMetrics:
    """
    Computes totals, average resolution time in days, and the status,
    priority and age distributions.
    """
    now = now or datetime.now(timezone.utc)
    statuses = StatusDistribution()
    priorities = PriorityDistribution()
    ages = AgeDistribution()
    resolution_total = timedelta(0)
    resolved_count = 0

    for ticket in tickets:
        setattr(statuses, ticket.status.value, getattr(statuses, ticket.status.value) + 1)
        setattr(
            priorities, ticket.priority.value, getattr(priorities, ticket.priority.value) + 1
        )

        created_at = _as_utc(ticket.created_at)
        if ticket.resolved_at:
            resolution_total += _as_utc(ticket.resolved_at) - created_at
            resolved_count += 1

        age = now - created_at
        if age < DAY:
            ages.less_than_day += 1
        elif age < 7 * DAY:
            ages.less_than_week += 1
        elif age < 30 * DAY:
            ages.less_than_month += 1
        else:
            ages.over_month += 1

    avg_days = resolution_total / resolved_count / DAY if resolved_count else 0.0
    return PerformanceMetrics(
        total_tickets=len(tickets),
        avg_resolution_days=round(avg_days, 2),
        status_distribution=statuses,
        priority_distribution=priorities,
        age_distribution=ages,
    )


async def performance(db: AsyncSession) -> PerformanceMetrics:
    tickets = (await db.scalars(select(Ticket))).all()
    return performance_metrics(tickets)
