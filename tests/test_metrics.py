from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from app.models import TicketPriority, TicketStatus
from app.services.metrics import performance_metrics

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _ticket(status, priority, age, resolved_after=None):
    created_at = NOW - age
    return SimpleNamespace(
        status=status,
        priority=priority,
        created_at=created_at,
        resolved_at=created_at + resolved_after if resolved_after else None,
    )


def test_performance_metrics():
    tickets = [
        _ticket(TicketStatus.OPEN, TicketPriority.HIGH, timedelta(hours=2)),
        _ticket(TicketStatus.IN_PROGRESS, TicketPriority.LOW, timedelta(days=3)),
        _ticket(TicketStatus.RESOLVED, TicketPriority.HIGH, timedelta(days=10), timedelta(days=1)),
        _ticket(TicketStatus.RESOLVED, TicketPriority.URGENT, timedelta(days=40), timedelta(days=3)),
    ]

    metrics = performance_metrics(tickets, now=NOW)

    assert metrics.total_tickets == 4
    assert metrics.avg_resolution_days == 2.0
    assert metrics.status_distribution.model_dump() == {
        "open": 1,
        "in_progress": 1,
        "resolved": 2,
        "closed": 0,
    }
    assert metrics.priority_distribution.high == 2
    assert metrics.priority_distribution.medium == 0
    assert metrics.age_distribution.model_dump() == {
        "less_than_day": 1,
        "less_than_week": 1,
        "less_than_month": 1,
        "over_month": 1,
    }


def test_performance_metrics_handles_naive_timestamps():
    ticket = _ticket(TicketStatus.RESOLVED, TicketPriority.LOW, timedelta(days=2), timedelta(hours=12))
    ticket.created_at = ticket.created_at.replace(tzinfo=None)
    ticket.resolved_at = ticket.resolved_at.replace(tzinfo=None)

    metrics = performance_metrics([ticket], now=NOW)

    assert metrics.avg_resolution_days == 0.5
    assert metrics.age_distribution.less_than_week == 1


def test_performance_metrics_empty():
    metrics = performance_metrics([], now=NOW)
    assert metrics.total_tickets == 0
    assert metrics.avg_resolution_days == 0.0


@pytest.mark.asyncio
async def test_dashboard_is_scoped_to_caller(client, staff, customer, other_customer, make_ticket):
    for i in range(6):
        await make_ticket(customer, title=f"alice {i}")
    await make_ticket(other_customer, title="bob")

    mine = await client.get("/api/v1/metrics/dashboard", headers=customer.headers)
    body = mine.json()
    assert body["stats"] == {"total": 6, "open": 6, "in_progress": 0, "resolved": 0}
    assert [t["title"] for t in body["recent_tickets"]] == [f"alice {i}" for i in range(5, 0, -1)]

    everyone = await client.get("/api/v1/metrics/dashboard", headers=staff.headers)
    assert everyone.json()["stats"]["total"] == 7


@pytest.mark.asyncio
async def test_performance_requires_staff(client, staff, customer, make_ticket):
    await make_ticket(customer)

    assert (await client.get("/api/v1/metrics/performance", headers=customer.headers)).status_code == 403

    response = await client.get("/api/v1/metrics/performance", headers=staff.headers)
    assert response.json()["total_tickets"] == 1
    assert response.json()["status_distribution"]["open"] == 1
