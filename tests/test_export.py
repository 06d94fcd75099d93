import csv
import io
from datetime import datetime, timezone

import pytest

from app.services.tickets import CSV_HEADERS, export_filename


def test_export_filename():
    assert export_filename(datetime(2026, 2, 3, 23, 59, tzinfo=timezone.utc)) == "tickets-2026-02-03.csv"


@pytest.mark.asyncio
async def test_export_matches_filtered_list(client, staff, customer, make_ticket):
    await make_ticket(
        customer,
        title='Says "hello", then crashes',
        description="<p>Steps:</p><ul><li>open</li></ul>",
        tags=["crash", "desktop"],
        priority="urgent",
    )
    await make_ticket(customer, title="Other", priority="low")

    response = await client.get(
        "/api/v1/tickets/export.csv", params={"priority": "urgent"}, headers=staff.headers
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="tickets-' in response.headers["content-disposition"]

    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0] == CSV_HEADERS
    assert len(rows) == 2
    row = dict(zip(CSV_HEADERS, rows[1]))
    assert row["Title"] == 'Says "hello", then crashes'
    assert row["Status"] == "open"
    assert row["Priority"] == "urgent"
    assert row["Customer"] == customer.email
    assert row["Resolved"] == ""
    assert row["Description"] == "Steps:open"
    assert row["Tags"] == "crash, desktop"


@pytest.mark.asyncio
async def test_customer_export_only_has_own_tickets(client, customer, other_customer, make_ticket):
    await make_ticket(customer, title="mine")
    await make_ticket(other_customer, title="theirs")

    response = await client.get("/api/v1/tickets/export.csv", headers=customer.headers)

    rows = list(csv.reader(io.StringIO(response.text)))
    assert [r[1] for r in rows[1:]] == ["mine"]


@pytest.mark.asyncio
async def test_formula_cells_are_neutralised(client, staff, customer, make_ticket):
    await make_ticket(customer, title="=HYPERLINK(\"http://evil\")", tags=["@ops"])

    response = await client.get("/api/v1/tickets/export.csv", headers=staff.headers)

    row = dict(zip(CSV_HEADERS, list(csv.reader(io.StringIO(response.text)))[1]))
    assert row["Title"] == "'=HYPERLINK(\"http://evil\")"
    assert row["Tags"] == "'@ops"
