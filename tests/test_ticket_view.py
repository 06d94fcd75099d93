import asyncio
import uuid
from types import SimpleNamespace

import pytest

from app.models import TicketPriority, TicketStatus
from app.services.ticket_view import TicketListView


def _tickets(*names):
    return [SimpleNamespace(id=uuid.uuid4(), title=name) for name in names]


class RecordingLoader:
    def __init__(self, result=None):
        self.calls = []
        self.result = result if result is not None else _tickets("a", "b")

    async def __call__(self, filters):
        self.calls.append(filters)
        return self.result


@pytest.mark.asyncio
async def test_rapid_filter_changes_load_once():
    loader = RecordingLoader()
    view = TicketListView(loader, debounce=0.05)

    view.set_filters(q="b")
    view.set_filters(q="bi")
    view.set_filters(q="bil", priority=TicketPriority.HIGH)
    await view.wait_idle()

    assert len(loader.calls) == 1
    assert loader.calls[0].q == "bil"
    assert loader.calls[0].priority == TicketPriority.HIGH
    assert view.active_filters == 2
    assert [t.title for t in view.tickets] == ["a", "b"]


@pytest.mark.asyncio
async def test_clear_filters():
    view = TicketListView(RecordingLoader(), debounce=0)
    view.set_filters(status=TicketStatus.OPEN, q="x")
    view.clear_filters()
    await view.wait_idle()

    assert view.active_filters == 0


@pytest.mark.asyncio
async def test_stale_result_is_dropped():
    slow_started = asyncio.Event()
    release_slow = asyncio.Event()

    async def loader(filters):
        if filters.q == "slow":
            slow_started.set()
            await release_slow.wait()
            return _tickets("stale")
        return _tickets("fresh")

    view = TicketListView(loader, debounce=0)
    view.filters = view.filters.model_copy(update={"q": "slow"})
    slow = asyncio.create_task(view.reload())
    await slow_started.wait()

    view.filters = view.filters.model_copy(update={"q": "fast"})
    await view.reload()
    release_slow.set()
    await slow

    assert [t.title for t in view.tickets] == ["fresh"]


@pytest.mark.asyncio
async def test_load_error_keeps_previous_list():
    view = TicketListView(RecordingLoader(_tickets("kept")), debounce=0)
    await view.reload()

    async def failing(filters):
        raise RuntimeError("network down")

    view._loader = failing
    await view.reload()

    assert view.error == "Error fetching tickets"
    assert [t.title for t in view.tickets] == ["kept"]


@pytest.mark.asyncio
async def test_toggle_all():
    view = TicketListView(RecordingLoader(), debounce=0)
    await view.reload()

    view.toggle_all()
    assert len(view.selected) == 2

    view.toggle(view.selected[0])
    assert len(view.selected) == 1

    view.toggle_all()
    assert len(view.selected) == 2

    view.toggle_all()
    assert view.selected == []


@pytest.mark.asyncio
async def test_bulk_success_clears_selection_and_refreshes():
    requests = []

    async def updater(request):
        requests.append(request)
        return len(request.ticket_ids)

    loader = RecordingLoader()
    view = TicketListView(loader, bulk_updater=updater, debounce=0)
    await view.reload()
    view.toggle_all()

    assert await view.bulk_set_status(TicketStatus.RESOLVED) is True

    assert requests[0].status == TicketStatus.RESOLVED
    assert len(requests[0].ticket_ids) == 2
    assert view.selected == []
    assert view.refresh_key == 1
    assert len(loader.calls) == 2
    assert view.bulk_in_progress is False


@pytest.mark.asyncio
async def test_bulk_failure_keeps_selection():
    async def updater(request):
        raise RuntimeError("500")

    view = TicketListView(RecordingLoader(), bulk_updater=updater, debounce=0)
    await view.reload()
    view.toggle_all()

    assert await view.bulk_set_priority(TicketPriority.LOW) is False
    assert len(view.selected) == 2
    assert view.error == "Error updating tickets"
    assert view.refresh_key == 0


@pytest.mark.asyncio
async def test_concurrent_bulk_action_is_ignored():
    release = asyncio.Event()
    calls = []

    async def updater(request):
        calls.append(request)
        await release.wait()
        return 1

    view = TicketListView(RecordingLoader(), bulk_updater=updater, debounce=0)
    await view.reload()
    view.toggle_all()

    first = asyncio.create_task(view.bulk_set_status(TicketStatus.IN_PROGRESS))
    await asyncio.sleep(0)
    assert view.bulk_in_progress is True
    assert await view.bulk_set_priority(TicketPriority.HIGH) is False

    release.set()
    assert await first is True
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_bulk_without_selection_does_nothing():
    async def updater(request):
        raise AssertionError("should not be called")

    view = TicketListView(RecordingLoader(), bulk_updater=updater, debounce=0)
    assert await view.bulk_set_status(TicketStatus.OPEN) is False
