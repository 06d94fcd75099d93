"""
Client-side state for a ticket list: filters, debounced reloads, selection and
bulk actions.

The view does not talk to the database itself. It is given a loader (for
example a call to `GET /api/v1/tickets`) and, for staff, a bulk updater.
"""

import asyncio
import uuid
from typing import Awaitable, Callable, Generic, Optional, Protocol, TypeVar

from app.models.ticket import TicketPriority, TicketStatus
from app.schemas.ticket import BulkUpdateRequest, TicketFilters
from app.settings import settings
from app.utils.logging_config import logger


class HasId(Protocol):
    id: uuid.UUID


T = TypeVar("T", bound=HasId)

Loader = Callable[[TicketFilters], Awaitable[list[T]]]
BulkUpdater = Callable[[BulkUpdateRequest], Awaitable[int]]

_UNSET = object()


class TicketListView(Generic[T]):
    def __init__(
        self,
        loader: Loader,
        bulk_updater: Optional[BulkUpdater] = None,
        debounce: Optional[float] = None,
    ):
        self._loader = loader
        self._bulk_updater = bulk_updater
        self._debounce = settings.SEARCH_DEBOUNCE_SECONDS if debounce is None else debounce

        self.filters = TicketFilters()
        self.tickets: list[T] = []
        self.selected: list[uuid.UUID] = []
        self.error: Optional[str] = None
        self.bulk_in_progress = False
        self.refresh_key = 0

        self._generation = 0
        self._pending: Optional[asyncio.Task] = None

    # Filters

    def set_filters(self, status=_UNSET, priority=_UNSET, q=_UNSET) -> None:
        """
        Changes any of the filters and schedules a reload after the debounce
        delay. A later change within the delay replaces the scheduled reload.
        """
        changes = {}
        if status is not _UNSET:
            changes["status"] = status
        if priority is not _UNSET:
            changes["priority"] = priority
        if q is not _UNSET:
            changes["q"] = q or None
        self.filters = self.filters.model_copy(update=changes)
        self._schedule_reload()

    def clear_filters(self) -> None:
        self.set_filters(status=None, priority=None, q=None)

    @property
    def active_filters(self) -> int:
        return self.filters.active_count

    def _schedule_reload(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = asyncio.create_task(self._reload_later())

    async def _reload_later(self) -> None:
        await asyncio.sleep(self._debounce)
        await self.reload()

    # Loading

    async def refresh(self) -> None:
        """Bumps the refresh counter and reloads immediately."""
        self.refresh_key += 1
        await self.reload()

    async def reload(self) -> None:
        """
        Loads the list for the current filters. If another load starts before
        this one finishes, this result is dropped.
        """
        self._generation += 1
        generation = self._generation
        filters = self.filters.model_copy()
        try:
            tickets = await self._loader(filters)
        except Exception as e:
            if generation == self._generation:
                logger.error(f"Error fetching tickets: {e}")
                self.error = "Error fetching tickets"
            return

        if generation != self._generation:
            logger.debug(f"Dropping stale ticket list (load {generation})")
            return
        self.tickets = list(tickets)
        self.error = None

    async def wait_idle(self) -> None:
        """Waits for a scheduled reload, if any, to finish."""
        pending = self._pending
        if pending is not None:
            try:
                await pending
            except asyncio.CancelledError:
                pass

    async def close(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        await self.wait_idle()

    # Selection

    def toggle(self, ticket_id: uuid.UUID) -> None:
        if ticket_id in self.selected:
            self.selected.remove(ticket_id)
        else:
            self.selected.append(ticket_id)

    def toggle_all(self) -> None:
        """Selects every listed ticket, or clears the selection if all are selected."""
        if len(self.selected) == len(self.tickets):
            self.selected = []
        else:
            self.selected = [ticket.id for ticket in self.tickets]

    # Bulk actions

    async def bulk_set_status(self, status: TicketStatus) -> bool:
        return await self._bulk(status=status)

    async def bulk_set_priority(self, priority: TicketPriority) -> bool:
        return await self._bulk(priority=priority)

    async def _bulk(self, **target) -> bool:
        """
        Applies the change to the selection. On success the selection is
        cleared and the list reloaded; on failure both are left as they were.
        Returns False without doing anything if nothing is selected or another
        bulk action is still running.
        """
        if self._bulk_updater is None:
            raise RuntimeError("This view has no bulk updater")
        if not self.selected or self.bulk_in_progress:
            return False

        self.bulk_in_progress = True
        try:
            await self._bulk_updater(
                BulkUpdateRequest(ticket_ids=list(self.selected), **target)
            )
        except Exception as e:
            logger.error(f"Error updating tickets: {e}")
            self.error = "Error updating tickets"
            return False
        finally:
            self.bulk_in_progress = False

        self.selected = []
        await self.refresh()
        return True
