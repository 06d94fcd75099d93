"""API endpoints for ticket attachments."""

import uuid

from fastapi import APIRouter, Depends, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import AuthSession, require_role
from app.config.db import get_db_session
from app.schemas.ticket import Attachment, TicketRead
from app.services import attachments as attachment_service
from app.services.tickets import get_ticket

router = APIRouter()


@router.post(
    "/attachments",
    status_code=status.HTTP_201_CREATED,
    response_model=list[Attachment],
    summary="Upload files before the ticket exists",
    description="Stores the files and returns descriptors to send along with a new ticket.",
)
async def upload_files(
    files: list[UploadFile],
    _: AuthSession = Depends(require_role),
) -> list[Attachment]:
    return await attachment_service.store_files(files)


@router.post(
    "/tickets/{ticket_id}/attachments",
    status_code=status.HTTP_201_CREATED,
    response_model=TicketRead,
    summary="Upload files to an existing ticket",
)
async def attach_files(
    ticket_id: uuid.UUID,
    files: list[UploadFile],
    session: AuthSession = Depends(require_role),
    db: AsyncSession = Depends(get_db_session),
):
    ticket = await get_ticket(db, session, ticket_id)
    return await attachment_service.attach_files(db, ticket, files)


@router.delete("/tickets/{ticket_id}/attachments/{attachment_id}", response_model=TicketRead)
async def remove_attachment(
    ticket_id: uuid.UUID,
    attachment_id: str,
    session: AuthSession = Depends(require_role),
    db: AsyncSession = Depends(get_db_session),
):
    """
    Delete the stored file and its reference on the ticket.
    """
    ticket = await get_ticket(db, session, ticket_id)
    return await attachment_service.detach_file(db, ticket, attachment_id)
