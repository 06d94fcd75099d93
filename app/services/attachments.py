"""Links uploaded files to tickets."""

from fastapi import HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.ticket import Ticket
from app.schemas.ticket import Attachment
from app.services import storage
from app.utils.file_validator import read_attachment, validate_attachment_batch
from app.utils.logging_config import logger


async def store_files(files: list[UploadFile]) -> list[Attachment]:
    """
    Validates every file, then uploads them one after another.

    Nothing is uploaded unless the whole batch passes validation. If an upload
    fails part-way, the objects already stored for this batch are removed
    before the error propagates.
    """
    validate_attachment_batch(files)
    contents = [await read_attachment(file) for file in files]

    attachments: list[Attachment] = []
    try:
        for file, content in zip(files, contents):
            attachments.append(
                await storage.upload_attachment(
                    content, file.filename or "file", file.content_type
                )
            )
    except Exception:
        logger.warning(f"Upload failed, removing {len(attachments)} stored file(s)")
        for attachment in attachments:
            try:
                await storage.remove_attachment(attachment)
            except HTTPException as e:
                logger.error(f"Could not remove orphaned attachment {attachment.id}: {e.detail}")
        raise
    return attachments


async def attach_files(
    db: AsyncSession, ticket: Ticket, files: list[UploadFile]
) -> Ticket:
    attachments = await store_files(files)
    ticket.attachments = list(ticket.attachments or []) + [
        a.model_dump(mode="json") for a in attachments
    ]
    await db.commit()
    logger.info(f"Attached {len(attachments)} file(s) to ticket {ticket.id}")
    return ticket


async def detach_file(db: AsyncSession, ticket: Ticket, attachment_id: str) -> Ticket:
    """
    Removes the stored object first, then the reference on the ticket.
    """
    current = list(ticket.attachments or [])
    match = next((a for a in current if a.get("id") == attachment_id), None)
    if match is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Attachment not found")

    await storage.remove_attachment(Attachment.model_validate(match))
    ticket.attachments = [a for a in current if a.get("id") != attachment_id]
    await db.commit()
    logger.info(f"Removed attachment {attachment_id} from ticket {ticket.id}")
    return ticket
