"""Service for storing ticket attachments in Supabase Storage."""

import uuid
from datetime import datetime, timezone
from typing import Optional

from fastapi import HTTPException, status
from supabase import StorageException

from app.config.supabase import supabase_admin
from app.schemas.ticket import Attachment
from app.settings import settings
from app.utils.logging_config import logger

ATTACHMENTS_PREFIX = "attachments"


def storage_path_for(file_id: str, filename: str) -> str:
    """Builds `attachments/<uuid>.<ext>`; files without an extension get none."""
    ext = filename.rsplit(".", 1)[-1] if "." in filename else ""
    return f"{ATTACHMENTS_PREFIX}/{file_id}.{ext}" if ext else f"{ATTACHMENTS_PREFIX}/{file_id}"


def public_url_for(storage_path: str) -> str:
    return (
        f"{settings.SUPABASE_URL.rstrip('/')}/storage/v1/object/public/"
        f"{settings.ATTACHMENTS_BUCKET}/{storage_path}"
    )


def storage_path_from_url(url: str) -> str:
    """Recovers the object path from a public attachment URL."""
    name = url.rstrip("/").rsplit("/", 1)[-1]
    if not name:
        raise ValueError(f"Invalid attachment URL: {url}")
    return f"{ATTACHMENTS_PREFIX}/{name}"


async def upload_attachment(
    content: bytes, filename: str, content_type: Optional[str]
) -> Attachment:
    """
    Uploads one file to the attachments bucket and returns its descriptor.
    """
    file_id = str(uuid.uuid4())
    storage_path = storage_path_for(file_id, filename)
    supabase_client = await supabase_admin()
    try:
        await supabase_client.storage.from_(settings.ATTACHMENTS_BUCKET).upload(
            path=storage_path,
            file=content,
            file_options={"content-type": content_type or "application/octet-stream"},
        )
        logger.info(f"File uploaded to storage at path: {storage_path}")
    except StorageException as exc:
        logger.error(f"Failed to upload file to storage: {exc}", exc_info=True)
        raise HTTPException(
            status.HTTP_502_BAD_GATEWAY, "Error uploading files"
        ) from exc

    return Attachment(
        id=file_id,
        filename=filename,
        filesize=len(content),
        content_type=content_type or "application/octet-stream",
        created_at=datetime.now(timezone.utc),
        url=public_url_for(storage_path),
    )


async def remove_attachment(attachment: Attachment) -> None:
    """
    Deletes the stored object behind an attachment.
    """
    storage_path = storage_path_from_url(attachment.url)
    supabase_client = await supabase_admin()
    try:
        await supabase_client.storage.from_(settings.ATTACHMENTS_BUCKET).remove(
            [storage_path]
        )
        logger.info(f"Removed attachment from storage: {storage_path}")
    except StorageException as exc:
        logger.error(f"Failed to remove attachment: {exc}", exc_info=True)
        raise HTTPException(
            status.HTTP_502_BAD_GATEWAY, "Error removing attachment"
        ) from exc
