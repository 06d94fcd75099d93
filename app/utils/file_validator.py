"""File validation utilities."""

from fastapi import HTTPException, UploadFile, status

from app.settings import settings

ALLOWED_CONTENT_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
}
CHUNK_SIZE = 4096


def validate_attachment_batch(files: list[UploadFile]) -> None:
    """
    Checks the number of files in one upload.

    Raises:
        HTTPException: If no file or more than MAX_ATTACHMENT_FILES were sent.
    """
    if not files:
        raise HTTPException(status.HTTP_422_UNPROCESSABLE_ENTITY, "No files provided.")
    if len(files) > settings.MAX_ATTACHMENT_FILES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Maximum {settings.MAX_ATTACHMENT_FILES} files allowed.",
        )


async def read_attachment(file: UploadFile) -> bytes:
    """
    Validates the content type of an uploaded file and reads it, enforcing the
    size limit while streaming.

    Args:
        file: The file uploaded via a FastAPI endpoint.

    Returns:
        bytes: The file content.

    Raises:
        HTTPException: If the type is not accepted or the file is too large.
    """
    content_type = file.content_type or ""
    if not (content_type.startswith("image/") or content_type in ALLOWED_CONTENT_TYPES):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid file type '{content_type}'. Images, PDF, Word and text files are accepted.",
        )

    chunks = []
    total_size = 0
    while chunk := await file.read(CHUNK_SIZE):
        total_size += len(chunk)
        if total_size > settings.MAX_ATTACHMENT_SIZE:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"Files must be smaller than {settings.MAX_ATTACHMENT_SIZE_MB}MB.",
            )
        chunks.append(chunk)
    return b"".join(chunks)
