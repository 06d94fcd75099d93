"""
AI drafting and customer email endpoints.

Errors from the model or the email provider are reported as
`400 {"error": message}` and never retried.
"""

import uuid

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import AuthSession, require_staff
from app.config.db import get_db_session
from app.schemas.ai import (
    GenerateResponseRequest,
    GenerateResponseResult,
    SendEmailRequest,
    SendEmailResult,
)
from app.services import ai_draft
from app.services.email import send_ticket_email
from app.services.tickets import get_ticket
from app.utils.logging_config import logger

router = APIRouter()


def _error(message: str) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


@router.post("/ai/generate-response", response_model=GenerateResponseResult)
async def generate_response(
    request: GenerateResponseRequest,
    _: AuthSession = Depends(require_staff),
):
    """
    Draft a reply for review. The draft is returned, not saved.
    """
    try:
        draft = await ai_draft.generate_draft(request)
    except Exception as e:
        logger.error(f"Failed to generate response: {e}", exc_info=True)
        return _error(f"Failed to generate response: {e}")
    return GenerateResponseResult(generated_response=draft)


@router.post("/tickets/{ticket_id}/draft", response_model=GenerateResponseResult)
async def draft_for_ticket(
    ticket_id: uuid.UUID,
    session: AuthSession = Depends(require_staff),
    db: AsyncSession = Depends(get_db_session),
):
    """
    Draft a reply for a stored ticket using the customer's other tickets as
    context.
    """
    ticket = await get_ticket(db, session, ticket_id)
    request = await ai_draft.build_draft_request(db, ticket)
    try:
        draft = await ai_draft.generate_draft(request)
    except Exception as e:
        logger.error(f"Failed to generate response for ticket {ticket_id}: {e}", exc_info=True)
        return _error(f"Failed to generate response: {e}")
    return GenerateResponseResult(generated_response=draft)


@router.post("/ai/send-email", response_model=SendEmailResult)
async def send_email(
    request: SendEmailRequest,
    _: AuthSession = Depends(require_staff),
):
    """
    Email a reviewed reply to the customer.
    """
    try:
        message_id = await send_ticket_email(request)
    except Exception as e:
        logger.error(f"Failed to send email for ticket {request.ticket_id}: {e}", exc_info=True)
        return _error(str(e) or "Failed to send email")
    return SendEmailResult(success=True, message_id=message_id)
