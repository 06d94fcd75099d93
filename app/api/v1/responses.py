import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import AuthSession, require_role
from app.config.db import get_db_session
from app.schemas.response import ResponseCreate, ResponseThread
from app.services import responses as response_service
from app.services.tickets import get_ticket

router = APIRouter()


@router.get("/{ticket_id}/responses", response_model=ResponseThread)
async def list_responses(
    ticket_id: uuid.UUID,
    session: AuthSession = Depends(require_role),
    db: AsyncSession = Depends(get_db_session),
):
    """
    Retrieve a ticket's conversation, oldest first.
    """
    ticket = await get_ticket(db, session, ticket_id)
    return ResponseThread(responses=await response_service.list_responses(db, ticket))


@router.post(
    "/{ticket_id}/responses",
    response_model=ResponseThread,
    status_code=status.HTTP_201_CREATED,
)
async def add_response(
    ticket_id: uuid.UUID,
    data: ResponseCreate,
    session: AuthSession = Depends(require_role),
    db: AsyncSession = Depends(get_db_session),
):
    """
    Append a response and return the reloaded conversation.
    """
    ticket = await get_ticket(db, session, ticket_id)
    responses = await response_service.add_response(db, session, ticket, data)
    return ResponseThread(responses=responses)
