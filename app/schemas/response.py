import uuid
from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from app.models.response import ResponseType


class ResponseCreate(BaseModel):
    content: str = Field(..., description="HTML body of the response.")
    response_type: ResponseType = ResponseType.MANUAL


class ResponseRead(BaseModel):
    """Pydantic model for serializing TicketResponse rows."""

    id: uuid.UUID
    ticket_id: uuid.UUID
    content: str
    author_id: uuid.UUID
    author_email: str
    response_type: ResponseType
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ResponseThread(BaseModel):
    responses: List[ResponseRead]
