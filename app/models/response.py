"""Response model for a ticket's conversation thread."""

import enum
import uuid

from sqlalchemy import Enum as EnumType
from sqlalchemy import ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel


class ResponseType(enum.Enum):
    MANUAL = "manual"
    AI_GENERATED = "ai_generated"
    SYSTEM = "system"


class TicketResponse(BaseModel):
    __tablename__ = "ticket_responses"

    ticket_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
    author_email: Mapped[str] = mapped_column(String(255), nullable=False)
    response_type: Mapped[ResponseType] = mapped_column(
        EnumType(
            ResponseType,
            name="response_type",
            native_enum=False,
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
        default=ResponseType.MANUAL,
    )

    def __repr__(self) -> str:
        return f"<TicketResponse(id={self.id}, ticket_id={self.ticket_id}, type='{self.response_type.value}')>"
