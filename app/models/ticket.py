"""Ticket model for tracking support requests."""

import enum
import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import CheckConstraint, DateTime
from sqlalchemy import Enum as EnumType
from sqlalchemy import Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel, JSONType


class TicketStatus(enum.Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    # Defined for parity with the stored data; no control moves a ticket here.
    CLOSED = "closed"


class TicketPriority(enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class Ticket(BaseModel):
    __tablename__ = "tickets"
    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_tickets_rating_range"),
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(
        Text, nullable=False, default="", comment="HTML body of the request."
    )
    status: Mapped[TicketStatus] = mapped_column(
        EnumType(
            TicketStatus,
            name="ticket_status",
            native_enum=False,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=TicketStatus.OPEN,
        index=True,
    )
    priority: Mapped[TicketPriority] = mapped_column(
        EnumType(
            TicketPriority,
            name="ticket_priority",
            native_enum=False,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=TicketPriority.MEDIUM,
        index=True,
    )
    customer_email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Email of the customer who owns the ticket.",
    )
    tags: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    internal_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    custom_fields: Mapped[dict[str, Any]] = mapped_column(
        JSONType, nullable=False, default=dict
    )
    attachments: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONType,
        nullable=False,
        default=list,
        comment="Attachment descriptors; the files live in object storage.",
    )
    assignee_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True), nullable=True
    )
    resolved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    rating_comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    rated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return f"<Ticket(id={self.id}, status='{self.status.value}')>"
