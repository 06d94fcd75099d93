"""Pydantic schemas for ticket operations."""

import uuid
from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, Field, model_validator

from app.models.ticket import TicketPriority, TicketStatus

CustomField = Union[str, int, float, bool, None]

NOT_NULL_UPDATE_FIELDS = ("title", "description", "status", "priority", "tags", "custom_fields")


class Attachment(BaseModel):
    """Descriptor of a file stored in the attachments bucket."""

    id: str = Field(..., description="Identifier of the stored object.")
    filename: str = Field(..., description="Original file name.")
    filesize: int = Field(..., ge=0, description="Size in bytes.")
    content_type: str
    created_at: datetime
    url: str = Field(..., description="Public URL of the stored object.")


class TicketCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    priority: TicketPriority = TicketPriority.MEDIUM
    tags: list[str] = Field(default_factory=list)
    internal_notes: Optional[str] = None
    custom_fields: dict[str, CustomField] = Field(default_factory=dict)
    attachments: list[Attachment] = Field(default_factory=list)
    customer_email: Optional[str] = Field(
        default=None,
        description="Only honoured for staff submissions on behalf of a customer.",
    )


class TicketUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    tags: Optional[list[str]] = None
    internal_notes: Optional[str] = None
    custom_fields: Optional[dict[str, CustomField]] = None
    assignee_id: Optional[uuid.UUID] = None

    @model_validator(mode="after")
    def check_required_not_null(self):
        # Omitted fields stay unchanged; only internal_notes and assignee_id clear.
        cleared = [
            name
            for name in NOT_NULL_UPDATE_FIELDS
            if name in self.model_fields_set and getattr(self, name) is None
        ]
        if cleared:
            raise ValueError(f"Fields cannot be null: {', '.join(cleared)}")
        return self


class TicketRead(BaseModel):
    id: uuid.UUID
    title: str
    description: str
    status: TicketStatus
    priority: TicketPriority
    customer_email: str
    tags: list[str]
    internal_notes: Optional[str] = None
    custom_fields: dict[str, CustomField]
    attachments: list[Attachment]
    assignee_id: Optional[uuid.UUID] = None
    rating: Optional[int] = None
    rating_comment: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    resolved_at: Optional[datetime] = None
    rated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TicketFilters(BaseModel):
    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    q: Optional[str] = Field(default=None, description="Free-text search.")

    @property
    def active_count(self) -> int:
        return sum(1 for value in (self.status, self.priority, self.q) if value)


class BulkUpdateRequest(BaseModel):
    ticket_ids: list[uuid.UUID] = Field(..., min_length=1)
    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None

    @model_validator(mode="after")
    def check_single_target(self):
        if (self.status is None) == (self.priority is None):
            raise ValueError("Provide exactly one of 'status' or 'priority'.")
        return self


class BulkUpdateResult(BaseModel):
    updated: int


class RatingCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None


class CustomerHistory(BaseModel):
    customer_email: str
    total: int
    open: int
    average_rating: Optional[float] = None
    tickets: list[TicketRead]
