"""Request and response bodies of the AI drafting and email endpoints.

Field names follow the camelCase wire format the front end already sends.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TicketSummary(BaseModel):
    title: str
    description: str = ""
    status: str
    priority: str


class HistoryEntry(BaseModel):
    title: str
    status: str


class GenerateResponseRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ticket: TicketSummary
    customer_history: list[HistoryEntry] = Field(
        default_factory=list, alias="customerHistory"
    )
    average_rating: float = Field(default=4.5, alias="averageRating")


class GenerateResponseResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    generated_response: str = Field(..., alias="generatedResponse")


class SendEmailRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    to: str
    subject: str
    content: str
    ticket_id: str = Field(..., alias="ticketId")
    customer_name: Optional[str] = Field(default=None, alias="customerName")


class SendEmailResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message_id: Optional[str] = Field(default=None, alias="messageId")
