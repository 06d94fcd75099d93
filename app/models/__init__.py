"""Exports all models for easy access."""

from .base import Base, BaseModel
from .response import ResponseType, TicketResponse
from .team import Team
from .ticket import Ticket, TicketPriority, TicketStatus
from .user import Role, UserRole

__all__ = [
    "Base",
    "BaseModel",
    "Team",
    "UserRole",
    "Role",
    "Ticket",
    "TicketStatus",
    "TicketPriority",
    "TicketResponse",
    "ResponseType",
]
