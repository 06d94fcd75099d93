"""Drafts support replies with a chat model. Drafts are never stored here."""

from functools import lru_cache

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.prompts import ChatPromptTemplate
from langchain_google_genai import ChatGoogleGenerativeAI
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.ticket import Ticket
from app.schemas.ai import GenerateResponseRequest, HistoryEntry, TicketSummary
from app.services.tickets import average_rating, tickets_for_customer
from app.settings import settings
from app.utils.logging_config import logger

# Used when the customer has no rated tickets yet.
DEFAULT_AVERAGE_RATING = 4.5
MAX_HISTORY_ENTRIES = 10

prompt = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "You are an experienced customer support agent. Write a clear, friendly "
            "and professional reply to the customer's ticket. Format the reply as "
            "HTML using <p>, <ul> and <li> tags only. Do not invent policies, "
            "prices or deadlines. If information is missing, ask for it.",
        ),
        (
            "human",
            "TICKET\n"
            "Title: {title}\n"
            "Status: {status}\n"
            "Priority: {priority}\n"
            "Description:\n{description}\n\n"
            "CUSTOMER HISTORY (previous tickets)\n{history}\n\n"
            "Average satisfaction rating of this customer: {average_rating} / 5",
        ),
    ]
)


@lru_cache(maxsize=1)
def get_llm() -> BaseChatModel:
    return ChatGoogleGenerativeAI(
        model=settings.LLM_MODEL,
        temperature=settings.LLM_TEMPERATURE,
        max_output_tokens=settings.LLM_MAX_TOKENS,
        google_api_key=settings.GOOGLE_API_KEY,
    )


def _format_history(entries: list[HistoryEntry]) -> str:
    if not entries:
        return "No previous tickets."
    return "\n".join(f"- {entry.title} ({entry.status})" for entry in entries)


def _content_text(content) -> str:
    if isinstance(content, str):
        return content
    # Some providers return a list of content parts.
    return "".join(
        part if isinstance(part, str) else part.get("text", "") for part in content
    )


async def generate_draft(request: GenerateResponseRequest) -> str:
    """
    Sends the ticket summary and customer context to the chat model.

    Args:
        request (GenerateResponseRequest): Ticket summary, prior tickets and the
            customer's average rating.

    Returns:
        str: The model's reply as text/HTML, for a human to review.
    """
    chain = prompt | get_llm()
    response = await chain.ainvoke(
        {
            "title": request.ticket.title,
            "status": request.ticket.status,
            "priority": request.ticket.priority,
            "description": request.ticket.description,
            "history": _format_history(request.customer_history),
            "average_rating": f"{request.average_rating:.1f}",
        }
    )
    draft = _content_text(response.content).strip()
    logger.info(f"Generated draft for ticket '{request.ticket.title}' ({len(draft)} chars)")
    return draft


async def build_draft_request(db: AsyncSession, ticket: Ticket) -> GenerateResponseRequest:
    """
    Collects the context for a stored ticket: its summary, the customer's
    other tickets and their average rating.
    """
    previous = [
        t for t in await tickets_for_customer(db, ticket.customer_email) if t.id != ticket.id
    ]
    rating = average_rating(previous)
    return GenerateResponseRequest(
        ticket=TicketSummary(
            title=ticket.title,
            description=ticket.description,
            status=ticket.status.value,
            priority=ticket.priority.value,
        ),
        customer_history=[
            HistoryEntry(title=t.title, status=t.status.value)
            for t in previous[:MAX_HISTORY_ENTRIES]
        ],
        average_rating=rating if rating is not None else DEFAULT_AVERAGE_RATING,
    )
