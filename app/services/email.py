"""Sends ticket replies to customers through the Resend API."""

import html
from typing import Optional

import httpx

from app.schemas.ai import SendEmailRequest
from app.settings import settings
from app.utils.html import html_to_text
from app.utils.logging_config import logger

RESEND_SEND_URL = "https://api.resend.com/emails"
RESEND_TIMEOUT_SECONDS = 20.0


class EmailDeliveryError(Exception):
    """Raised when the email provider rejects or fails a send."""


def render_ticket_email(content: str, ticket_id: str, customer_name: Optional[str]) -> str:
    ticket_url = f"{settings.APP_URL.rstrip('/')}/tickets/{ticket_id}"
    name = html.escape(customer_name or "Valued Customer")
    return (
        "<div>"
        f"<p>Dear {name},</p>"
        f"{content}"
        "<p>You can view your ticket and respond here: "
        f'<a href="{html.escape(ticket_url, quote=True)}">View Ticket</a></p>'
        "<p>Best regards,<br/>The Support Team</p>"
        "</div>"
    )


async def send_ticket_email(
    request: SendEmailRequest, client: Optional[httpx.AsyncClient] = None
) -> Optional[str]:
    """
    Sends the reply and returns the provider's message id.

    Raises:
        EmailDeliveryError: If Resend answers with an error status.
        httpx.HTTPError: On transport failures.
    """
    body = render_ticket_email(request.content, request.ticket_id, request.customer_name)
    payload = {
        "from": settings.EMAIL_FROM,
        "to": [request.to],
        "subject": request.subject,
        "html": body,
        "text": html_to_text(body),
    }
    headers = {
        "Authorization": f"Bearer {settings.RESEND_API_KEY}",
        "Content-Type": "application/json",
    }

    if client is None:
        async with httpx.AsyncClient(timeout=RESEND_TIMEOUT_SECONDS) as own_client:
            response = await own_client.post(RESEND_SEND_URL, headers=headers, json=payload)
    else:
        response = await client.post(RESEND_SEND_URL, headers=headers, json=payload)

    if response.status_code >= 400:
        try:
            message = response.json().get("message") or response.text
        except ValueError:
            message = response.text
        logger.warning(f"Resend rejected email for ticket {request.ticket_id}: {message}")
        raise EmailDeliveryError(message)

    message_id = response.json().get("id")
    logger.info(f"Email for ticket {request.ticket_id} sent to {request.to} (id={message_id})")
    return message_id
