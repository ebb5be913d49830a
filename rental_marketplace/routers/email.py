"""
Mail relay endpoint: accepts {to, subject, html} and hands the message to SMTP.
The email outbox delivers through this endpoint.
"""

from fastapi import APIRouter, Depends, Header, status
from typing import Optional
import hmac

from rental_marketplace.config import settings
from rental_marketplace.services.mailer import MailerService
from rental_marketplace.schemas.email import EmailSendRequest, EmailSendResponse
from rental_marketplace.utils.dependencies import get_mailer_service
from rental_marketplace.utils.exceptions import EmailDeliveryError, MailRelayError

router = APIRouter(prefix="/email", tags=["Email"])


def verify_relay_token(x_email_relay_token: Optional[str] = Header(None)) -> None:
    """Require X-Email-Relay-Token when a relay token is configured."""
    if settings.email_relay_token and not hmac.compare_digest(
        x_email_relay_token or "", settings.email_relay_token
    ):
        raise MailRelayError(status.HTTP_401_UNAUTHORIZED, "Invalid relay token")


@router.post(
    "/send",
    response_model=EmailSendResponse,
    summary="Send an HTML email",
    description="Relay used by the email outbox. Requires X-Email-Relay-Token when a relay token is configured.",
    dependencies=[Depends(verify_relay_token)]
)
async def send_email(
    email_data: EmailSendRequest,
    mailer: MailerService = Depends(get_mailer_service)
):
    """
    Relay an email through SMTP.

    Responses:
        200 {"success": true}
        400 when to, subject or html is missing
        401 when the relay token is configured and does not match
        500 when SMTP is not configured or delivery fails
    """
    if email_data.missing_fields:
        raise MailRelayError(status.HTTP_400_BAD_REQUEST, "Missing required fields: to, subject, html")

    if not mailer.is_configured:
        raise MailRelayError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Email service not configured. Please set SMTP credentials."
        )

    try:
        await mailer.send_html(email_data.to, email_data.subject, email_data.html)
    except EmailDeliveryError as e:
        raise MailRelayError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to send email", message=str(e))

    return EmailSendResponse(success=True)
