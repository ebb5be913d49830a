"""
SMTP mailer behind the mail relay endpoint.
"""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional
from rental_marketplace.config import Settings, settings as default_settings
from rental_marketplace.utils.exceptions import EmailDeliveryError
import aiosmtplib
import logging

logger = logging.getLogger(__name__)


class MailerService:
    """Sends HTML emails through the configured SMTP account."""

    def __init__(self, app_settings: Optional[Settings] = None):
        self.settings = app_settings or default_settings

    @property
    def is_configured(self) -> bool:
        return self.settings.smtp_configured

    def build_message(self, to: str, subject: str, html: str) -> MIMEMultipart:
        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = self.settings.sender_address
        message["To"] = to
        message.attach(MIMEText(html, "html", "utf-8"))
        return message

    async def send_html(self, to: str, subject: str, html: str) -> None:
        """
        Send one HTML email.

        Raises:
            EmailDeliveryError: If SMTP is not configured or the server rejects the message
        """
        if not self.is_configured:
            raise EmailDeliveryError("Email service not configured: SMTP credentials are missing")

        message = self.build_message(to, subject, html)
        try:
            await aiosmtplib.send(
                message,
                hostname=self.settings.smtp_host,
                port=self.settings.smtp_port,
                username=self.settings.smtp_username,
                password=self.settings.smtp_password,
                start_tls=self.settings.smtp_use_tls,
                timeout=self.settings.email_request_timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP delivery to {to} failed: {e}")
            raise EmailDeliveryError(str(e))

        logger.info(f"Email relayed to {to}: {subject}")
