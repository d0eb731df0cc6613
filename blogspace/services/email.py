"""Outgoing mail providers.

``console`` logs messages instead of sending them (development default);
``smtp`` delivers through a plain SMTP relay with optional STARTTLS login.
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from blogspace.config import get_settings

logger = logging.getLogger("blogspace")


class DeliveryError(Exception):
    """Raised when a message could not be handed to the mail transport."""


class EmailService:
    """Base mail provider."""

    def send(self, to_email: str, subject: str, body: str) -> None:
        """Deliver a plain text message. Raises DeliveryError on failure."""
        raise NotImplementedError


class ConsoleEmailService(EmailService):
    """Writes outgoing mail to the application log."""

    def send(self, to_email: str, subject: str, body: str) -> None:
        logger.info("EMAIL to=%s subject=%r\n%s", to_email, subject, body)


class SMTPEmailService(EmailService):
    """Sends mail over SMTP."""

    def __init__(
        self,
        smtp_server: str | None = None,
        smtp_port: int | None = None,
        smtp_username: str | None = None,
        smtp_password: str | None = None,
        from_email: str | None = None,
        from_name: str | None = None,
    ) -> None:
        settings = get_settings()
        self.smtp_server = smtp_server or settings.SMTP_SERVER
        self.smtp_port = smtp_port or settings.SMTP_PORT
        self.smtp_username = smtp_username or settings.SMTP_USERNAME
        self.smtp_password = smtp_password or settings.SMTP_PASSWORD
        self.from_email = from_email or settings.MAIL_FROM_EMAIL
        self.from_name = from_name or settings.MAIL_FROM_NAME

    def build_message(self, to_email: str, subject: str, body: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.attach(MIMEText(body, "plain", "utf-8"))
        return msg

    def send(self, to_email: str, subject: str, body: str) -> None:
        msg = self.build_message(to_email, subject, body)
        try:
            with smtplib.SMTP(self.smtp_server, self.smtp_port, timeout=10) as server:
                if self.smtp_username and self.smtp_password:
                    server.starttls()
                    server.login(self.smtp_username, self.smtp_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email via SMTP to %s: %s", to_email, e)
            raise DeliveryError(str(e)) from e

        logger.info("Sent email via SMTP to %s", to_email)


_email_service: EmailService | None = None


def get_email_service() -> EmailService:
    """Get singleton mail provider selected by EMAIL_PROVIDER."""
    global _email_service
    if _email_service is None:
        provider = get_settings().EMAIL_PROVIDER.lower()
        if provider == "smtp":
            _email_service = SMTPEmailService()
        elif provider == "console":
            _email_service = ConsoleEmailService()
        else:
            raise ValueError(f"Unknown EMAIL_PROVIDER '{provider}'. Expected 'console' or 'smtp'")
    return _email_service
