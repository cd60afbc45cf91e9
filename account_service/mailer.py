# account_service/mailer.py
import asyncio
import logging
from typing import Protocol

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail as SendGridMail

from .config import Settings
from .errors import MailDeliveryError

logger = logging.getLogger(__name__)

OTP_SUBJECT = "Verify Your Account"


def otp_text(otp: str, expire_minutes: int) -> str:
    return f"Your OTP is: {otp}. It will expire in {expire_minutes} minutes."


class Mailer(Protocol):
    async def send_otp(self, email: str, otp: str, expire_minutes: int) -> None:
        ...


class SendGridMailer:
    def __init__(self, api_key: str, from_email: str):
        self.client = SendGridAPIClient(api_key)
        self.from_email = from_email

    async def send_otp(self, email: str, otp: str, expire_minutes: int) -> None:
        message = SendGridMail(
            from_email=self.from_email,
            to_emails=email,
            subject=OTP_SUBJECT,
            plain_text_content=otp_text(otp, expire_minutes),
        )

        loop = asyncio.get_running_loop()
        try:
            # Run in a thread to avoid blocking async loop
            response = await loop.run_in_executor(None, self.client.send, message)
        except Exception as e:
            logger.error("❌ Error sending email via SendGrid to %s: %s", email, e)
            raise MailDeliveryError(error=f"{type(e).__name__}: {e}") from e

        if not 200 <= response.status_code < 300:
            logger.error(
                "❌ SendGrid rejected email to %s, status: %s",
                email,
                response.status_code,
            )
            raise MailDeliveryError(error=f"SendGrid returned {response.status_code}")
        logger.info("✅ Email sent to %s, status: %s", email, response.status_code)


class LoggingMailer:
    """Development fallback that writes the OTP to the log instead of mailing it."""

    async def send_otp(self, email: str, otp: str, expire_minutes: int) -> None:
        logger.warning("⚠️ SendGrid not configured. OTP for %s: %s", email, otp)


def build_mailer(settings: Settings) -> Mailer:
    if settings.mail_configured:
        return SendGridMailer(settings.sendgrid_api_key, settings.mail_from_email)
    if settings.is_production:
        raise RuntimeError(
            "SENDGRID_API_KEY and MAIL_FROM_EMAIL must be set in production."
        )
    return LoggingMailer()
