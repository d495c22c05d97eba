"""
Email Service using Resend or SMTP (fallback)
Sends the booking confirmation to the patient
"""

import asyncio
import logging
import smtplib
import ssl
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from ..config import (
    EMAIL_FROM_ADDRESS,
    RESEND_API_KEY,
    SMTP_HOST,
    SMTP_PASSWORD,
    SMTP_PORT,
    SMTP_USE_TLS,
    SMTP_USERNAME,
)
from ..email_templates import booking_confirmation_template
from ..errors import ProviderError

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise ProviderError(f"Failed to compile MJML template: {e}") from e

    if isinstance(result, dict):
        if result.get("errors"):
            logger.warning(f"MJML compilation warnings: {result['errors']}")
        return result.get("html", "")
    return str(result)


def send_via_smtp(
    to: Union[str, list[str]],
    subject: str,
    html_content: str,
    from_address: str,
) -> dict:
    """Send email via the configured SMTP server"""
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = from_address
    msg["To"] = to if isinstance(to, str) else ", ".join(to)
    msg.attach(MIMEText(html_content, "html"))

    recipients = [to] if isinstance(to, str) else to

    try:
        if SMTP_PORT == 465:
            context = ssl.create_default_context()
            server = smtplib.SMTP_SSL(SMTP_HOST, SMTP_PORT, context=context, timeout=30)
        else:
            server = smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=30)
            if SMTP_USE_TLS:
                server.starttls(context=ssl.create_default_context())

        try:
            if SMTP_USERNAME:
                server.login(SMTP_USERNAME, SMTP_PASSWORD or "")
            server.sendmail(from_address.split("<")[-1].rstrip(">"), recipients, msg.as_string())
        finally:
            server.quit()
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"❌ SMTP send failed via {SMTP_HOST}: {e}")
        raise ProviderError(f"SMTP send failed: {e}") from e

    logger.info(f"✅ SMTP email sent successfully via {SMTP_HOST}")
    return {"id": f"smtp-{datetime.utcnow().timestamp()}", "success": True}


def send_via_resend(
    to: Union[str, list[str]],
    subject: str,
    html_content: str,
    from_address: str,
) -> dict:
    recipients = [to] if isinstance(to, str) else to
    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        response = resend.Emails.send(
            {
                "from": from_address,
                "to": recipients,
                "subject": subject,
                "html": html_content,
            }
        )
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise ProviderError(f"Failed to send email: {e}") from e

    logger.info(f"✅ Email sent successfully via Resend: {response}")
    return response


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email using Resend (if configured) or SMTP

    Both transports block, so they run in a worker thread.

    Raises:
        ProviderError: if no transport is configured or the send fails
    """
    html_content = compile_mjml_to_html(mjml_content)
    sender = from_address or EMAIL_FROM_ADDRESS

    if RESEND_API_KEY:
        return await asyncio.to_thread(send_via_resend, to, subject, html_content, sender)

    if SMTP_HOST:
        logger.info(f"📧 Sending email via SMTP: {SMTP_HOST}")
        return await asyncio.to_thread(send_via_smtp, to, subject, html_content, sender)

    logger.error("❌ No email service configured - RESEND_API_KEY and SMTP_HOST missing")
    raise ProviderError("Email service not configured")


class ConfirmationNotifier:
    """Sends booking confirmations; used by the outbound dispatcher"""

    async def send_booking_confirmation(
        self,
        booking,
        professional_name: str,
        meeting_link: Optional[str] = None,
    ) -> dict:
        mjml_content = booking_confirmation_template(
            client_name=booking.client_name,
            professional_name=professional_name,
            start=booking.start_at,
            meeting_link=meeting_link,
        )
        return await send_email(
            to=booking.client_email,
            subject=f"Reserva confirmada con {professional_name}",
            mjml_content=mjml_content,
        )
