"""
Outbound email over SMTP.

When SMTP credentials are not configured (local runs, tests) the message is
logged instead of sent.
"""

import asyncio
import smtplib
from email.mime.text import MIMEText
from typing import Optional

from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)


def _deliver(to_email: str, subject: str, body: str, sender: str) -> None:
    settings = get_settings()
    msg = MIMEText(body, "plain", "utf-8")
    msg["Subject"] = subject
    msg["From"] = sender
    msg["To"] = to_email

    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30) as server:
        server.starttls()
        server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
        server.sendmail(settings.DEFAULT_FROM_EMAIL, to_email, msg.as_string())


async def send_email(
    to_email: str,
    subject: str,
    body: str,
    from_name: Optional[str] = None,
) -> bool:
    """
    Send a plain-text email.

    Returns:
        True if the email was handed to the SMTP server, False otherwise.
        Never raises: callers treat email as best effort.
    """
    settings = get_settings()

    if not settings.SMTP_USERNAME or not settings.SMTP_PASSWORD:
        logger.info(f"SMTP not configured - would have sent email to {to_email}: {subject}")
        logger.debug(f"Email body: {body[:200]}...")
        return False

    sender = f"{from_name or settings.DEFAULT_FROM_NAME} <{settings.DEFAULT_FROM_EMAIL}>"

    try:
        await asyncio.to_thread(_deliver, to_email, subject, body, sender)
    except smtplib.SMTPException as e:
        logger.error(f"SMTP error sending email to {to_email}: {e}")
        return False
    except OSError as e:
        logger.error(f"Could not reach SMTP server: {type(e).__name__}: {e}")
        return False

    logger.info(f"Email sent to {to_email}: {subject}")
    return True
