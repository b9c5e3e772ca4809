# =============================================================================
# lib/email_client.py - Transactional Email (SendGrid)
# =============================================================================
# Sends verification and password reset emails through the SendGrid v3
# REST API. Without SENDGRID_API_KEY outside production, the message is
# logged instead so local sign-ups still work.
# =============================================================================

import logging

import httpx

from app.config import settings
from app.exceptions import ExternalServiceError, ServiceNotConfiguredError

logger = logging.getLogger(__name__)

SENDGRID_SEND_URL = "https://api.sendgrid.com/v3/mail/send"


def send_email(
    to_email: str,
    subject: str,
    text: str,
    html: str | None = None,
    http_client: httpx.Client | None = None,
) -> bool:
    """
    Send a single email.

    Returns:
        True if SendGrid accepted it, False if it was only logged

    Raises:
        ServiceNotConfiguredError: No API key in production
        ExternalServiceError: SendGrid rejected the message
    """
    if not settings.SENDGRID_API_KEY:
        if settings.is_production:
            raise ServiceNotConfiguredError("SendGrid", "SENDGRID_API_KEY")
        logger.info(f"Email to {to_email} not sent (no SENDGRID_API_KEY): {subject}\n{text}")
        return False

    content = [{"type": "text/plain", "value": text}]
    if html:
        content.append({"type": "text/html", "value": html})

    payload = {
        "personalizations": [{"to": [{"email": to_email}]}],
        "from": {"email": settings.SENDGRID_FROM_EMAIL},
        "subject": subject,
        "content": content,
    }
    headers = {"Authorization": f"Bearer {settings.SENDGRID_API_KEY}"}

    client = http_client or httpx.Client(timeout=15)
    try:
        response = client.post(SENDGRID_SEND_URL, json=payload, headers=headers)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.error(f"SendGrid answered {e.response.status_code} for {to_email}")
        raise ExternalServiceError("SendGrid", e.response.text or e.response.reason_phrase,
                                   upstream_status=e.response.status_code)
    except httpx.RequestError as e:
        logger.error(f"SendGrid request failed: {e}")
        raise ExternalServiceError("SendGrid", str(e))
    finally:
        if http_client is None:
            client.close()

    logger.info(f"Sent '{subject}' to {to_email}")
    return True


def send_verification_email(to_email: str, token: str) -> bool:
    link = f"{settings.APP_URL.rstrip('/')}/verify?token={token}"
    text = (
        "Welcome! Confirm your email address to finish setting up your account:\n\n"
        f"{link}\n\n"
        f"This link expires in {settings.VERIFICATION_TOKEN_TTL_HOURS} hours."
    )
    html = (
        "<p>Welcome! Confirm your email address to finish setting up your account.</p>"
        f'<p><a href="{link}">Verify email</a></p>'
        f"<p>This link expires in {settings.VERIFICATION_TOKEN_TTL_HOURS} hours.</p>"
    )
    return send_email(to_email, "Verify your email", text, html)


def send_password_reset_email(to_email: str, token: str) -> bool:
    link = f"{settings.APP_URL.rstrip('/')}/reset-password?token={token}"
    text = (
        "We received a request to reset your password. Set a new one here:\n\n"
        f"{link}\n\n"
        "If you didn't ask for this, ignore this email."
    )
    return send_email(to_email, "Reset your password", text)
