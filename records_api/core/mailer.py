"""Plain-text notification mail over SMTP, configured through Settings."""

from email.message import EmailMessage
import logging
import smtplib
import ssl

from .config import Settings, get_settings

logger = logging.getLogger(__name__)

SMTPS_PORT = 465


def _smtp_configured(settings: Settings) -> bool:
    return all((settings.smtp_host, settings.smtp_port, settings.smtp_user, settings.smtp_password, settings.smtp_from))


def _open_connection(settings: Settings) -> smtplib.SMTP:
    context = ssl.create_default_context()
    if settings.smtp_port == SMTPS_PORT:
        return smtplib.SMTP_SSL(settings.smtp_host, settings.smtp_port, context=context)
    server = smtplib.SMTP(settings.smtp_host, settings.smtp_port)
    try:
        server.starttls(context=context)
    except (smtplib.SMTPException, OSError):
        server.close()
        raise
    return server


def send_email(subject: str, to_email: str, body: str) -> bool:
    """Send ``body`` to ``to_email``; False when SMTP is unset or delivery fails."""
    settings = get_settings()
    if not _smtp_configured(settings):
        logger.warning("SMTP not configured; skipping %r to %s", subject, to_email)
        return False

    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = settings.smtp_from
    msg["To"] = to_email
    msg.set_content(body)
    try:
        with _open_connection(settings) as server:
            server.login(settings.smtp_user, settings.smtp_password)
            server.send_message(msg)
    except (smtplib.SMTPException, OSError):
        logger.exception("Failed to send %r to %s", subject, to_email)
        return False
    logger.info("Sent %r to %s", subject, to_email)
    return True
