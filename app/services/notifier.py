"""
Email notifier.

Best-effort delivery over SMTP: failures are logged and swallowed so that a
mail outage never fails the request that triggered it. Disabled when
SMTP_HOST is not configured.
"""
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from app.core import config

logger = logging.getLogger(__name__)


def email_enabled() -> bool:
    return bool(config.SMTP_HOST)


def _smtp_send(to_addr: str, msg: MIMEMultipart) -> None:
    with smtplib.SMTP(config.SMTP_HOST, config.SMTP_PORT, timeout=config.SMTP_TIMEOUT_SECONDS) as server:
        server.starttls()
        if config.SMTP_USERNAME and config.SMTP_PASSWORD:
            server.login(config.SMTP_USERNAME, config.SMTP_PASSWORD)
        server.sendmail(config.SMTP_FROM, [to_addr], msg.as_string())


def send_email(to_addr: Optional[str], subject: str, body: str, html_body: Optional[str] = None) -> bool:
    """
    Send one email.

    Returns:
        True if the message was handed to the SMTP server, False otherwise.
    """
    if not email_enabled():
        logger.debug(f"Email disabled, not sending '{subject}'")
        return False
    if not to_addr:
        return False

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = config.SMTP_FROM
    msg["To"] = to_addr
    msg.attach(MIMEText(body, "plain", "utf-8"))
    if html_body:
        msg.attach(MIMEText(html_body, "html", "utf-8"))

    try:
        _smtp_send(to_addr, msg)
        logger.info(f"Email sent: subject='{subject}'")
        return True
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Email delivery failed: subject='{subject}', error={e}")
        return False


def send_password_reset_email(to_addr: str, raw_token: str) -> bool:
    link = f"{config.FRONTEND_URL}/reset-password?token={raw_token}"
    body = (
        "A password reset was requested for your HireHaven account.\n\n"
        f"Reset your password here: {link}\n\n"
        f"This link expires in {config.PASSWORD_RESET_TOKEN_TTL_HOURS} hours. "
        "If you did not request it, you can ignore this email."
    )
    return send_email(to_addr, "Reset your HireHaven password", body)
