"""Outbound email for registration verification links."""
import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from urllib.parse import urlencode
import aiosmtplib
import config

logger = logging.getLogger(__name__)


def build_verification_url(token: str) -> str:
    return f"{config.APP_BASE_URL.rstrip('/')}/verify-email?{urlencode({'token': token})}"


def build_verification_message(email: str, username: str, token: str) -> MIMEMultipart:
    url = build_verification_url(token)
    msg = MIMEMultipart('alternative')
    msg['Subject'] = "Verify your CampusCircle account"
    msg['From'] = config.MAIL_FROM
    msg['To'] = email

    text = (
        f"Hi {username},\n\n"
        f"Confirm your email address to finish creating your account:\n{url}\n\n"
        "If you did not sign up, you can ignore this message.\n"
    )
    html = (
        f"<p>Hi {username},</p>"
        f"<p>Confirm your email address to finish creating your account:</p>"
        f'<p><a href="{url}">Verify my email</a></p>'
        "<p>If you did not sign up, you can ignore this message.</p>"
    )
    msg.attach(MIMEText(text, 'plain', 'utf-8'))
    msg.attach(MIMEText(html, 'html', 'utf-8'))
    return msg


async def send_message(msg: MIMEMultipart):
    smtp = aiosmtplib.SMTP(
        hostname=config.SMTP_HOST,
        port=config.SMTP_PORT,
        timeout=30,
        use_tls=config.SMTP_PORT == 465,  # Implicit TLS for port 465
        start_tls=config.SMTP_PORT == 587,
    )
    async with smtp:
        if config.SMTP_USERNAME and config.SMTP_PASSWORD:
            await smtp.login(config.SMTP_USERNAME, config.SMTP_PASSWORD)
        await smtp.send_message(msg)


async def send_verification_email(email: str, username: str, token: str) -> bool:
    """Deliver the verification link; runs after the HTTP response is sent.

    Failures are logged with their traceback and reported through the return
    value. The pending registration is kept either way.
    """
    if not config.SMTP_HOST:
        logger.info("SMTP_HOST not set, verification link for %s: %s",
                    username, build_verification_url(token))
        return False
    msg = build_verification_message(email, username, token)
    try:
        await send_message(msg)
    except (aiosmtplib.SMTPException, OSError):
        logger.exception("Failed to send verification email to %s", email)
        return False
    logger.info("Verification email sent to %s", email)
    return True
