import logging
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from html import escape
from app.core.config import settings

logger = logging.getLogger(__name__)


def mail_configured() -> bool:
    return bool(settings.MAIL_SERVER and settings.MAIL_FROM and settings.CONTACT_INBOX)


def _connect() -> smtplib.SMTP:
    if settings.MAIL_SSL:
        logger.debug("Connecting to %s:%s via SSL", settings.MAIL_SERVER, settings.MAIL_PORT)
        return smtplib.SMTP_SSL(settings.MAIL_SERVER, settings.MAIL_PORT)
    logger.debug("Connecting to %s:%s via TLS", settings.MAIL_SERVER, settings.MAIL_PORT)
    return smtplib.SMTP(settings.MAIL_SERVER, settings.MAIL_PORT)


def send_email(to_email: str, subject: str, body: str, reply_to: str = None) -> bool:
    try:
        msg = MIMEMultipart()
        msg['From'] = settings.MAIL_FROM
        msg['To'] = to_email
        msg['Subject'] = subject
        if reply_to:
            msg['Reply-To'] = reply_to

        msg.attach(MIMEText(body, 'html'))

        with _connect() as server:
            if not settings.MAIL_SSL:
                server.starttls()
            if settings.MAIL_USERNAME:
                server.login(settings.MAIL_USERNAME, settings.MAIL_PASSWORD)
            server.sendmail(settings.MAIL_FROM, to_email, msg.as_string())
        logger.info("Email sent to %s", to_email)
        return True
    except (smtplib.SMTPException, OSError) as e:
        logger.error("Failed to send email to %s: %s", to_email, e)
        return False


def format_contact_message(name: str, email: str, subject: str, message: str) -> str:
    paragraphs = "".join(f"<p>{escape(line)}</p>" for line in message.splitlines() if line.strip())
    return (
        f"<h2>New contact message</h2>"
        f"<p><b>From:</b> {escape(name)} &lt;{escape(email)}&gt;</p>"
        f"<p><b>Subject:</b> {escape(subject)}</p>"
        f"<hr>{paragraphs}"
    )


def send_contact_message(name: str, email: str, subject: str, message: str) -> bool:
    """Forward a contact form message to the site inbox.

    Without mail settings the message is only logged and counts as delivered.
    """
    if not mail_configured():
        logger.info("Mail not configured; contact message from %s <%s> logged only: %s", name, email, subject)
        return True
    return send_email(
        settings.CONTACT_INBOX,
        f"[Contact] {subject}",
        format_contact_message(name, email, subject, message),
        reply_to=email,
    )
