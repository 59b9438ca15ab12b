import logging
import smtplib
from dataclasses import dataclass, field
from email.message import EmailMessage
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailSettings:
    provider: str = "log"  # log, smtp
    admin_recipients: List[str] = field(default_factory=list)
    subject_prefix: str = "Portfolio"
    send_customers: bool = True
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None
    from_email: Optional[str] = None
    use_tls: bool = True

    @classmethod
    def from_app_config(cls, config):
        recipients = [v.strip() for v in (config.get("EMAIL_TO") or "").split(",") if v.strip()]
        return cls(
            provider=config.get("EMAIL_PROVIDER", "log"),
            admin_recipients=recipients,
            subject_prefix=" ".join((config.get("EMAIL_SUBJECT_PREFIX") or "Portfolio").split()),
            send_customers=config.get("EMAIL_SEND_CUSTOMERS", True),
            smtp_host=config.get("SMTP_HOST"),
            smtp_port=config.get("SMTP_PORT", 587),
            smtp_username=config.get("SMTP_USERNAME"),
            smtp_password=config.get("SMTP_PASSWORD"),
            from_email=config.get("SMTP_FROM_EMAIL") or config.get("SMTP_USERNAME"),
            use_tls=config.get("SMTP_USE_TLS", True),
        )


def send_email(settings: EmailSettings, to_email, subject: str, body: str):
    """Returns (sent, error)."""
    recipients = [to_email] if isinstance(to_email, str) else list(to_email or [])
    recipients = [r.strip() for r in recipients if r and r.strip()]
    if not recipients:
        return False, "Email recipient is required"

    subject = f"{settings.subject_prefix}: {subject}".strip()

    if settings.provider == "log":
        logger.info("[email:log] to=%s subject=%s\n%s", ", ".join(recipients), subject, body)
        return True, None

    if not settings.smtp_host or not settings.from_email:
        return False, "Email not configured"

    msg = EmailMessage()
    msg["From"] = settings.from_email
    msg["To"] = ", ".join(recipients)
    msg["Subject"] = subject
    msg.set_content(body)

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as server:
            if settings.use_tls:
                server.starttls()
            if settings.smtp_username and settings.smtp_password:
                server.login(settings.smtp_username, settings.smtp_password)
            server.send_message(msg)
        return True, None
    except (smtplib.SMTPException, OSError) as exc:
        return False, str(exc)
