"""
Fire-and-forget booking notifications.

Mail goes out on a daemon thread. A failed send is logged and dropped; it
never changes the outcome of the booking that triggered it.
"""
import logging
import threading

from utils.email_templates import build_call_booking_email
from utils.emailer import EmailSettings, send_email

logger = logging.getLogger(__name__)


class BookingNotifier:
    def __init__(self, settings: EmailSettings, sender=send_email, run_async: bool = True):
        self.settings = settings
        self.sender = sender
        self.run_async = run_async

    def booking_created(self, booking, call_config, tag: str) -> None:
        try:
            subject, body = build_call_booking_email(booking, call_config)
        except Exception:
            logger.exception("Could not build booking email (%s)", tag)
            return
        if self.settings.admin_recipients:
            self.dispatch(self.settings.admin_recipients, subject, body, f"{tag}_admin")
        else:
            logger.warning("No admin recipients configured, skipping %s_admin", tag)
        if self.settings.send_customers:
            self.dispatch(booking.email, subject, body, f"{tag}_customer")

    def dispatch(self, to_email, subject: str, body: str, tag: str) -> None:
        if not self.run_async:
            self._deliver(to_email, subject, body, tag)
            return
        try:
            threading.Thread(
                target=self._deliver,
                args=(to_email, subject, body, tag),
                name=f"email-{tag}",
                daemon=True,
            ).start()
        except RuntimeError:
            logger.exception("Could not start email thread (%s)", tag)

    def _deliver(self, to_email, subject: str, body: str, tag: str) -> None:
        try:
            sent, error = self.sender(self.settings, to_email, subject, body)
        except Exception:
            logger.exception("Email send failed (%s)", tag)
            return
        if not sent:
            logger.warning("Email send failed (%s): %s", tag, error)
