import threading
from types import SimpleNamespace

from conftest import local, make_call_config
from utils.emailer import EmailSettings
from utils.notifier import BookingNotifier
from utils.slot_time import to_db


def make_booking(**overrides):
    values = dict(
        id="abc123",
        start_at=to_db(local(2026, 3, 10, 22, 0)),
        duration_minutes=60,
        name="Asha Rao",
        email="asha@example.com",
        topic="Career",
        title="Portfolio review",
        status="scheduled",
        payment_status="paid",
        payment_provider="razorpay",
        amount=89900,
        currency="INR",
        razorpay_order_id="order_1",
        razorpay_payment_id="pay_1",
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def test_admin_and_customer_mail(sender):
    notifier = BookingNotifier(EmailSettings(admin_recipients=["admin@example.com"], send_customers=True),
                               sender=sender, run_async=False)

    notifier.booking_created(make_booking(), make_call_config(), "call_booking_paid")

    assert [m["to"] for m in sender.sent] == [["admin@example.com"], "asha@example.com"]
    subject = sender.sent[0]["subject"]
    assert subject == "New call booking: Tue, 10 Mar 2026 22:00 (Asia/Kolkata) (60m)"
    assert "Payment: PAID 899.00 INR (razorpay)" in sender.sent[0]["body"]


def test_customer_mail_can_be_turned_off(sender):
    notifier = BookingNotifier(EmailSettings(admin_recipients=["admin@example.com"], send_customers=False),
                               sender=sender, run_async=False)

    notifier.booking_created(make_booking(), make_call_config(), "call_booking_free")

    assert [m["to"] for m in sender.sent] == [["admin@example.com"]]


def test_lost_slot_mail_mentions_refund(sender):
    notifier = BookingNotifier(EmailSettings(admin_recipients=["admin@example.com"]), sender=sender, run_async=False)

    notifier.booking_created(make_booking(status="cancelled"), make_call_config(), "call_booking_paid")

    assert sender.sent[0]["subject"].startswith("Payment received, slot not confirmed")
    assert "A refund will be arranged." in sender.sent[0]["body"]


def test_sender_failure_is_swallowed(caplog):
    def broken(settings, to_email, subject, body):
        raise ConnectionError("smtp down")

    notifier = BookingNotifier(EmailSettings(admin_recipients=["admin@example.com"]), sender=broken, run_async=False)

    notifier.booking_created(make_booking(), make_call_config(), "call_booking_paid")

    assert "Email send failed (call_booking_paid_admin)" in caplog.text


def test_async_dispatch_delivers():
    done = threading.Event()
    sent = []

    def sender(settings, to_email, subject, body):
        sent.append(to_email)
        done.set()
        return True, None

    notifier = BookingNotifier(EmailSettings(admin_recipients=["admin@example.com"]), sender=sender)
    notifier.dispatch("asha@example.com", "Hi", "Body", "test")

    assert done.wait(timeout=5)
    assert sent == ["asha@example.com"]


def test_template_failure_is_swallowed(sender, monkeypatch, caplog):
    def broken_template(booking, config):
        raise KeyError("start_at")

    monkeypatch.setattr("utils.notifier.build_call_booking_email", broken_template)
    notifier = BookingNotifier(EmailSettings(admin_recipients=["admin@example.com"]), sender=sender, run_async=False)

    notifier.booking_created(make_booking(), make_call_config(), "call_booking_paid")

    assert sender.sent == []
    assert "Could not build booking email (call_booking_paid)" in caplog.text
