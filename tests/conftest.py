import hashlib
import hmac
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from app import create_app
from models import db
from utils.call_config import CallConfig
from utils.calls_context import CallsContext, current_calls
from utils.emailer import EmailSettings
from utils.notifier import BookingNotifier
from utils.razorpay import PaymentProviderError, RazorpayClient

TZ = ZoneInfo("Asia/Kolkata")
ADMIN_HEADERS = {"Authorization": "Bearer admin-token"}


def local(*args):
    return datetime(*args, tzinfo=TZ)


class FrozenClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, minutes):
        self.now = self.now + timedelta(minutes=minutes)


class FakeRazorpay(RazorpayClient):
    """Real signature/parsing logic, canned HTTP answers."""

    def __init__(self):
        super().__init__("rzp_test_key", "rzp_test_secret")
        self.calls = []
        self.payments = {}
        self.order_count = 0
        self.fail_orders = False

    def _request(self, method, path, payload=None):
        self.calls.append((method, path, payload))
        if method == "POST" and path == "/orders":
            if self.fail_orders:
                raise PaymentProviderError("orders unavailable", 500)
            self.order_count += 1
            return {
                "id": f"order_{self.order_count}",
                "amount": payload["amount"],
                "currency": payload["currency"],
                "status": "created",
            }
        if method == "GET" and path.startswith("/payments/"):
            payment_id = path.rsplit("/", 1)[1]
            if payment_id not in self.payments:
                raise PaymentProviderError("payment not found", 404)
            return self.payments[payment_id]
        if method == "POST" and path.endswith("/refund"):
            return {"id": "rfnd_1", "amount": payload["amount"], "status": "processed"}
        raise AssertionError(f"unexpected call {method} {path}")

    def capture(self, payment_id, order_id, amount, currency="INR", status="captured"):
        self.payments[payment_id] = {
            "id": payment_id,
            "order_id": order_id,
            "amount": amount,
            "currency": currency,
            "status": status,
            "captured": status == "captured",
        }

    def sign(self, order_id, payment_id):
        return hmac.new(b"rzp_test_secret", f"{order_id}|{payment_id}".encode(), hashlib.sha256).hexdigest()

    def order_calls(self):
        return [c for c in self.calls if c[1] == "/orders"]


class RecordingSender:
    def __init__(self):
        self.sent = []

    def __call__(self, settings, to_email, subject, body):
        self.sent.append({"to": to_email, "subject": subject, "body": body})
        return True, None


def make_call_config(**overrides):
    values = dict(
        availability_mode="auto",
        step_minutes=30,
        buffer_minutes=15,
        min_notice_minutes=0,
        allow_same_day=True,
        auto_days=14,
        window_start_hour=20,
        window_end_hour=9,
        time_zone="Asia/Kolkata",
        currency="INR",
        price_30=49900,
        price_60=89900,
        hold_minutes=10,
        require_payment=True,
    )
    values.update(overrides)
    return CallConfig(**values)


@pytest.fixture
def clock():
    return FrozenClock(local(2026, 3, 10, 12, 0))


@pytest.fixture
def gateway():
    return FakeRazorpay()


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def app(clock, gateway, sender):
    settings = EmailSettings(admin_recipients=["admin@example.com"], send_customers=True)
    context = CallsContext(
        config=make_call_config(),
        gateway=gateway,
        notifier=BookingNotifier(settings, sender=sender, run_async=False),
        clock=clock,
    )
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
            "ADMIN_API_TOKEN": "admin-token",
        },
        calls_context=context,
    )
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def calls(app):
    return current_calls()


@pytest.fixture
def free_mode(calls):
    calls.config = make_call_config(require_payment=False)
    return calls.config


def booking_body(start, duration=60, **overrides):
    body = {
        "startAt": start.isoformat(),
        "durationMinutes": duration,
        "name": "  Asha Rao ",
        "email": " Asha@Example.com ",
        "topic": "Career",
        "title": "Portfolio review",
    }
    body.update(overrides)
    return body
