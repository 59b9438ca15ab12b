from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from flask import current_app

from utils.call_config import CallConfig
from utils.notifier import BookingNotifier
from utils.razorpay import RazorpayClient


def system_clock() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CallsContext:
    """Everything the call-booking services need, wired once by create_app."""
    config: CallConfig
    gateway: RazorpayClient
    notifier: BookingNotifier
    clock: Callable[[], datetime] = field(default=system_clock)
    checkout_retention_days: int = 30


def init_calls(app, context: CallsContext):
    app.extensions["calls"] = context


def current_calls() -> CallsContext:
    return current_app.extensions["calls"]
