"""
Scheduling parameters for call bookings.

``load_call_config`` is called once by the app factory and the resulting
``CallConfig`` is handed to every component that needs it.
"""
from dataclasses import dataclass
from typing import Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

ALLOWED_DURATIONS = (30, 60)
AVAILABILITY_MODES = ("auto", "manual")


@dataclass(frozen=True)
class CallConfig:
    availability_mode: str = "auto"
    step_minutes: int = 30
    buffer_minutes: int = 15
    min_notice_minutes: int = 0
    allow_same_day: bool = True
    auto_days: int = 14
    window_start_hour: int = 20
    window_end_hour: int = 9
    time_zone: str = "UTC"
    currency: str = "INR"
    price_30: int = 49900
    price_60: int = 89900
    hold_minutes: int = 10
    require_payment: bool = False

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.time_zone)

    @property
    def overnight(self) -> bool:
        return self.window_end_hour <= self.window_start_hour

    @property
    def lead_minutes(self) -> int:
        return max(self.buffer_minutes, self.min_notice_minutes)

    def price_for(self, duration_minutes: int) -> int:
        if duration_minutes == 30:
            return self.price_30
        if duration_minutes == 60:
            return self.price_60
        return 0


def clamp_int(value, fallback: int, min_value: Optional[int] = None, max_value: Optional[int] = None) -> int:
    try:
        n = int(str(value).strip())
    except (TypeError, ValueError):
        n = fallback
    if min_value is not None:
        n = max(min_value, n)
    if max_value is not None:
        n = min(max_value, n)
    return n


def parse_bool(value, fallback: bool) -> bool:
    v = (value or "").strip().lower()
    if v in ("true", "1", "yes"):
        return True
    if v in ("false", "0", "no"):
        return False
    return fallback


def _resolve_time_zone(name: str) -> str:
    name = (name or "").strip()
    if not name:
        return "UTC"
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return "UTC"
    return name


def load_call_config(environ: Mapping[str, str]) -> CallConfig:
    """Build the scheduling config from environment-like input. Never raises."""
    mode = (environ.get("CALL_AVAILABILITY_MODE") or "auto").strip().lower()
    if mode not in AVAILABILITY_MODES:
        mode = "auto"

    razorpay_configured = bool(
        (environ.get("RAZORPAY_KEY_ID") or "").strip()
        and (environ.get("RAZORPAY_KEY_SECRET") or "").strip()
    )

    return CallConfig(
        availability_mode=mode,
        step_minutes=clamp_int(environ.get("CALL_SLOT_STEP_MINUTES"), 30, 5, 60),
        buffer_minutes=clamp_int(environ.get("CALL_BUFFER_MINUTES"), 15, 0, 240),
        min_notice_minutes=clamp_int(environ.get("CALL_MIN_NOTICE_MINUTES"), 0, 0, 14 * 24 * 60),
        allow_same_day=parse_bool(environ.get("CALL_ALLOW_SAME_DAY"), True),
        auto_days=clamp_int(environ.get("CALL_AUTO_DAYS"), 14, 1, 60),
        window_start_hour=clamp_int(environ.get("CALL_WINDOW_START_HOUR"), 20, 0, 23),
        window_end_hour=clamp_int(environ.get("CALL_WINDOW_END_HOUR"), 9, 0, 23),
        time_zone=_resolve_time_zone(environ.get("CALL_TIME_ZONE") or environ.get("TZ") or "UTC"),
        currency=(environ.get("CALL_CURRENCY") or "INR").strip() or "INR",
        price_30=clamp_int(environ.get("CALL_PRICE_30"), 49900, 0),
        price_60=clamp_int(environ.get("CALL_PRICE_60"), 89900, 0),
        hold_minutes=clamp_int(environ.get("CALL_HOLD_MINUTES"), 10, 1, 30),
        require_payment=parse_bool(environ.get("CALL_REQUIRE_PAYMENT"), razorpay_configured),
    )
