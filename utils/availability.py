from dataclasses import dataclass, field
from datetime import timedelta
from typing import List, Optional

from utils import slot_ledger
from utils.call_config import ALLOWED_DURATIONS, CallConfig, clamp_int
from utils.slot_time import (
    add_minutes,
    base_day,
    earliest_start,
    night_window,
    required_blocks,
    to_iso,
)


@dataclass
class AvailabilityDay:
    date: str  # YYYY-MM-DD of the window start, local time
    window_start_at: str
    window_end_at: str
    slots: List[str] = field(default_factory=list)

    def to_dict(self):
        return {
            "date": self.date,
            "windowStartAt": self.window_start_at,
            "windowEndAt": self.window_end_at,
            "slots": self.slots,
        }


@dataclass
class Availability:
    config: CallConfig
    duration_minutes: int
    days: List[AvailabilityDay]

    def to_dict(self):
        config = self.config
        return {
            "timeZone": config.time_zone,
            "window": {"startHour": config.window_start_hour, "endHour": config.window_end_hour},
            "stepMinutes": config.step_minutes,
            "bufferMinutes": config.buffer_minutes,
            "minNoticeMinutes": config.min_notice_minutes,
            "allowSameDay": config.allow_same_day,
            "pricing": {"amount": config.price_for(self.duration_minutes), "currency": config.currency},
            "requirePayment": config.require_payment,
            "durationMinutes": self.duration_minutes,
            "days": [d.to_dict() for d in self.days],
        }


def list_available_slots(config: CallConfig, duration_minutes: int, now, days: Optional[int] = None) -> Availability:
    """
    Free start instants per nightly window for the next ``days`` windows.

    The result is a snapshot of the ledger; a slot listed here can still be
    lost to a concurrent booking, so writers re-check through the ledger.
    """
    if duration_minutes not in ALLOWED_DURATIONS:
        return Availability(config=config, duration_minutes=duration_minutes, days=[])

    days = clamp_int(days if days is not None else config.auto_days, config.auto_days, 1, config.auto_days)

    first_day = base_day(now, config)
    last_day = first_day + timedelta(days=days - 1)
    range_start = night_window(first_day, config)[0]
    range_end = night_window(last_day, config)[1]

    locked = slot_ledger.locked_block_starts(range_start, range_end, now)
    min_start = earliest_start(now, config)
    today = now.astimezone(config.zone).date()

    result = []
    for i in range(days):
        window_start, window_end = night_window(first_day + timedelta(days=i), config)
        t = min_start if window_start < min_start else window_start

        slots = []
        while add_minutes(t, duration_minutes) <= window_end:
            candidate = t
            t = add_minutes(t, config.step_minutes)

            if not config.allow_same_day and candidate.astimezone(config.zone).date() == today:
                continue
            blocks = required_blocks(candidate, duration_minutes, config.step_minutes)
            if not blocks:
                continue
            if any(b in locked for b in blocks):
                continue
            slots.append(to_iso(candidate))

        result.append(AvailabilityDay(
            date=window_start.date().isoformat(),
            window_start_at=to_iso(window_start),
            window_end_at=to_iso(window_end),
            slots=slots,
        ))

    return Availability(config=config, duration_minutes=duration_minutes, days=result)
