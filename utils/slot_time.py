from datetime import date, datetime, time, timedelta, timezone

from utils.call_config import CallConfig


def to_db(dt: datetime) -> datetime:
    """Aware datetime -> naive UTC, the column format."""
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def from_db(dt: datetime) -> datetime:
    return dt.replace(tzinfo=timezone.utc)


def to_iso(dt: datetime) -> str:
    return to_db(dt).isoformat() + "Z"


def add_minutes(dt: datetime, minutes: int) -> datetime:
    # absolute arithmetic, so DST shifts do not stretch a slot
    return (dt.astimezone(timezone.utc) + timedelta(minutes=minutes)).astimezone(dt.tzinfo)


def ceil_to_step(dt: datetime, step_minutes: int) -> datetime:
    """Round up to the next step boundary of the local minute-of-hour."""
    d = dt
    if d.second or d.microsecond:
        d = add_minutes(d.replace(second=0, microsecond=0), 1)
    remainder = d.minute % step_minutes
    if remainder == 0:
        return d
    return add_minutes(d, step_minutes - remainder)


def earliest_start(now: datetime, config: CallConfig) -> datetime:
    local_now = now.astimezone(config.zone)
    return ceil_to_step(add_minutes(local_now, config.lead_minutes), config.step_minutes)


def night_window(day: date, config: CallConfig):
    """(window_start, window_end) of the window that opens on ``day``."""
    zone = config.zone
    window_start = datetime.combine(day, time(config.window_start_hour), tzinfo=zone)
    end_day = day + timedelta(days=1) if config.overnight else day
    window_end = datetime.combine(end_day, time(config.window_end_hour), tzinfo=zone)
    return window_start, window_end


def base_day(now: datetime, config: CallConfig) -> date:
    """Day whose window is current: yesterday while an overnight window is still open."""
    local_now = now.astimezone(config.zone)
    day = local_now.date()
    if config.overnight and local_now.hour < config.window_end_hour:
        day -= timedelta(days=1)
    return day


def horizon_end(now: datetime, config: CallConfig, days: int = None) -> datetime:
    days = days or config.auto_days
    last_day = base_day(now, config) + timedelta(days=days - 1)
    return night_window(last_day, config)[1]


def window_for_start(start_at: datetime, config: CallConfig):
    """Window a candidate start belongs to, or None when its hour is outside every window."""
    local = start_at.astimezone(config.zone)
    h = local.hour
    if config.overnight:
        if h >= config.window_start_hour or h < config.window_end_hour:
            day = local.date()
            if h < config.window_end_hour:
                day -= timedelta(days=1)
            return night_window(day, config)
        return None
    return night_window(local.date(), config)


def required_blocks(start_at: datetime, duration_minutes: int, step_minutes: int):
    if step_minutes <= 0 or duration_minutes % step_minutes != 0:
        return []
    return [add_minutes(start_at, i * step_minutes) for i in range(duration_minutes // step_minutes)]
