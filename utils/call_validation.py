import re
from dataclasses import dataclass
from datetime import datetime
from typing import List, Union

from utils.call_config import ALLOWED_DURATIONS, CallConfig
from utils.slot_time import (
    add_minutes,
    earliest_start,
    horizon_end,
    required_blocks,
    window_for_start,
)

# Pragmatic, not RFC complete
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(frozen=True)
class ValidCallRequest:
    start_at: datetime
    duration_minutes: int
    name: str
    email: str
    topic: str
    title: str
    blocks: List[datetime]


@dataclass(frozen=True)
class InvalidCallRequest:
    code: str
    message: str


CallRequestResult = Union[ValidCallRequest, InvalidCallRequest]


def normalize_email(value: str) -> str:
    return (value or "").strip().lower()


def is_valid_email(value) -> bool:
    return isinstance(value, str) and bool(EMAIL_RE.match(value.strip()))


def parse_start_at(value: str, config: CallConfig):
    """ISO-8601 instant; a value without offset is read as local time."""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=config.zone)
    return dt


def _parse_duration(value):
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _text(payload: dict, key: str):
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def _invalid(code: str, message: str) -> InvalidCallRequest:
    return InvalidCallRequest(code=code, message=message)


def validate_call_request(payload, config: CallConfig, now: datetime) -> CallRequestResult:
    """
    Normalize a raw booking/checkout body.

    Returns ValidCallRequest with trimmed fields, lower-cased email and the
    blocks the slot occupies, or InvalidCallRequest whose message is shown to
    the client as is.
    """
    if not isinstance(payload, dict):
        return _invalid("invalid_body", "Request body must be a JSON object")

    raw_start = payload.get("startAt")
    if not isinstance(raw_start, str) or not raw_start.strip():
        return _invalid("missing_start", "startAt is required")
    if payload.get("durationMinutes") is None:
        return _invalid("missing_duration", "durationMinutes is required")
    name = _text(payload, "name")
    if name is None:
        return _invalid("missing_name", "Name is required")
    if not isinstance(payload.get("email"), str) or not payload["email"].strip():
        return _invalid("missing_email", "Email is required")
    topic = _text(payload, "topic")
    if topic is None:
        return _invalid("missing_topic", "Topic is required")
    title = _text(payload, "title")
    if title is None:
        return _invalid("missing_title", "Title is required")

    start = parse_start_at(raw_start, config)
    if start is None:
        return _invalid("invalid_start", "Invalid startAt")
    local_start = start.astimezone(config.zone)
    if local_start.second or local_start.microsecond or local_start.minute % config.step_minutes:
        return _invalid("misaligned_start", f"Slot must align to {config.step_minutes} minute steps")

    duration = _parse_duration(payload.get("durationMinutes"))
    if duration not in ALLOWED_DURATIONS:
        return _invalid("invalid_duration", "Invalid durationMinutes")

    if not is_valid_email(payload["email"]):
        return _invalid("invalid_email", "Valid email is required")

    if start < earliest_start(now, config):
        return _invalid("too_soon", "Slot is no longer available")

    if not config.allow_same_day and local_start.date() == now.astimezone(config.zone).date():
        return _invalid("same_day", "Same-day calls are not available")

    window = window_for_start(start, config)
    if window is None or start < window[0]:
        return _invalid("outside_window", "Slot outside allowed window")
    if add_minutes(start, duration) > window[1]:
        return _invalid("ends_after_window", "Slot ends after allowed window")

    if config.availability_mode == "auto" and start >= horizon_end(now, config):
        return _invalid("too_far", "Slot too far in future")

    blocks = required_blocks(local_start, duration, config.step_minutes)
    if not blocks:
        return _invalid("invalid_blocks", "Invalid slot duration")

    return ValidCallRequest(
        start_at=local_start,
        duration_minutes=duration,
        name=name,
        email=normalize_email(payload["email"]),
        topic=topic,
        title=title,
        blocks=blocks,
    )
