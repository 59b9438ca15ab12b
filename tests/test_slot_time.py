from datetime import date, timezone

from conftest import local, make_call_config
from utils.slot_time import (
    base_day,
    ceil_to_step,
    earliest_start,
    night_window,
    required_blocks,
    to_iso,
    window_for_start,
)


def test_ceil_to_step():
    assert ceil_to_step(local(2026, 3, 10, 20, 5), 30) == local(2026, 3, 10, 20, 30)
    assert ceil_to_step(local(2026, 3, 10, 20, 30), 30) == local(2026, 3, 10, 20, 30)
    assert ceil_to_step(local(2026, 3, 10, 20, 30, 1), 30) == local(2026, 3, 10, 21, 0)
    assert ceil_to_step(local(2026, 3, 10, 23, 45), 30) == local(2026, 3, 11, 0, 0)


def test_earliest_start_adds_lead_then_rounds():
    config = make_call_config(buffer_minutes=15)
    assert earliest_start(local(2026, 3, 10, 19, 45), config) == local(2026, 3, 10, 20, 0)
    assert earliest_start(local(2026, 3, 10, 19, 50), config) == local(2026, 3, 10, 20, 30)


def test_overnight_window_ends_next_day():
    start, end = night_window(date(2026, 3, 10), make_call_config())
    assert start == local(2026, 3, 10, 20, 0)
    assert end == local(2026, 3, 11, 9, 0)


def test_daytime_window_stays_on_its_day():
    start, end = night_window(date(2026, 3, 10), make_call_config(window_start_hour=9, window_end_hour=17))
    assert start == local(2026, 3, 10, 9, 0)
    assert end == local(2026, 3, 10, 17, 0)


def test_base_day_backs_up_inside_an_open_overnight_window():
    config = make_call_config()
    assert base_day(local(2026, 3, 11, 2, 0), config) == date(2026, 3, 10)
    assert base_day(local(2026, 3, 11, 10, 0), config) == date(2026, 3, 11)


def test_window_for_start():
    config = make_call_config()
    assert window_for_start(local(2026, 3, 11, 3, 0), config)[0] == local(2026, 3, 10, 20, 0)
    assert window_for_start(local(2026, 3, 10, 22, 0), config)[0] == local(2026, 3, 10, 20, 0)
    assert window_for_start(local(2026, 3, 10, 12, 0), config) is None


def test_required_blocks():
    start = local(2026, 3, 10, 21, 0)
    assert required_blocks(start, 60, 30) == [start, local(2026, 3, 10, 21, 30)]
    assert required_blocks(start, 30, 60) == []


def test_to_iso_is_utc():
    assert to_iso(local(2026, 3, 10, 20, 0)) == "2026-03-10T14:30:00Z"
    assert to_iso(local(2026, 3, 10, 20, 0).astimezone(timezone.utc)) == "2026-03-10T14:30:00Z"
