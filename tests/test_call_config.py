import pytest

from utils.call_config import CallConfig, clamp_int, load_call_config


def test_defaults_without_environment():
    config = load_call_config({})
    assert config == CallConfig()
    assert config.step_minutes == 30
    assert config.window_start_hour == 20
    assert config.window_end_hour == 9
    assert config.overnight is True
    assert config.require_payment is False


def test_values_are_clamped_into_range():
    config = load_call_config({
        "CALL_SLOT_STEP_MINUTES": "1",
        "CALL_AUTO_DAYS": "365",
        "CALL_HOLD_MINUTES": "0",
        "CALL_WINDOW_START_HOUR": "30",
        "CALL_BUFFER_MINUTES": "-5",
    })
    assert config.step_minutes == 5
    assert config.auto_days == 60
    assert config.hold_minutes == 1
    assert config.window_start_hour == 23
    assert config.buffer_minutes == 0


def test_invalid_numbers_fall_back_to_defaults():
    config = load_call_config({"CALL_SLOT_STEP_MINUTES": "abc", "CALL_PRICE_60": "", "CALL_AUTO_DAYS": "7.5"})
    assert config.step_minutes == 30
    assert config.price_60 == 89900
    assert config.auto_days == 14


@pytest.mark.parametrize("env, expected", [
    ({}, False),
    ({"RAZORPAY_KEY_ID": "k", "RAZORPAY_KEY_SECRET": "s"}, True),
    ({"RAZORPAY_KEY_ID": "k", "RAZORPAY_KEY_SECRET": "s", "CALL_REQUIRE_PAYMENT": "false"}, False),
    ({"CALL_REQUIRE_PAYMENT": "TRUE"}, True),
])
def test_require_payment_follows_provider_unless_overridden(env, expected):
    assert load_call_config(env).require_payment is expected


def test_unknown_time_zone_falls_back_to_utc():
    assert load_call_config({"CALL_TIME_ZONE": "Mars/Olympus"}).time_zone == "UTC"
    assert load_call_config({"CALL_TIME_ZONE": "Asia/Kolkata"}).time_zone == "Asia/Kolkata"


def test_lead_minutes_uses_the_larger_of_buffer_and_notice():
    config = load_call_config({"CALL_BUFFER_MINUTES": "15", "CALL_MIN_NOTICE_MINUTES": "120"})
    assert config.lead_minutes == 120
    assert load_call_config({"CALL_ALLOW_SAME_DAY": "no"}).allow_same_day is False


def test_unknown_availability_mode_is_auto():
    assert load_call_config({"CALL_AVAILABILITY_MODE": "weekly"}).availability_mode == "auto"
    assert load_call_config({"CALL_AVAILABILITY_MODE": "manual"}).availability_mode == "manual"


def test_clamp_int():
    assert clamp_int("12", 1, 0, 10) == 10
    assert clamp_int(None, 4) == 4
