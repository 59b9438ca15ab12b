import pytest

from conftest import booking_body, local, make_call_config
from utils.call_validation import InvalidCallRequest, ValidCallRequest, validate_call_request

NOW = local(2026, 3, 10, 21, 7)  # earliest bookable start is 21:30


def check(body, config=None, now=NOW):
    return validate_call_request(body, config or make_call_config(), now)


def reason(body, **kwargs):
    result = check(body, **kwargs)
    assert isinstance(result, InvalidCallRequest), result
    return result.message


def test_valid_request_is_normalized():
    result = check(booking_body(local(2026, 3, 10, 22, 0)))

    assert isinstance(result, ValidCallRequest)
    assert result.name == "Asha Rao"
    assert result.email == "asha@example.com"
    assert result.duration_minutes == 60
    assert result.blocks == [local(2026, 3, 10, 22, 0), local(2026, 3, 10, 22, 30)]


def test_utc_and_string_duration_are_accepted():
    body = booking_body(local(2026, 3, 10, 22, 0), duration="30")
    body["startAt"] = "2026-03-10T16:30:00Z"
    result = check(body)
    assert isinstance(result, ValidCallRequest)
    assert result.start_at == local(2026, 3, 10, 22, 0)


def test_earliest_start_is_bookable_and_one_step_before_is_not():
    assert isinstance(check(booking_body(local(2026, 3, 10, 21, 30))), ValidCallRequest)
    assert reason(booking_body(local(2026, 3, 10, 21, 0))) == "Slot is no longer available"


def test_sixty_minutes_ending_exactly_at_window_end_is_accepted():
    assert isinstance(check(booking_body(local(2026, 3, 11, 8, 0))), ValidCallRequest)
    assert reason(booking_body(local(2026, 3, 11, 8, 30))) == "Slot ends after allowed window"


@pytest.mark.parametrize("field, message", [
    ("startAt", "startAt is required"),
    ("durationMinutes", "durationMinutes is required"),
    ("name", "Name is required"),
    ("email", "Email is required"),
    ("topic", "Topic is required"),
    ("title", "Title is required"),
])
def test_missing_fields(field, message):
    body = booking_body(local(2026, 3, 10, 22, 0))
    del body[field]
    assert reason(body) == message


def test_blank_strings_count_as_missing():
    assert reason(booking_body(local(2026, 3, 10, 22, 0), title="   ")) == "Title is required"


def test_unparseable_start():
    assert reason(booking_body(local(2026, 3, 10, 22, 0), startAt="tomorrow night")) == "Invalid startAt"


def test_misaligned_start():
    assert reason(booking_body(local(2026, 3, 10, 22, 15))) == "Slot must align to 30 minute steps"
    body = booking_body(local(2026, 3, 10, 22, 0), startAt="2026-03-10T22:00:30+05:30")
    assert reason(body) == "Slot must align to 30 minute steps"


@pytest.mark.parametrize("duration", [45, 90, 0, True, "sixty", 60.5])
def test_unsupported_duration(duration):
    assert reason(booking_body(local(2026, 3, 10, 22, 0), duration=duration)) == "Invalid durationMinutes"


def test_bad_email_shape():
    assert reason(booking_body(local(2026, 3, 10, 22, 0), email="asha@example")) == "Valid email is required"


def test_start_outside_window():
    assert reason(booking_body(local(2026, 3, 11, 12, 0))) == "Slot outside allowed window"


def test_beyond_horizon():
    # 14 windows from 2026-03-10, the last one ends 2026-03-24 09:00
    assert isinstance(check(booking_body(local(2026, 3, 24, 7, 0))), ValidCallRequest)
    assert reason(booking_body(local(2026, 3, 24, 20, 0))) == "Slot too far in future"


def test_manual_mode_has_no_horizon():
    config = make_call_config(availability_mode="manual")
    assert isinstance(check(booking_body(local(2026, 4, 20, 22, 0)), config=config), ValidCallRequest)


def test_same_day_rule():
    config = make_call_config(allow_same_day=False)
    assert reason(booking_body(local(2026, 3, 10, 22, 0)), config=config) == "Same-day calls are not available"
    assert isinstance(check(booking_body(local(2026, 3, 11, 1, 0)), config=config), ValidCallRequest)


def test_duration_not_a_multiple_of_step():
    config = make_call_config(step_minutes=45)
    result = check(booking_body(local(2026, 3, 10, 22, 0), duration=30), config=config)
    assert result == InvalidCallRequest(code="invalid_blocks", message="Invalid slot duration")


def test_non_dict_body():
    assert reason(["not", "a", "dict"]) == "Request body must be a JSON object"
