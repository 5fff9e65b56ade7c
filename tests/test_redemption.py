# tests/test_redemption.py
from datetime import date, datetime, timedelta, timezone

import pytest

from gatepass.models.enums import AccessResult, DenyReason, PassState
from gatepass.services.redemption import RedemptionEngine

from .conftest import NOON, UTC

TODAY = NOON.date()
TOMORROW = TODAY + timedelta(days=1)
YESTERDAY = TODAY - timedelta(days=1)


def at(hh, mm, day=TODAY):
    return datetime(day.year, day.month, day.day, hh, mm, tzinfo=UTC)


# ---------------------------------------------------------------------------
# Unscheduled passes
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("now", [NOON, at(0, 0), at(23, 59), NOON + timedelta(days=400)])
def test_unscheduled_pass_grants_at_any_time(engine, make_record, now):
    verdict = engine.evaluate(make_record(), now)
    assert verdict.granted
    assert verdict.result == AccessResult.GRANTED
    assert verdict.reason is None
    assert verdict.issued_to == "Ada Lovelace"
    assert verdict.purpose == "Gala dinner"


def test_schedule_fields_ignored_without_active_date(engine, make_record):
    record = make_record(active_time="09:00", end_time="10:00", allow_early_access=False)
    assert engine.evaluate(record, at(22, 30)).granted


def test_used_pass_is_denied_with_used_at(engine, make_record):
    used_at = NOON - timedelta(hours=1)
    record = make_record(used=True, used_at=used_at)

    verdict = engine.evaluate(record, NOON)

    assert verdict.reason == DenyReason.ALREADY_USED
    assert verdict.used_at == used_at
    assert verdict.detail["used_at"] == used_at
    assert verdict.issued_to == "Ada Lovelace"


def test_used_check_precedes_expiry(engine, make_record):
    record = make_record(used=True, used_at=NOON, expires_at=NOON - timedelta(days=1))
    assert engine.evaluate(record, NOON).reason == DenyReason.ALREADY_USED


# ---------------------------------------------------------------------------
# Expiry
# ---------------------------------------------------------------------------

def test_expired_pass_is_denied_before_schedule(engine, make_record):
    expires_at = at(9, 0)
    record = make_record(
        expires_at=expires_at, active_date=TODAY, active_time="09:00", end_time="17:00",
    )

    verdict = engine.evaluate(record, at(10, 0))

    assert verdict.reason == DenyReason.EXPIRED
    assert verdict.detail == {"expires_at": expires_at}


def test_expiry_is_exclusive_of_the_deadline(engine, make_record):
    record = make_record(expires_at=NOON)
    assert engine.evaluate(record, NOON).granted
    assert engine.evaluate(record, NOON + timedelta(seconds=1)).reason == DenyReason.EXPIRED


def test_naive_now_is_treated_as_utc(engine, make_record):
    record = make_record(expires_at=NOON)
    verdict = engine.evaluate(record, datetime(2026, 3, 10, 12, 0, 1))
    assert verdict.reason == DenyReason.EXPIRED


# ---------------------------------------------------------------------------
# Calendar day
# ---------------------------------------------------------------------------

def test_future_day_without_early_access_is_not_yet_active(engine, make_record):
    record = make_record(active_date=TOMORROW, allow_early_access=False)

    verdict = engine.evaluate(record, NOON)

    assert verdict.reason == DenyReason.NOT_YET_ACTIVE
    assert verdict.detail == {"active_date": TOMORROW}


def test_early_access_grants_before_the_day_and_skips_window(engine, make_record):
    record = make_record(
        active_date=TOMORROW, allow_early_access=True, active_time="09:00", end_time="10:00",
    )
    # 23:30 would be outside the window on the day itself
    verdict = engine.evaluate(record, at(23, 30))
    assert verdict.granted


def test_early_access_does_not_override_expiry(engine, make_record):
    record = make_record(
        active_date=TOMORROW, allow_early_access=True, expires_at=NOON - timedelta(minutes=1),
    )
    assert engine.evaluate(record, NOON).reason == DenyReason.EXPIRED


def test_past_day_is_window_elapsed(engine, make_record):
    record = make_record(active_date=YESTERDAY, allow_early_access=True)

    verdict = engine.evaluate(record, NOON)

    assert verdict.reason == DenyReason.WINDOW_ELAPSED
    assert verdict.detail == {"active_date": YESTERDAY}


# ---------------------------------------------------------------------------
# Time of day
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "hh, mm, expected",
    [
        (8, 59, DenyReason.TOO_EARLY),
        (9, 0, None),
        (12, 30, None),
        (17, 0, None),
        (17, 1, DenyReason.TOO_LATE),
    ],
)
def test_time_window_bounds_are_inclusive(engine, make_record, hh, mm, expected):
    record = make_record(active_date=TODAY, active_time="09:00", end_time="17:00")

    verdict = engine.evaluate(record, at(hh, mm))

    assert verdict.reason == expected
    assert verdict.granted is (expected is None)


def test_seconds_are_truncated_to_the_minute(engine, make_record):
    record = make_record(active_date=TODAY, active_time="09:00", end_time="17:00")
    assert engine.evaluate(record, at(17, 0) + timedelta(seconds=59)).granted


def test_too_early_and_too_late_details(engine, make_record):
    record = make_record(active_date=TODAY, active_time="09:00", end_time="17:00")

    early = engine.evaluate(record, at(7, 0))
    late = engine.evaluate(record, at(18, 0))

    assert early.detail == {"active_time": "09:00", "active_date": TODAY}
    assert late.detail == {"end_time": "17:00", "active_date": TODAY}
    assert "09:00" in early.message
    assert "17:00" in late.message


def test_default_window_covers_the_whole_day(engine, make_record):
    record = make_record(active_date=TODAY)
    assert engine.evaluate(record, at(0, 0)).granted
    assert engine.evaluate(record, at(23, 59)).granted


# ---------------------------------------------------------------------------
# Reference timezone
# ---------------------------------------------------------------------------

def test_reference_timezone_decides_today_across_midnight(make_record):
    # 03:30 UTC on the 11th is still 22:30 on the 10th at UTC-5
    utc_minus_5 = timezone(timedelta(hours=-5))
    engine = RedemptionEngine(utc_minus_5)
    record = make_record(active_date=date(2026, 3, 10), active_time="20:00", end_time="23:00")

    now = datetime(2026, 3, 11, 3, 30, tzinfo=UTC)

    assert engine.evaluate(record, now).granted
    assert RedemptionEngine(UTC).evaluate(record, now).reason == DenyReason.WINDOW_ELAPSED


def test_reference_timezone_applies_to_time_of_day(make_record):
    engine = RedemptionEngine(timezone(timedelta(hours=2)))
    record = make_record(active_date=TODAY, active_time="09:00", end_time="17:00")
    # 07:30 UTC is 09:30 at UTC+2
    assert engine.evaluate(record, at(7, 30)).granted


# ---------------------------------------------------------------------------
# Evaluation is pure
# ---------------------------------------------------------------------------

def test_evaluate_does_not_change_the_record(engine, make_record):
    record = make_record(active_date=TODAY)
    before = record.model_dump()
    engine.evaluate(record, NOON)
    engine.evaluate(record, NOON)
    assert record.model_dump() == before
    assert record.used is False


# ---------------------------------------------------------------------------
# Lifecycle state view
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "fields, state",
    [
        ({}, PassState.ACTIVE),
        ({"active_date": TOMORROW}, PassState.INACTIVE),
        ({"active_date": TODAY, "active_time": "13:00"}, PassState.INACTIVE),
        ({"active_date": YESTERDAY}, PassState.EXPIRED),
        ({"expires_at": NOON - timedelta(hours=1)}, PassState.EXPIRED),
        ({"used": True, "used_at": NOON}, PassState.REDEEMED),
    ],
)
def test_state_of(engine, make_record, fields, state):
    assert engine.state_of(make_record(**fields), NOON) == state
