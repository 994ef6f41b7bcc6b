"""Tests for booking conflict detection and display helpers."""

from datetime import date, datetime

import pytest

from booking.conflicts import (
    check_conflict,
    describe_booking_time,
    format_conflict_message,
)
from booking.date_utils import (
    format_date_for_display,
    format_date_to_iso,
    format_time_12h,
    format_time_range,
    get_day_of_week,
    is_past_date,
)
from booking.models import (
    BookingCandidate,
    ExistingBooking,
    LegacyTimeRef,
    UnifiedTimeRef,
    resolve_time_range,
    time_ref_of,
)


def _at(hour, minute=0, day=15):
    return datetime(2026, 1, day, hour, minute)


def _booking(id="b1", team_id="t1", start=10, end=11, name="Standup"):
    return ExistingBooking(id=id, team_id=team_id, start=_at(start), end=_at(end), event_name=name)


def test_overlapping_booking_conflicts():
    candidate = BookingCandidate(team_id="t1", start=_at(10, 30), end=_at(11, 30))
    result = check_conflict(candidate, [_booking()])
    assert result.has_conflict is True
    assert [b.id for b in result.conflicting_bookings] == ["b1"]


def test_touching_bookings_do_not_conflict():
    candidate = BookingCandidate(team_id="t1", start=_at(11), end=_at(12))
    assert check_conflict(candidate, [_booking()]).has_conflict is False


@pytest.mark.parametrize(
    "a, b",
    [
        ((9, 10), (10, 11)),
        ((9, 11), (10, 12)),
        ((10, 11), (10, 11)),
        ((9, 13), (10, 11)),
        ((8, 9), (12, 13)),
    ],
)
def test_conflict_is_symmetric(a, b):
    first = _booking(id="a", start=a[0], end=a[1])
    second = _booking(id="b", start=b[0], end=b[1])
    assert check_conflict(first, [second]).has_conflict == check_conflict(second, [first]).has_conflict


def test_other_teams_are_ignored():
    candidate = BookingCandidate(team_id="t2", start=_at(10), end=_at(11))
    assert check_conflict(candidate, [_booking()]).has_conflict is False


def test_booking_does_not_conflict_with_itself():
    candidate = BookingCandidate(id="b1", team_id="t1", start=_at(10), end=_at(11))
    assert check_conflict(candidate, [_booking()]).has_conflict is False


def test_unsaved_candidate_is_not_excluded():
    candidate = BookingCandidate(team_id="t1", start=_at(10), end=_at(11))
    existing = ExistingBooking(team_id="t1", start=_at(10), end=_at(11))
    assert check_conflict(candidate, [existing]).has_conflict is True


def test_legacy_and_unified_representations_agree():
    legacy = ExistingBooking(id="b1", team_id="t1", date="2026-01-15", start_time="10:00", end_time="11:00")
    unified = _booking()
    candidate = BookingCandidate(team_id="t1", start=_at(10, 30), end=_at(10, 45))
    assert check_conflict(candidate, [legacy]).has_conflict == check_conflict(candidate, [unified]).has_conflict
    assert resolve_time_range(time_ref_of(legacy)) == resolve_time_range(time_ref_of(unified))


def test_unified_pair_takes_precedence():
    booking = ExistingBooking(
        id="b1",
        team_id="t1",
        start=_at(14),
        end=_at(15),
        date="2026-01-15",
        start_time="10:00",
        end_time="11:00",
    )
    assert isinstance(time_ref_of(booking), UnifiedTimeRef)
    candidate = BookingCandidate(team_id="t1", start=_at(10), end=_at(11))
    assert check_conflict(candidate, [booking]).has_conflict is False


def test_legacy_whole_day_blocks_the_day():
    offsite = ExistingBooking(id="w", team_id="t1", date="2026-01-15", is_whole_day=True, event_name="Offsite")
    assert isinstance(time_ref_of(offsite), LegacyTimeRef)
    candidate = BookingCandidate(team_id="t1", start=_at(16), end=_at(17))
    assert check_conflict(candidate, [offsite]).has_conflict is True
    next_day = BookingCandidate(team_id="t1", start=_at(9, day=16), end=_at(10, day=16))
    assert check_conflict(next_day, [offsite]).has_conflict is False


def test_unresolvable_bookings_are_skipped():
    broken = ExistingBooking(id="x", team_id="t1", date="2026-01-15", start_time="10:00")
    candidate = BookingCandidate(team_id="t1", start=_at(10), end=_at(11))
    assert check_conflict(candidate, [broken, _booking()]).conflicting_bookings == [_booking()]


def test_unresolvable_candidate_never_conflicts():
    assert check_conflict(BookingCandidate(team_id="t1"), [_booking()]).has_conflict is False


def test_empty_existing_list():
    candidate = BookingCandidate(team_id="t1", start=_at(10), end=_at(11))
    result = check_conflict(candidate, [])
    assert result.has_conflict is False
    assert result.conflicting_bookings == []


def test_conflicts_keep_input_order():
    candidate = BookingCandidate(team_id="t1", start=_at(9), end=_at(17))
    existing = [_booking(id="late", start=15, end=16), _booking(id="early", start=9, end=10)]
    assert [b.id for b in check_conflict(candidate, existing).conflicting_bookings] == ["late", "early"]


def test_record_mappings_are_accepted():
    candidate = {
        "teamId": "t1",
        "startDateTime": "2026-01-15T10:30:00",
        "endDateTime": "2026-01-15T11:30:00",
    }
    existing = [
        {
            "id": "b1",
            "teamId": "t1",
            "eventName": "Standup",
            "date": "2026-01-15",
            "startTime": "10:00",
            "endTime": "11:00",
        }
    ]
    result = check_conflict(candidate, existing)
    assert result.has_conflict is True
    assert result.conflicting_bookings[0].event_name == "Standup"


def test_zoned_instants_compare_consistently():
    booking = ExistingBooking.from_record(
        {"id": "b1", "teamId": "t1", "startDateTime": "2026-01-15T10:00:00Z", "endDateTime": "2026-01-15T11:00:00Z"}
    )
    candidate = BookingCandidate.from_record(
        {"teamId": "t1", "startDateTime": "2026-01-15T10:30:00+00:00", "endDateTime": "2026-01-15T12:00:00+00:00"}
    )
    assert check_conflict(candidate, [booking]).has_conflict is True


def test_conflict_message():
    offsite = ExistingBooking(id="w", team_id="t1", date="2026-01-15", is_whole_day=True, event_name="Offsite")
    message = format_conflict_message([_booking(), offsite])
    assert message == 'This booking conflicts with: "Standup" (10:00 AM - 11:00 AM), "Offsite" (Whole Day)'
    assert format_conflict_message([]) == ""


def test_describe_unknown_time():
    assert describe_booking_time(ExistingBooking(id="x", team_id="t1")) == "Unknown time"


def test_record_round_trip_keys():
    record = _booking().to_record()
    assert record["teamId"] == "t1"
    assert record["eventName"] == "Standup"
    assert record["startDateTime"] == "2026-01-15T10:00:00"


# --- date utils ---

def test_date_formatting():
    assert format_date_to_iso(date(2026, 1, 5)) == "2026-01-05"
    assert format_date_for_display("2026-01-15") == "Jan 15, 2026"
    assert get_day_of_week("2026-01-15") == "Thursday"


@pytest.mark.parametrize(
    "value, expected",
    [("15:30", "3:30 PM"), ("00:05", "12:05 AM"), ("12:00", "12:00 PM"), ("", "")],
)
def test_format_time_12h(value, expected):
    assert format_time_12h(value) == expected


def test_is_past_date():
    assert is_past_date("2026-01-13", date(2026, 1, 14)) is True
    assert is_past_date("2026-01-14", date(2026, 1, 14)) is False


def test_multi_day_range_includes_dates():
    assert format_time_range(_at(0), datetime(2026, 1, 17, 23, 59, 59)) == (
        "Jan 15, 2026 12:00 AM - Jan 17, 2026 11:59 PM"
    )
