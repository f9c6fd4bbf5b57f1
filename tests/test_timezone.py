from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from storeconfig.exceptions import InvalidZoneError
from storeconfig.timezone import TimezoneResolver, get_zone

DENVER = "America/Denver"


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=UTC)


def test_business_date_before_cutoff_belongs_to_previous_day() -> None:
    resolver = TimezoneResolver()

    # 11:59Z is 04:59 MST
    assert resolver.business_date(DENVER, _utc(2026, 1, 15, 11, 59)) == date(2026, 1, 14)
    assert resolver.business_date(DENVER, _utc(2026, 1, 15, 12, 0)) == date(2026, 1, 15)


def test_business_date_just_after_local_midnight() -> None:
    resolver = TimezoneResolver()

    # 07:30Z is 00:30 MST: still yesterday's business day
    assert resolver.business_date(DENVER, _utc(2026, 1, 16, 7, 30)) == date(2026, 1, 15)


def test_offset_follows_daylight_saving() -> None:
    resolver = TimezoneResolver()

    assert resolver.utc_offset_minutes(DENVER, _utc(2026, 1, 15, 18)) == -420
    assert resolver.utc_offset_minutes(DENVER, _utc(2026, 7, 15, 18)) == -360


def test_offset_on_spring_forward_day() -> None:
    resolver = TimezoneResolver()

    # Denver springs forward at 02:00 local on 2026-03-08 (09:00Z).
    before = _utc(2026, 3, 8, 8, 30)
    after = _utc(2026, 3, 8, 12, 0)

    assert resolver.utc_offset_minutes(DENVER, before) == -420
    assert resolver.business_date(DENVER, before) == date(2026, 3, 7)
    assert resolver.utc_offset_minutes(DENVER, after) == -360
    assert resolver.business_date(DENVER, after) == date(2026, 3, 8)


def test_fractional_offsets_are_preserved() -> None:
    resolver = TimezoneResolver()

    assert resolver.utc_offset_minutes("Asia/Kolkata", _utc(2026, 1, 15, 12)) == 330
    assert resolver.utc_offset_minutes("Asia/Kathmandu", _utc(2026, 1, 15, 12)) == 345


def test_utc_zone_has_zero_offset() -> None:
    assert TimezoneResolver().utc_offset_minutes("UTC", _utc(2026, 6, 1)) == 0


def test_business_timestamps_formats() -> None:
    resolver = TimezoneResolver()

    stamps = resolver.business_timestamps(DENVER, _utc(2026, 1, 15, 17, 30))

    assert stamps.business_date == "2026-01-15"
    assert stamps.modified_time_local == "2026-01-15T10:30:00"
    assert stamps.offset_minutes == -420
    assert stamps.model_dump(by_alias=True) == {
        "businessDate": "2026-01-15",
        "modifiedTimeLocal": "2026-01-15T10:30:00",
        "offsetMinutes": -420,
    }


def test_business_timestamps_before_cutoff_keeps_local_modified_time() -> None:
    stamps = TimezoneResolver().business_timestamps(DENVER, _utc(2026, 1, 15, 10, 15))

    assert stamps.business_date == "2026-01-14"
    assert stamps.modified_time_local == "2026-01-15T03:15:00"


def test_instant_defaults_to_injected_clock() -> None:
    resolver = TimezoneResolver(clock=lambda: _utc(2026, 7, 4, 10, 0))

    # 04:00 MDT
    assert resolver.business_date(DENVER) == date(2026, 7, 3)
    assert resolver.local_time(DENVER).hour == 4


def test_naive_instant_is_treated_as_utc() -> None:
    resolver = TimezoneResolver()

    assert resolver.local_time(DENVER, datetime(2026, 1, 15, 12, 0)).hour == 5


def test_custom_cutoff_hour() -> None:
    midnight = TimezoneResolver(cutoff_hour=0)
    four_am = TimezoneResolver(cutoff_hour=4)
    instant = _utc(2026, 1, 15, 11, 30)  # 04:30 MST

    assert midnight.business_date(DENVER, instant) == date(2026, 1, 15)
    assert four_am.business_date(DENVER, instant) == date(2026, 1, 15)
    assert TimezoneResolver().business_date(DENVER, instant) == date(2026, 1, 14)


@pytest.mark.parametrize("cutoff", [-1, 24])
def test_cutoff_hour_out_of_range_rejected(cutoff: int) -> None:
    with pytest.raises(ValueError):
        TimezoneResolver(cutoff_hour=cutoff)


@pytest.mark.parametrize("zone", ["Mars/Olympus_Mons", "", "   ", "../etc/passwd"])
def test_invalid_zone_raises(zone: str) -> None:
    with pytest.raises(InvalidZoneError):
        TimezoneResolver().business_timestamps(zone, _utc(2026, 1, 15, 12))


def test_invalid_zone_carries_identifier() -> None:
    with pytest.raises(InvalidZoneError) as excinfo:
        get_zone("America/Gotham")

    assert excinfo.value.zone == "America/Gotham"


def test_zone_names_are_stripped() -> None:
    assert get_zone(" America/Denver ").key == DENVER
