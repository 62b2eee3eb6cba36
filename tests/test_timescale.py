from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from lunar import ORBIT, LunarCalculationError, Moment, UnsupportedDateError
from lunar.timescale import as_moment, civil_year_month


def test_j2000_julian_date():
    moment = Moment.from_datetime(datetime(2000, 1, 1, 12, tzinfo=UTC))
    assert moment.julian_date == 2451545.0


def test_epoch_is_1980_january_zero():
    moment = Moment.from_datetime(datetime(1979, 12, 31, tzinfo=UTC))
    assert moment.julian_date == ORBIT.epoch


def test_offset_is_kept_and_rendered():
    tz = timezone(timedelta(hours=3))
    local = datetime(2007, 3, 4, 2, 17, 40, tzinfo=tz)
    moment = Moment.from_datetime(local)
    assert moment.utc_offset == timedelta(hours=3)
    rendered = moment.to_datetime()
    assert rendered.utcoffset() == timedelta(hours=3)
    assert abs((rendered - local).total_seconds()) < 0.001


def test_with_offset_keeps_instant():
    moment = Moment(2451545.0)
    shifted = moment.with_offset(timedelta(hours=-8))
    assert shifted.julian_date == moment.julian_date
    assert shifted.to_datetime() == moment.to_datetime()
    assert shifted.to_datetime().hour == 4


def test_naive_datetime_rejected():
    with pytest.raises(ValueError):
        Moment.from_datetime(datetime(2000, 1, 1))


def test_days_since():
    assert Moment(2451550.5).days_since(Moment(2451545.0)) == pytest.approx(5.5)


def test_as_moment_passthrough_and_default():
    moment = Moment(2451545.0)
    assert as_moment(moment) is moment
    assert as_moment(None).utc_offset == timedelta(0)


def test_civil_year_month():
    assert civil_year_month(2451545.0) == (2000, 1)
    assert civil_year_month(2451544.4) == (1999, 12)


@pytest.mark.parametrize(
    "when",
    [
        datetime(2000, 1, 21, 4, 40, tzinfo=UTC),
        datetime(1987, 6, 30, 23, 59, 59, tzinfo=UTC),
        datetime(2031, 11, 2, 7, 5, 1, tzinfo=timezone(timedelta(hours=-7))),
    ],
)
def test_whole_second_round_trip_is_exact(when: datetime):
    rendered = Moment.from_datetime(when).to_datetime()
    assert rendered == when
    assert rendered.isoformat() == when.isoformat()


def test_rendering_keeps_milliseconds():
    when = datetime(2015, 9, 28, 2, 47, 30, 250000, tzinfo=UTC)
    assert Moment.from_datetime(when).to_datetime() == when


def test_dates_before_calendar_range_are_typed():
    with pytest.raises(UnsupportedDateError) as info:
        civil_year_month(-100000.0)
    assert info.value.julian_date == -100000.0
    with pytest.raises(LunarCalculationError):
        Moment(-100000.0).to_datetime()
