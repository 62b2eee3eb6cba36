"""Instants expressed as Julian dates with a caller-supplied UTC offset."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta, timezone
from typing import Optional, Tuple, Union

import erfa

from .errors import UnsupportedDateError

__all__ = ["Moment", "MomentLike", "as_moment", "civil_year_month"]

SECONDS_PER_DAY = 86_400.0


@dataclass(frozen=True)
class Moment:
    """An instant as an astronomical Julian date (UT).

    ``utc_offset`` only affects how the instant is rendered back into a
    civil datetime; two moments with the same ``julian_date`` are the same
    instant whatever their offsets.
    """

    julian_date: float
    utc_offset: timedelta = timedelta(0)

    @classmethod
    def from_datetime(cls, dt: datetime) -> "Moment":
        """Convert a timezone-aware datetime, keeping its UTC offset."""

        if dt.tzinfo is None or dt.utcoffset() is None:
            raise ValueError("datetime must be timezone-aware")
        dt_utc = dt.astimezone(UTC)
        djm0, djm = erfa.cal2jd(dt_utc.year, dt_utc.month, dt_utc.day)
        seconds = (
            dt_utc.hour * 3600
            + dt_utc.minute * 60
            + dt_utc.second
            + dt_utc.microsecond / 1_000_000
        )
        julian_date = float(djm0) + float(djm) + seconds / SECONDS_PER_DAY
        return cls(julian_date, dt.utcoffset())

    @classmethod
    def now(cls, local: bool = False) -> "Moment":
        """Current instant, in UTC or in the host's local offset."""

        current = datetime.now().astimezone() if local else datetime.now(UTC)
        return cls.from_datetime(current)

    def to_datetime(self) -> datetime:
        """Return an aware datetime expressed in ``utc_offset``."""

        year, month, day, fraction = _jd2cal(self.julian_date)
        try:
            midnight = datetime(year, month, day, tzinfo=UTC)
        except ValueError as exc:
            raise UnsupportedDateError(self.julian_date) from exc
        # A float Julian date resolves ~40 microseconds; keep milliseconds.
        seconds = round(fraction * SECONDS_PER_DAY, 3)
        instant = midnight + timedelta(seconds=seconds)
        return instant.astimezone(timezone(self.utc_offset))

    def with_offset(self, offset: timedelta) -> "Moment":
        return Moment(self.julian_date, offset)

    def days_since(self, other: "Moment") -> float:
        return self.julian_date - other.julian_date

    def isoformat(self) -> str:
        return self.to_datetime().isoformat()


MomentLike = Union[Moment, datetime]


def as_moment(value: Optional[MomentLike], local: bool = False) -> Moment:
    """Normalise a caller-supplied instant, defaulting to now."""

    if value is None:
        return Moment.now(local=local)
    if isinstance(value, Moment):
        return value
    if isinstance(value, datetime):
        return Moment.from_datetime(value)
    raise TypeError(f"Expected Moment or datetime, got {type(value).__name__}")


def civil_year_month(julian_date: float) -> Tuple[int, int]:
    """Gregorian year and month (UT) containing *julian_date*."""

    year, month, _, _ = _jd2cal(julian_date)
    return year, month


def _jd2cal(julian_date: float) -> Tuple[int, int, int, float]:
    try:
        year, month, day, fraction = erfa.jd2cal(julian_date, 0.0)
    except erfa.ErfaError as exc:
        raise UnsupportedDateError(julian_date) from exc
    return int(year), int(month), int(day), float(fraction)
