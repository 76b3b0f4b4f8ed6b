"""Data model definitions with explicit boundaries between input, solar, and result layers."""

import enum
import math
from dataclasses import InitVar, dataclass, field
from datetime import date, datetime, timedelta

from pytz import utc


class InvalidCoordinatesError(ValueError):
    """Latitude or longitude outside the valid range."""


@dataclass(frozen=True)
class Coordinates:
    """Observer position. Validated on construction unless validate=False."""

    latitude: float  # Decimal degrees, [-90, 90]
    longitude: float  # Decimal degrees, [-180, 180]
    validate: InitVar[bool] = True

    def __post_init__(self, validate: bool) -> None:
        if not validate:
            return
        if not -90.0 <= self.latitude <= 90.0:
            raise InvalidCoordinatesError(
                f"Latitude out of range: {self.latitude} (expected -90..90)"
            )
        if not -180.0 <= self.longitude <= 180.0:
            raise InvalidCoordinatesError(
                f"Longitude out of range: {self.longitude} (expected -180..180)"
            )

    def with_latitude(self, latitude: float) -> "Coordinates":
        return Coordinates(latitude, self.longitude, validate=False)


class Prayer(enum.Enum):
    """The six daily instants, in chronological order, plus NONE."""

    NONE = "none"
    FAJR = "fajr"
    SUNRISE = "sunrise"
    DHUHR = "dhuhr"
    ASR = "asr"
    MAGHRIB = "maghrib"
    ISHA = "isha"


@dataclass(frozen=True)
class PrayerAdjustments:
    """Signed minute offsets added to each instant after computation."""

    fajr: int = 0
    sunrise: int = 0
    dhuhr: int = 0
    asr: int = 0
    maghrib: int = 0
    isha: int = 0

    def for_prayer(self, prayer: Prayer) -> int:
        if prayer is Prayer.NONE:
            return 0
        return getattr(self, prayer.value)


@dataclass(frozen=True)
class TimeComponents:
    """Fractional hours split into whole hours, minutes, and seconds."""

    hours: int
    minutes: int
    seconds: int

    @classmethod
    def from_float(cls, value: float) -> "TimeComponents":
        """Truncate fractional hours the same way for every solar event.

        Values below 0 or above 24 are kept as-is so the resulting datetime
        rolls into the neighbouring day.
        """
        hours = math.floor(value)
        minutes = math.floor((value - hours) * 60.0)
        seconds = math.floor((value - (hours + minutes / 60.0)) * 60.0 * 60.0)
        return cls(hours=hours, minutes=minutes, seconds=seconds)

    def utc_datetime(self, day: date) -> datetime:
        midnight = datetime(day.year, day.month, day.day, tzinfo=utc)
        return midnight + timedelta(
            hours=self.hours, minutes=self.minutes, seconds=self.seconds
        )


_ORDER: tuple[Prayer, ...] = (
    Prayer.FAJR,
    Prayer.SUNRISE,
    Prayer.DHUHR,
    Prayer.ASR,
    Prayer.MAGHRIB,
    Prayer.ISHA,
)


@dataclass(frozen=True)
class PrayerTimes:
    """Final result for one (coordinates, date, parameters) triple.

    Every instant is timezone-aware and rounded to the whole minute.
    """

    fajr: datetime
    sunrise: datetime
    dhuhr: datetime
    asr: datetime
    maghrib: datetime
    isha: datetime
    coordinates: Coordinates
    day: date
    method: str  # CalculationMethod value the result was computed with
    resolved_coordinates: Coordinates | None = field(default=None, compare=False)

    def time_for_prayer(self, prayer: Prayer) -> datetime | None:
        if prayer is Prayer.NONE:
            return None
        return getattr(self, prayer.value)

    def as_tuple(self) -> tuple[datetime, ...]:
        return tuple(getattr(self, p.value) for p in _ORDER)

    def current_prayer(self, at: datetime) -> Prayer:
        """Return the latest prayer whose instant is at or before `at`.

        Args:
            at: Timezone-aware moment to test.

        Returns:
            The current Prayer, or Prayer.NONE before fajr.

        Raises:
            ValueError: If `at` is naive. Naive moments are never assumed to be UTC.
        """
        if at.tzinfo is None or at.utcoffset() is None:
            raise ValueError(f"current_prayer needs a timezone-aware datetime, got {at!r}")
        for prayer in reversed(_ORDER):
            if getattr(self, prayer.value) <= at:
                return prayer
        return Prayer.NONE

    def next_prayer(self, at: datetime) -> Prayer:
        """Return the first prayer strictly after `at`, or Prayer.NONE after isha.

        Raises ValueError for a naive `at`, like current_prayer.
        """
        current = self.current_prayer(at)
        if current is Prayer.NONE:
            return Prayer.FAJR
        if current is Prayer.ISHA:
            return Prayer.NONE
        return _ORDER[_ORDER.index(current) + 1]
