"""Prayer time computation: solar events, high-latitude safeguards and zone conversion."""

import logging
import math
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo

from pytz import FixedOffset, timezone, utc
from timezonefinder import TimezoneFinder

from prayertimes import astronomical
from prayertimes.calculation import CalculationParameters, PolarCircleResolution
from prayertimes.lookup import LookupProvider
from prayertimes.models import Coordinates, Prayer, PrayerTimes, TimeComponents
from prayertimes.solar_time import SolarTime

logger = logging.getLogger(__name__)

_tf = TimezoneFinder()

PRAYER_NAMES: tuple[str, ...] = ("fajr", "sunrise", "dhuhr", "asr", "maghrib", "isha")

# Polar resolution: latitudes at or beyond this are moved toward the equator in steps.
UNSAFE_LATITUDE = 65.0
LATITUDE_VARIATION_STEP = 0.5
MAX_DAY_SEARCH = math.ceil(365 / 2)


class PrayerTimesError(Exception):
    """Prayer times could not be computed for the given input."""


class PolarCircleError(PrayerTimesError):
    """The sun does not rise or set on the requested day and no resolution applies."""


class TimezoneNotFoundError(PrayerTimesError):
    """No IANA timezone could be resolved for the coordinates."""


class LookupConfigurationError(PrayerTimesError):
    """The lookup method was selected without a lookup provider."""


class LookupDataUnavailableError(Exception):
    """The lookup provider has no timetable entry for the requested date."""

    def __init__(self, day: date, coordinates: Coordinates, method: str) -> None:
        self.day = day
        self.coordinates = coordinates
        self.method = method
        super().__init__(
            f"No lookup prayer times for {day.isoformat()} "
            f"(lat={coordinates.latitude}, lng={coordinates.longitude}, method={method})"
        )


@dataclass(frozen=True)
class _SolarDay:
    """Solar events used for one calculation, possibly borrowed by a polar resolution."""

    day: date
    tomorrow: date
    coordinates: Coordinates
    solar_time: SolarTime
    tomorrow_solar_time: SolarTime


def _describe(coordinates: Coordinates, day: date, parameters: CalculationParameters) -> str:
    return (
        f"{day.isoformat()} lat={coordinates.latitude} lng={coordinates.longitude} "
        f"method={parameters.method.value}"
    )


def _solar_day(coordinates: Coordinates, day: date) -> _SolarDay:
    tomorrow = day + timedelta(days=1)
    return _SolarDay(
        day=day,
        tomorrow=tomorrow,
        coordinates=coordinates,
        solar_time=SolarTime(day, coordinates),
        tomorrow_solar_time=SolarTime(tomorrow, coordinates),
    )


def _aqrab_balad(coordinates: Coordinates, day: date) -> _SolarDay | None:
    """Nearest latitude (toward the equator) where the sun rises and sets."""
    latitude = coordinates.latitude
    while True:
        candidate = _solar_day(coordinates.with_latitude(latitude), day)
        if candidate.solar_time.is_valid and candidate.tomorrow_solar_time.is_valid:
            return candidate
        if abs(latitude) < UNSAFE_LATITUDE:
            return None
        latitude -= math.copysign(LATITUDE_VARIATION_STEP, latitude)


def _aqrab_yaum(coordinates: Coordinates, day: date) -> _SolarDay | None:
    """Nearest day (alternating after, before) where the sun rises and sets."""
    for days_added in range(1, MAX_DAY_SEARCH + 1):
        for direction in (1, -1):
            test_day = day + timedelta(days=direction * days_added)
            solar_time = SolarTime(test_day, coordinates)
            tomorrow_solar_time = SolarTime(test_day + timedelta(days=1), coordinates)
            if solar_time.is_valid and tomorrow_solar_time.is_valid:
                # Borrow that day's solar fractions; they are applied to the requested date.
                return _SolarDay(
                    day=day,
                    tomorrow=day + timedelta(days=1),
                    coordinates=coordinates,
                    solar_time=solar_time,
                    tomorrow_solar_time=tomorrow_solar_time,
                )
    return None


def _resolve_solar_day(
    coordinates: Coordinates, day: date, parameters: CalculationParameters
) -> _SolarDay:
    """Solar events for the day, applying the polar circle resolution when needed.

    Raises:
        PolarCircleError: If sunrise or sunset has no solution and cannot be resolved.
    """
    solar_day = _solar_day(coordinates, day)
    if solar_day.solar_time.is_valid and solar_day.tomorrow_solar_time.is_valid:
        return solar_day

    resolution = parameters.polar_circle_resolution
    resolved = None
    if resolution is PolarCircleResolution.AQRAB_BALAD:
        resolved = _aqrab_balad(coordinates, day)
    elif resolution is PolarCircleResolution.AQRAB_YAUM:
        resolved = _aqrab_yaum(coordinates, day)

    if resolved is None:
        raise PolarCircleError(
            f"Sun does not rise or set ({resolution.value}): "
            f"{_describe(coordinates, day, parameters)}"
        )
    logger.debug(
        "Polar resolution %s applied for %s: lat=%s, solar day=%s",
        resolution.value,
        day,
        resolved.coordinates.latitude,
        resolved.solar_time.day,
    )
    return resolved


def _to_utc(value: float, day: date) -> datetime:
    return TimeComponents.from_float(value).utc_datetime(day)


def _astronomical_times(
    coordinates: Coordinates, day: date, parameters: CalculationParameters
) -> tuple[dict[str, datetime], Coordinates]:
    """Unadjusted, unrounded UTC instants from solar astronomy plus safeguards.

    Returns:
        Instants keyed by prayer name, and the coordinates actually used.
    """
    solar_day = _resolve_solar_day(coordinates, day, parameters)
    solar_time = solar_day.solar_time
    latitude = solar_day.coordinates.latitude
    # Checked by _resolve_solar_day
    assert solar_time.sunrise is not None and solar_time.sunset is not None
    assert solar_day.tomorrow_solar_time.sunrise is not None

    dhuhr = _to_utc(solar_time.transit, day)
    sunrise = _to_utc(solar_time.sunrise, day)
    sunset = _to_utc(solar_time.sunset, day)
    tomorrow_sunrise = _to_utc(
        solar_day.tomorrow_solar_time.sunrise, solar_day.tomorrow
    )
    night_ms = (tomorrow_sunrise - sunset) // timedelta(milliseconds=1)

    # Asr lies strictly between transit and sunset. Near the polar night the noon
    # altitude barely clears the shadow altitude and the solver has no stable answer.
    asr_value = solar_time.afternoon(parameters.madhab.shadow_length)
    if asr_value is None or not solar_time.transit < asr_value < solar_time.sunset:
        logger.debug("Asr unresolved on %s, using midpoint of transit and sunset", day)
        asr_value = (solar_time.transit + solar_time.sunset) / 2
    asr = _to_utc(asr_value, day)

    year = day.year
    doy = astronomical.day_of_year(day)
    safeguard = parameters.safeguard()

    # Fajr: never earlier than the safeguard bound
    fajr_value = solar_time.hour_angle(-parameters.fajr_angle, False)
    fajr = _to_utc(fajr_value, day) if fajr_value is not None else None
    override = safeguard.fajr_override(latitude, sunrise, night_ms)
    if override is not None:
        fajr = override
    safe_fajr = safeguard.fajr_bound(latitude, doy, year, sunrise, night_ms)
    if fajr is None or fajr < safe_fajr or fajr >= sunrise:
        logger.debug("Fajr bounded by %s on %s", type(safeguard).__name__, day)
        fajr = safe_fajr

    # Isha: never later than the safeguard bound, unless it is a fixed interval
    if parameters.isha_interval > 0:
        isha = sunset + timedelta(minutes=parameters.isha_interval)
    else:
        isha_value = solar_time.hour_angle(-(parameters.isha_angle or 0.0), True)
        isha = _to_utc(isha_value, day) if isha_value is not None else None
        override = safeguard.isha_override(latitude, sunset, night_ms)
        if override is not None:
            isha = override
        safe_isha = safeguard.isha_bound(latitude, doy, year, sunset, night_ms)
        if isha is None or isha > safe_isha or isha <= sunset:
            logger.debug("Isha bounded by %s on %s", type(safeguard).__name__, day)
            isha = safe_isha

    maghrib = sunset
    if parameters.maghrib_angle is not None:
        maghrib_value = solar_time.hour_angle(-parameters.maghrib_angle, True)
        if maghrib_value is not None:
            angle_based = _to_utc(maghrib_value, day)
            if sunset < angle_based < isha:
                maghrib = angle_based

    times = {
        "fajr": fajr,
        "sunrise": sunrise,
        "dhuhr": dhuhr,
        "asr": asr,
        "maghrib": maghrib,
        "isha": isha,
    }
    return times, solar_day.coordinates


def _lookup_times(
    coordinates: Coordinates,
    day: date,
    parameters: CalculationParameters,
    lookup: LookupProvider | None,
) -> dict[str, datetime]:
    if lookup is None:
        raise LookupConfigurationError(
            f"Lookup provider required: {_describe(coordinates, day, parameters)}"
        )
    times = lookup.lookup(day)
    if times is None:
        raise LookupDataUnavailableError(day, coordinates, parameters.method.value)
    return times.utc_datetimes(day, lookup.timezone)


def round_to_minute(value: datetime) -> datetime:
    """Round to the nearest whole minute; 30 seconds or more rounds up."""
    rounded = value.replace(second=0, microsecond=0)
    if value.second >= 30:
        rounded += timedelta(minutes=1)
    return rounded


def resolve_timezone(
    coordinates: Coordinates,
    tz: str | tzinfo | None = None,
    utc_offset: timedelta | None = None,
    *,
    day: date | None = None,
    parameters: CalculationParameters | None = None,
) -> tzinfo:
    """Pick the output zone: fixed offset, explicit zone, or the observer's own zone.

    Args:
        coordinates: Observer position, used when neither tz nor utc_offset is given.
        tz: IANA zone name or tzinfo.
        utc_offset: Fixed offset from UTC in whole minutes; overrides tz.
        day: Date being computed, quoted in the error message.
        parameters: Parameters being used, quoted in the error message.

    Returns:
        A tzinfo.

    Raises:
        TimezoneNotFoundError: If no zone is known for the coordinates.
        ValueError: If utc_offset is not a whole number of minutes.
    """
    if utc_offset is not None:
        seconds = utc_offset.total_seconds()
        if seconds % 60:
            raise ValueError(f"utc_offset must be whole minutes: {utc_offset}")
        return FixedOffset(int(seconds // 60))
    if isinstance(tz, tzinfo):
        return tz
    if tz is not None:
        return timezone(tz)
    tz_str = _tf.timezone_at(lat=coordinates.latitude, lng=coordinates.longitude)
    if tz_str is None:
        where = f"lat={coordinates.latitude}, lng={coordinates.longitude}"
        if day is not None and parameters is not None:
            where = _describe(coordinates, day, parameters)
        raise TimezoneNotFoundError(f"Timezone not found: {where}")
    return timezone(tz_str)


def _finalize(
    raw: dict[str, datetime], parameters: CalculationParameters, out_tz: tzinfo
) -> dict[str, datetime]:
    """Apply adjustments, round in UTC, then express in the output zone.

    Each instant ends at least one minute after the one before it, so the
    canonical order holds whatever the adjustments are.
    """
    final = {}
    previous = None
    for name in PRAYER_NAMES:
        prayer = Prayer(name)
        minutes = parameters.adjustments.for_prayer(
            prayer
        ) + parameters.method_adjustments.for_prayer(prayer)
        adjusted = raw[name].astimezone(utc) + timedelta(minutes=minutes)
        moment = round_to_minute(adjusted)
        if previous is not None and moment <= previous:
            moment = previous + timedelta(minutes=1)
            logger.debug("%s moved to %s to keep prayer order", name, moment)
        final[name] = moment
        previous = moment
    return {name: moment.astimezone(out_tz) for name, moment in final.items()}


def compute_prayer_times(
    coordinates: Coordinates,
    day: date,
    parameters: CalculationParameters,
    *,
    tz: str | tzinfo | None = None,
    utc_offset: timedelta | None = None,
    lookup: LookupProvider | None = None,
) -> PrayerTimes:
    """Compute the six daily instants for one location and date.

    Args:
        coordinates: Observer position.
        day: Calendar date.
        parameters: Method, angles, madhab, high-latitude rule, and adjustments.
        tz: Output zone (name or tzinfo). Defaults to the observer's own zone.
        utc_offset: Fixed output offset; overrides tz.
        lookup: Timetable provider, required for the lookup method.

    Returns:
        PrayerTimes with timezone-aware, minute-rounded instants.

    Raises:
        LookupDataUnavailableError: Lookup method selected and the date is missing.
        LookupConfigurationError: Lookup method selected without a provider.
        PolarCircleError: No sunrise/sunset and PolarCircleResolution.UNRESOLVED.
        TimezoneNotFoundError: No tz or utc_offset given and no zone is known here.
    """
    out_tz = resolve_timezone(coordinates, tz, utc_offset, day=day, parameters=parameters)
    resolved = None
    if parameters.uses_lookup:
        raw = _lookup_times(coordinates, day, parameters, lookup)
    else:
        raw, resolved = _astronomical_times(coordinates, day, parameters)

    final = _finalize(raw, parameters, out_tz)
    return PrayerTimes(
        coordinates=coordinates,
        day=day,
        method=parameters.method.value,
        resolved_coordinates=resolved if resolved != coordinates else None,
        **final,
    )


def iter_prayer_times(
    coordinates: Coordinates,
    start: date,
    end: date,
    parameters: CalculationParameters,
    *,
    tz: str | tzinfo | None = None,
    utc_offset: timedelta | None = None,
    lookup: LookupProvider | None = None,
) -> Iterator[PrayerTimes]:
    """Yield one PrayerTimes per day from start to end inclusive."""
    out_tz = resolve_timezone(
        coordinates, tz, utc_offset, day=start, parameters=parameters
    )
    day = start
    while day <= end:
        yield compute_prayer_times(
            coordinates, day, parameters, tz=out_tz, lookup=lookup
        )
        day += timedelta(days=1)
