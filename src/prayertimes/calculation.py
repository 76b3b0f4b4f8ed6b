"""Calculation configuration: methods, madhab, high-latitude policies and parameters."""

import enum
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta

from prayertimes import astronomical
from prayertimes.models import Coordinates, PrayerAdjustments


class Madhab(enum.Enum):
    """School of jurisprudence; selects the asr shadow length."""

    SHAFI = "shafi"
    HANAFI = "hanafi"

    @property
    def shadow_length(self) -> int:
        return 2 if self is Madhab.HANAFI else 1


class HighLatitudeRule(enum.Enum):
    """Fraction of the night that bounds fajr and isha."""

    MIDDLE_OF_THE_NIGHT = "middle_of_the_night"
    SEVENTH_OF_THE_NIGHT = "seventh_of_the_night"
    TWILIGHT_ANGLE = "twilight_angle"

    @classmethod
    def recommended(cls, coordinates: Coordinates) -> "HighLatitudeRule":
        if abs(coordinates.latitude) > 48:
            return cls.SEVENTH_OF_THE_NIGHT
        return cls.MIDDLE_OF_THE_NIGHT


class PolarCircleResolution(enum.Enum):
    """What to do when the sun does not rise or set on the requested day."""

    AQRAB_BALAD = "aqrab_balad"  # Nearest latitude where it does
    AQRAB_YAUM = "aqrab_yaum"  # Nearest day where it does
    UNRESOLVED = "unresolved"  # Raise PolarCircleError


@dataclass(frozen=True)
class NightPortions:
    """Fraction of the night used for the fajr and isha bounds."""

    fajr: float
    isha: float


# --- Safeguard policies ---


@dataclass(frozen=True)
class NightPortionSafeguard:
    """Bound fajr/isha to a fixed fraction of the night before sunrise / after sunset."""

    portions: NightPortions

    def fajr_override(
        self, latitude: float, sunrise: datetime, night_ms: int
    ) -> datetime | None:
        return None

    def isha_override(
        self, latitude: float, sunset: datetime, night_ms: int
    ) -> datetime | None:
        return None

    def fajr_bound(
        self, latitude: float, day_of_year: int, year: int, sunrise: datetime, night_ms: int
    ) -> datetime:
        return sunrise - timedelta(seconds=int(self.portions.fajr * night_ms / 1000))

    def isha_bound(
        self, latitude: float, day_of_year: int, year: int, sunset: datetime, night_ms: int
    ) -> datetime:
        return sunset + timedelta(seconds=int(self.portions.isha * night_ms / 1000))


@dataclass(frozen=True)
class SeasonalSafeguard:
    """Moonsighting Committee bounds: seasonal twilight curves, seventh of the night above 55°."""

    override_latitude: float = 55.0

    def fajr_override(
        self, latitude: float, sunrise: datetime, night_ms: int
    ) -> datetime | None:
        if latitude < self.override_latitude:
            return None
        return sunrise - timedelta(seconds=night_ms // 7000)

    def isha_override(
        self, latitude: float, sunset: datetime, night_ms: int
    ) -> datetime | None:
        if latitude < self.override_latitude:
            return None
        return sunset + timedelta(seconds=night_ms // 7000)

    def fajr_bound(
        self, latitude: float, day_of_year: int, year: int, sunrise: datetime, night_ms: int
    ) -> datetime:
        return astronomical.season_adjusted_morning_twilight(
            latitude, day_of_year, year, sunrise
        )

    def isha_bound(
        self, latitude: float, day_of_year: int, year: int, sunset: datetime, night_ms: int
    ) -> datetime:
        return astronomical.season_adjusted_evening_twilight(
            latitude, day_of_year, year, sunset
        )


Safeguard = NightPortionSafeguard | SeasonalSafeguard


# --- Parameters ---


@dataclass(frozen=True)
class CalculationParameters:
    """Everything the engine needs besides location and date. Immutable; share freely."""

    method: "CalculationMethod"
    fajr_angle: float
    isha_angle: float | None = None
    isha_interval: int = 0  # Minutes after sunset; used instead of isha_angle when > 0
    maghrib_angle: float | None = None
    madhab: Madhab = Madhab.SHAFI
    high_latitude_rule: HighLatitudeRule = HighLatitudeRule.MIDDLE_OF_THE_NIGHT
    polar_circle_resolution: PolarCircleResolution = PolarCircleResolution.AQRAB_BALAD
    adjustments: PrayerAdjustments = field(default_factory=PrayerAdjustments)
    method_adjustments: PrayerAdjustments = field(default_factory=PrayerAdjustments)

    @property
    def uses_lookup(self) -> bool:
        return self.method is CalculationMethod.UNIFIED_LONDON_TIMES

    def night_portions(self) -> NightPortions:
        if self.high_latitude_rule is HighLatitudeRule.SEVENTH_OF_THE_NIGHT:
            return NightPortions(fajr=1 / 7, isha=1 / 7)
        if self.high_latitude_rule is HighLatitudeRule.TWILIGHT_ANGLE:
            return NightPortions(
                fajr=self.fajr_angle / 60.0, isha=(self.isha_angle or 0.0) / 60.0
            )
        return NightPortions(fajr=1 / 2, isha=1 / 2)

    def safeguard(self) -> Safeguard:
        """Pick the fajr/isha bounding policy for this method, once per calculation."""
        if self.method is CalculationMethod.MOON_SIGHTING_COMMITTEE:
            return SeasonalSafeguard()
        return NightPortionSafeguard(self.night_portions())

    def with_adjustments(self, **minutes: int) -> "CalculationParameters":
        """Copy with user adjustments replaced, e.g. ``with_adjustments(fajr=10)``."""
        return replace(self, adjustments=replace(self.adjustments, **minutes))

    def with_method_adjustments(self, **minutes: int) -> "CalculationParameters":
        return replace(
            self, method_adjustments=replace(self.method_adjustments, **minutes)
        )


class CalculationMethod(enum.Enum):
    """Named presets of twilight angles and built-in minute adjustments."""

    MUSLIM_WORLD_LEAGUE = "muslim_world_league"
    EGYPTIAN = "egyptian"
    KARACHI = "karachi"
    UMM_AL_QURA = "umm_al_qura"
    DUBAI = "dubai"
    MOON_SIGHTING_COMMITTEE = "moon_sighting_committee"
    NORTH_AMERICA = "north_america"
    KUWAIT = "kuwait"
    QATAR = "qatar"
    SINGAPORE = "singapore"
    TURKEY = "turkey"
    TEHRAN = "tehran"
    MOROCCO = "morocco"
    OTHER = "other"
    UNIFIED_LONDON_TIMES = "unified_london_times"  # Times come from a lookup provider

    def parameters(self, **overrides) -> CalculationParameters:
        """Build the preset parameters for this method.

        Args:
            **overrides: Any CalculationParameters field, e.g. madhab=Madhab.HANAFI.

        Returns:
            A new CalculationParameters.
        """
        preset = dict(_PRESETS[self])
        if "method_adjustments" in preset:
            preset["method_adjustments"] = PrayerAdjustments(**preset["method_adjustments"])
        preset.update(overrides)
        return CalculationParameters(method=self, **preset)


_PRESETS: dict[CalculationMethod, dict] = {
    CalculationMethod.MUSLIM_WORLD_LEAGUE: {
        "fajr_angle": 18.0,
        "isha_angle": 17.0,
        "method_adjustments": {"dhuhr": 1},
    },
    CalculationMethod.EGYPTIAN: {
        "fajr_angle": 19.5,
        "isha_angle": 17.5,
        "method_adjustments": {"dhuhr": 1},
    },
    CalculationMethod.KARACHI: {
        "fajr_angle": 18.0,
        "isha_angle": 18.0,
        "method_adjustments": {"dhuhr": 1},
    },
    CalculationMethod.UMM_AL_QURA: {"fajr_angle": 18.5, "isha_interval": 90},
    CalculationMethod.DUBAI: {
        "fajr_angle": 18.2,
        "isha_angle": 18.2,
        "method_adjustments": {"sunrise": -3, "dhuhr": 3, "asr": 3, "maghrib": 3},
    },
    CalculationMethod.MOON_SIGHTING_COMMITTEE: {
        "fajr_angle": 18.0,
        "isha_angle": 18.0,
        "method_adjustments": {"dhuhr": 5, "maghrib": 3},
    },
    CalculationMethod.NORTH_AMERICA: {
        "fajr_angle": 15.0,
        "isha_angle": 15.0,
        "method_adjustments": {"dhuhr": 1},
    },
    CalculationMethod.KUWAIT: {"fajr_angle": 18.0, "isha_angle": 17.5},
    CalculationMethod.QATAR: {"fajr_angle": 18.0, "isha_interval": 90},
    CalculationMethod.SINGAPORE: {
        "fajr_angle": 20.0,
        "isha_angle": 18.0,
        "method_adjustments": {"dhuhr": 1},
    },
    CalculationMethod.TURKEY: {
        "fajr_angle": 18.0,
        "isha_angle": 17.0,
        "method_adjustments": {"sunrise": -7, "dhuhr": 5, "asr": 4, "maghrib": 7},
    },
    CalculationMethod.TEHRAN: {
        "fajr_angle": 17.7,
        "isha_angle": 14.0,
        "maghrib_angle": 4.5,
    },
    CalculationMethod.MOROCCO: {
        "fajr_angle": 19.0,
        "isha_angle": 17.0,
        "method_adjustments": {"sunrise": -3, "dhuhr": 5, "maghrib": 5},
    },
    CalculationMethod.OTHER: {"fajr_angle": 0.0, "isha_angle": 0.0},
    # Angles are unused placeholders; the lookup provider supplies the times.
    CalculationMethod.UNIFIED_LONDON_TIMES: {"fajr_angle": 0.0, "isha_angle": 0.0},
}
