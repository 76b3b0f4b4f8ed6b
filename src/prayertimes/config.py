"""Environment-driven defaults for callers that do not build parameters by hand.

Variables (read from the process environment, after loading a .env file):

    PRAYERTIMES_METHOD               CalculationMethod value, default "muslim_world_league"
    PRAYERTIMES_MADHAB               "shafi" | "hanafi"
    PRAYERTIMES_HIGH_LATITUDE_RULE   HighLatitudeRule value
    PRAYERTIMES_POLAR_RESOLUTION     PolarCircleResolution value
    PRAYERTIMES_TIMEZONE             IANA zone for output; empty = observer's zone
    PRAYERTIMES_LOOKUP_FILE          JSON timetable for the lookup method
    PRAYERTIMES_LOOKUP_TIMEZONE      Zone of that timetable, default "Europe/London"
"""

import os
from dataclasses import dataclass
from functools import cached_property

from dotenv import find_dotenv, load_dotenv

from prayertimes.calculation import (
    CalculationMethod,
    CalculationParameters,
    HighLatitudeRule,
    Madhab,
    PolarCircleResolution,
)
from prayertimes.lookup import LONDON_TIMEZONE, JsonLookupProvider


class ConfigError(ValueError):
    """Invalid configuration value."""


def _enum_value(enum_cls, name: str, raw: str | None, default):
    if not raw:
        return default
    try:
        return enum_cls(raw.strip().lower())
    except ValueError as e:
        choices = ", ".join(m.value for m in enum_cls)
        raise ConfigError(f"{name}={raw!r} is not one of: {choices}") from e


@dataclass(frozen=True)
class Settings:
    """Resolved configuration. Build with Settings.from_env()."""

    method: CalculationMethod = CalculationMethod.MUSLIM_WORLD_LEAGUE
    madhab: Madhab = Madhab.SHAFI
    high_latitude_rule: HighLatitudeRule = HighLatitudeRule.MIDDLE_OF_THE_NIGHT
    polar_circle_resolution: PolarCircleResolution = PolarCircleResolution.AQRAB_BALAD
    timezone: str | None = None
    lookup_file: str | None = None
    lookup_timezone: str = LONDON_TIMEZONE

    @classmethod
    def from_env(cls, load_dotenv_file: bool = True) -> "Settings":
        """Read settings from the environment.

        Args:
            load_dotenv_file: Load a .env file first (existing variables win).

        Raises:
            ConfigError: If an enum variable holds an unknown value.
        """
        if load_dotenv_file:
            load_dotenv(find_dotenv(usecwd=True))
        env = os.environ
        return cls(
            method=_enum_value(
                CalculationMethod,
                "PRAYERTIMES_METHOD",
                env.get("PRAYERTIMES_METHOD"),
                cls.method,
            ),
            madhab=_enum_value(
                Madhab, "PRAYERTIMES_MADHAB", env.get("PRAYERTIMES_MADHAB"), cls.madhab
            ),
            high_latitude_rule=_enum_value(
                HighLatitudeRule,
                "PRAYERTIMES_HIGH_LATITUDE_RULE",
                env.get("PRAYERTIMES_HIGH_LATITUDE_RULE"),
                cls.high_latitude_rule,
            ),
            polar_circle_resolution=_enum_value(
                PolarCircleResolution,
                "PRAYERTIMES_POLAR_RESOLUTION",
                env.get("PRAYERTIMES_POLAR_RESOLUTION"),
                cls.polar_circle_resolution,
            ),
            timezone=env.get("PRAYERTIMES_TIMEZONE") or None,
            lookup_file=env.get("PRAYERTIMES_LOOKUP_FILE") or None,
            lookup_timezone=env.get("PRAYERTIMES_LOOKUP_TIMEZONE") or LONDON_TIMEZONE,
        )

    def parameters(self) -> CalculationParameters:
        return self.method.parameters(
            madhab=self.madhab,
            high_latitude_rule=self.high_latitude_rule,
            polar_circle_resolution=self.polar_circle_resolution,
        )

    @cached_property
    def lookup_provider(self) -> JsonLookupProvider | None:
        """Timetable loaded once from lookup_file, or None when unset."""
        if self.lookup_file is None:
            return None
        return JsonLookupProvider.from_file(self.lookup_file, timezone=self.lookup_timezone)
