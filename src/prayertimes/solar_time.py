"""Solar events for one calendar day at one location: transit, sunrise, sunset and angle crossings.

All times are fractional hours after 0h UTC of the given date. A return value of
None means the sun never reaches the requested altitude on that day.
"""

import math
from datetime import date

from prayertimes import astronomical
from prayertimes.models import Coordinates
from prayertimes.solar_coordinates import SolarCoordinates

# Mean refraction (34') plus the apparent solar radius (16')
SUNRISE_ALTITUDE = -50.0 / 60.0


class SolarTime:
    """Solar transit, sunrise, and sunset for a date, plus a generic angle solver.

    Yesterday's and tomorrow's solar coordinates are kept so that right ascension
    and declination can be interpolated at any fraction of the day.
    """

    def __init__(self, day: date, coordinates: Coordinates) -> None:
        self.day = day
        self.coordinates = coordinates

        jd = astronomical.julian_day(day.year, day.month, day.day, 0)
        self.previous_solar = SolarCoordinates.from_julian_day(jd - 1)
        self.solar = SolarCoordinates.from_julian_day(jd)
        self.next_solar = SolarCoordinates.from_julian_day(jd + 1)

        self.approx_transit = astronomical.approximate_transit(
            coordinates.longitude,
            self.solar.apparent_sidereal_time,
            self.solar.right_ascension,
        )
        self.transit: float = astronomical.corrected_transit(
            self.approx_transit,
            coordinates.longitude,
            self.solar.apparent_sidereal_time,
            self.solar.right_ascension,
            self.previous_solar.right_ascension,
            self.next_solar.right_ascension,
        )
        self.sunrise: float | None = self.hour_angle(SUNRISE_ALTITUDE, False)
        self.sunset: float | None = self.hour_angle(SUNRISE_ALTITUDE, True)

    @property
    def is_valid(self) -> bool:
        """True when the sun rises before transit and sets after it on this day."""
        return (
            self.sunrise is not None
            and self.sunset is not None
            and self.sunrise < self.transit < self.sunset
        )

    def hour_angle(self, angle: float, after_transit: bool) -> float | None:
        """Time the sun crosses `angle` degrees of altitude.

        Args:
            angle: Target altitude in degrees (negative below the horizon).
            after_transit: Pick the afternoon crossing instead of the morning one.

        Returns:
            Fractional UTC hours, or None if the altitude is never reached.
        """
        return astronomical.corrected_hour_angle(
            self.approx_transit,
            angle,
            self.coordinates.latitude,
            self.coordinates.longitude,
            after_transit,
            self.solar.apparent_sidereal_time,
            self.solar.right_ascension,
            self.previous_solar.right_ascension,
            self.next_solar.right_ascension,
            self.solar.declination,
            self.previous_solar.declination,
            self.next_solar.declination,
        )

    def afternoon(self, shadow_length: float) -> float | None:
        """Time an object's shadow reaches `shadow_length` times its height plus the noon shadow."""
        tangent = abs(self.coordinates.latitude - self.solar.declination)
        inverse = shadow_length + math.tan(math.radians(tangent))
        angle = math.degrees(math.atan(1.0 / inverse))
        return self.hour_angle(angle, True)
