"""Sun's equatorial position for a single Julian day."""

import math
from dataclasses import dataclass

from prayertimes import astronomical


@dataclass(frozen=True)
class SolarCoordinates:
    """Equatorial coordinates of the sun at 0h UT of one Julian day."""

    declination: float  # Degrees
    right_ascension: float  # Degrees, [0, 360)
    apparent_longitude: float  # Degrees, [0, 360)
    apparent_sidereal_time: float  # Greenwich apparent sidereal time (degrees)

    @classmethod
    def from_julian_day(cls, jd: float) -> "SolarCoordinates":
        """Compute the sun's position for a Julian day.

        Args:
            jd: Julian day, normally at 0h UT.

        Returns:
            SolarCoordinates with declination, right ascension, apparent longitude,
            and apparent sidereal time.
        """
        t = astronomical.julian_century(jd)
        l0 = astronomical.mean_solar_longitude(t)
        lp = astronomical.mean_lunar_longitude(t)
        omega = astronomical.ascending_lunar_node_longitude(t)
        lam = astronomical.apparent_solar_longitude(t, l0)

        theta0 = astronomical.mean_sidereal_time(t)
        delta_psi = astronomical.nutation_in_longitude(t, l0, lp, omega)
        delta_eps = astronomical.nutation_in_obliquity(t, l0, lp, omega)

        eps0 = astronomical.mean_obliquity_of_the_ecliptic(t)
        eps_app = astronomical.apparent_obliquity_of_the_ecliptic(t, eps0)

        # Meeus eq. 12.4 correction to mean sidereal time
        sidereal = theta0 + (
            (delta_psi * 3600) * math.cos(math.radians(eps0 + delta_eps))
        ) / 3600

        return cls(
            declination=astronomical.declination(lam, eps_app),
            right_ascension=astronomical.right_ascension(lam, eps_app),
            apparent_longitude=lam,
            apparent_sidereal_time=sidereal,
        )
