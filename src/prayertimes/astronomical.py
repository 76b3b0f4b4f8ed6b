"""Low-precision solar astronomy: Julian day, solar longitude, obliquity, nutation, and transit solvers.

Formulas follow Jean Meeus, "Astronomical Algorithms" (2nd ed.). Every function is
pure; angles are in degrees unless a name says otherwise.
"""

import math
from datetime import date, datetime, timedelta

# --- Angle helpers ---


def normalize_to_scale(value: float, scale: float) -> float:
    """Wrap value into [0, scale)."""
    return value - scale * math.floor(value / scale)


def unwind_angle(angle: float) -> float:
    """Wrap an angle into [0, 360)."""
    return normalize_to_scale(angle, 360.0)


def closest_angle(angle: float) -> float:
    """Wrap an angle into [-180, 180]."""
    if -180.0 <= angle <= 180.0:
        return angle
    return angle - 360.0 * round(angle / 360.0)


# --- Calendar ---


def julian_day(year: int, month: int, day: int, hours: float = 0.0) -> float:
    """Julian day for a proleptic-Gregorian calendar date (Meeus ch. 7).

    Args:
        year: Calendar year.
        month: Month, 1-12.
        day: Day of month.
        hours: Fractional hours past midnight UTC.

    Returns:
        Continuous day count.
    """
    y = year if month > 2 else year - 1
    m = month if month > 2 else month + 12
    d = day + hours / 24.0

    a = int(y / 100)
    b = int(2 - a + int(a / 4))

    i0 = int(365.25 * (y + 4716))
    i1 = int(30.6001 * (m + 1))

    return i0 + i1 + d + b - 1524.5


def julian_century(jd: float) -> float:
    """Julian centuries since J2000.0."""
    return (jd - 2451545.0) / 36525.0


def is_leap_year(year: int) -> bool:
    if year % 4 != 0:
        return False
    if year % 100 == 0 and year % 400 != 0:
        return False
    return True


def day_of_year(day: date | datetime) -> int:
    return day.timetuple().tm_yday


# --- Solar position (Meeus ch. 22, 25) ---


def mean_solar_longitude(t: float) -> float:
    """Geometric mean longitude of the sun, L0."""
    term1 = 280.4664567
    term2 = 36000.76983 * t
    term3 = 0.0003032 * t**2
    return unwind_angle(term1 + term2 + term3)


def mean_lunar_longitude(t: float) -> float:
    """Geometric mean longitude of the moon, L'."""
    term1 = 218.3165
    term2 = 481267.8813 * t
    return unwind_angle(term1 + term2)


def ascending_lunar_node_longitude(t: float) -> float:
    """Longitude of the moon's ascending node, Ω."""
    term1 = 125.04452
    term2 = 1934.136261 * t
    term3 = 0.0020708 * t**2
    term4 = t**3 / 450000.0
    return unwind_angle(term1 - term2 + term3 + term4)


def mean_solar_anomaly(t: float) -> float:
    """Mean anomaly of the sun, M."""
    term1 = 357.52911
    term2 = 35999.05029 * t
    term3 = 0.0001537 * t**2
    return unwind_angle(term1 + term2 - term3)


def solar_equation_of_the_center(t: float, m: float) -> float:
    """Sun's equation of the centre, C."""
    m_rad = math.radians(m)
    term1 = (1.914602 - (0.004817 * t) - (0.000014 * t**2)) * math.sin(m_rad)
    term2 = (0.019993 - (0.000101 * t)) * math.sin(2 * m_rad)
    term3 = 0.000289 * math.sin(3 * m_rad)
    return term1 + term2 + term3


def apparent_solar_longitude(t: float, l0: float) -> float:
    """Apparent longitude of the sun, λ: true longitude corrected for aberration and nutation."""
    longitude = l0 + solar_equation_of_the_center(t, mean_solar_anomaly(t))
    omega = 125.04 - (1934.136 * t)
    lam = longitude - 0.00569 - (0.00478 * math.sin(math.radians(omega)))
    return unwind_angle(lam)


def mean_obliquity_of_the_ecliptic(t: float) -> float:
    """Mean obliquity of the ecliptic, ε0 (Meeus eq. 22.2)."""
    term1 = 23.439291
    term2 = 0.013004167 * t
    term3 = 0.0000001639 * t**2
    term4 = 0.0000005036 * t**3
    return term1 - term2 - term3 + term4


def apparent_obliquity_of_the_ecliptic(t: float, e0: float) -> float:
    """Obliquity corrected for the position of the lunar node."""
    o = 125.04 - (1934.136 * t)
    return e0 + (0.00256 * math.cos(math.radians(o)))


def mean_sidereal_time(t: float) -> float:
    """Mean sidereal time at Greenwich, θ0 (Meeus eq. 12.4)."""
    jd = (t * 36525) + 2451545.0
    term1 = 280.46061837
    term2 = 360.98564736629 * (jd - 2451545)
    term3 = 0.000387933 * t**2
    term4 = t**3 / 38710000
    return unwind_angle(term1 + term2 + term3 - term4)


def nutation_in_longitude(t: float, l0: float, lp: float, omega: float) -> float:
    """Nutation in longitude, Δψ, to 0.5 arc-second accuracy."""
    term1 = (-17.2 / 3600) * math.sin(math.radians(omega))
    term2 = (1.32 / 3600) * math.sin(2 * math.radians(l0))
    term3 = (0.23 / 3600) * math.sin(2 * math.radians(lp))
    term4 = (0.21 / 3600) * math.sin(2 * math.radians(omega))
    return term1 - term2 - term3 + term4


def nutation_in_obliquity(t: float, l0: float, lp: float, omega: float) -> float:
    """Nutation in obliquity, Δε, to 0.1 arc-second accuracy."""
    term1 = (9.2 / 3600) * math.cos(math.radians(omega))
    term2 = (0.57 / 3600) * math.cos(2 * math.radians(l0))
    term3 = (0.10 / 3600) * math.cos(2 * math.radians(lp))
    term4 = (0.09 / 3600) * math.cos(2 * math.radians(omega))
    return term1 + term2 + term3 - term4


def declination(apparent_longitude: float, obliquity: float) -> float:
    """Solar declination for an apparent longitude and obliquity, both in degrees."""
    lam = math.radians(apparent_longitude)
    eps = math.radians(obliquity)
    return math.degrees(math.asin(math.sin(eps) * math.sin(lam)))


def right_ascension(apparent_longitude: float, obliquity: float) -> float:
    """Solar right ascension in degrees, [0, 360)."""
    lam = math.radians(apparent_longitude)
    eps = math.radians(obliquity)
    return unwind_angle(
        math.degrees(math.atan2(math.cos(eps) * math.sin(lam), math.cos(lam)))
    )


def equation_of_time(jd: float) -> float:
    """Apparent minus mean solar time, in minutes (Meeus eq. 28.3)."""
    t = julian_century(jd)
    l0 = mean_solar_longitude(t)
    lp = mean_lunar_longitude(t)
    omega = ascending_lunar_node_longitude(t)
    e0 = mean_obliquity_of_the_ecliptic(t)
    eps = apparent_obliquity_of_the_ecliptic(t, e0)
    alpha = right_ascension(apparent_solar_longitude(t, l0), eps)
    delta_psi = nutation_in_longitude(t, l0, lp, omega)
    e = l0 - 0.0057183 - alpha + delta_psi * math.cos(math.radians(eps))
    return 4.0 * closest_angle(e)


def altitude_of_celestial_body(phi: float, delta: float, h: float) -> float:
    """Altitude of a body at latitude phi, declination delta, local hour angle h."""
    phi_r = math.radians(phi)
    delta_r = math.radians(delta)
    term1 = math.sin(phi_r) * math.sin(delta_r)
    term2 = math.cos(phi_r) * math.cos(delta_r) * math.cos(math.radians(h))
    return math.degrees(math.asin(max(-1.0, min(1.0, term1 + term2))))


# --- Interpolation (Meeus ch. 3) ---


def interpolate(y2: float, y1: float, y3: float, n: float) -> float:
    """Quadratic interpolation through yesterday (y1), today (y2), tomorrow (y3)."""
    a = y2 - y1
    b = y3 - y2
    c = b - a
    return y2 + ((n / 2) * (a + b + (n * c)))


def interpolate_angles(y2: float, y1: float, y3: float, n: float) -> float:
    """Same as interpolate, with differences unwound across 0/360."""
    a = unwind_angle(y2 - y1)
    b = unwind_angle(y3 - y2)
    c = b - a
    return y2 + ((n / 2) * (a + b + (n * c)))


# --- Rising, transit, setting (Meeus ch. 15) ---


def approximate_transit(longitude: float, sidereal_time: float, ra: float) -> float:
    """First estimate of transit as a fraction of the day."""
    lw = longitude * -1
    return normalize_to_scale((ra + lw - sidereal_time) / 360.0, 1.0)


def corrected_transit(
    m0: float,
    longitude: float,
    sidereal_time: float,
    ra: float,
    previous_ra: float,
    next_ra: float,
) -> float:
    """Transit refined with interpolated right ascension, in fractional UTC hours."""
    lw = longitude * -1
    theta = unwind_angle(sidereal_time + (360.985647 * m0))
    alpha = unwind_angle(interpolate_angles(ra, previous_ra, next_ra, m0))
    h = closest_angle(theta - lw - alpha)
    dm = h / -360.0
    return (m0 + dm) * 24.0


def corrected_hour_angle(
    m0: float,
    h0: float,
    latitude: float,
    longitude: float,
    after_transit: bool,
    sidereal_time: float,
    ra: float,
    previous_ra: float,
    next_ra: float,
    dec: float,
    previous_dec: float,
    next_dec: float,
) -> float | None:
    """Time the sun crosses altitude h0, in fractional UTC hours.

    Returns:
        Fractional hours, or None when the sun never reaches h0 on this day.
    """
    lw = longitude * -1
    phi = math.radians(latitude)
    term1 = math.sin(math.radians(h0)) - (math.sin(phi) * math.sin(math.radians(dec)))
    term2 = math.cos(phi) * math.cos(math.radians(dec))
    if term2 == 0:
        return None
    cos_h0 = term1 / term2
    if not -1.0 <= cos_h0 <= 1.0:
        return None
    hour_angle0 = math.degrees(math.acos(cos_h0))
    m = m0 + hour_angle0 / 360.0 if after_transit else m0 - hour_angle0 / 360.0
    theta = unwind_angle(sidereal_time + (360.985647 * m))
    alpha = unwind_angle(interpolate_angles(ra, previous_ra, next_ra, m))
    delta = interpolate(dec, previous_dec, next_dec, m)
    h = theta - lw - alpha
    altitude = altitude_of_celestial_body(latitude, delta, h)
    term3 = altitude - h0
    term4 = 360.0 * math.cos(math.radians(delta)) * math.cos(phi) * math.sin(math.radians(h))
    if term4 == 0:
        return m * 24.0
    dm = term3 / term4
    return (m + dm) * 24.0


# --- Seasonal twilight (Moonsighting Committee) ---


def days_since_solstice(day_of_year: int, year: int, latitude: float) -> int:
    """Days elapsed since the winter solstice of the observer's hemisphere."""
    northern_offset = 10
    leap = is_leap_year(year)
    southern_offset = 173 if leap else 172
    days_in_year = 366 if leap else 365

    if latitude >= 0:
        days = day_of_year + northern_offset
        if days >= days_in_year:
            days -= days_in_year
    else:
        days = day_of_year - southern_offset
        if days < 0:
            days += days_in_year
    return days


def _seasonal_adjustment(dyy: int, a: float, b: float, c: float, d: float) -> float:
    if dyy < 91:
        return a + (b - a) / 91.0 * dyy
    if dyy < 137:
        return b + (c - b) / 46.0 * (dyy - 91)
    if dyy < 183:
        return c + (d - c) / 46.0 * (dyy - 137)
    if dyy < 229:
        return d + (c - d) / 46.0 * (dyy - 183)
    if dyy < 275:
        return c + (b - c) / 46.0 * (dyy - 229)
    return b + (a - b) / 91.0 * (dyy - 275)


def season_adjusted_morning_twilight(
    latitude: float, day: int, year: int, sunrise: datetime
) -> datetime:
    """Earliest acceptable fajr for the seasonal-adjustment method.

    Args:
        latitude: Observer latitude.
        day: Day of year (1-based).
        year: Calendar year, for leap-year handling.
        sunrise: Today's sunrise.
    """
    lat = abs(latitude)
    a = 75 + ((28.65 / 55.0) * lat)
    b = 75 + ((19.44 / 55.0) * lat)
    c = 75 + ((32.74 / 55.0) * lat)
    d = 75 + ((48.10 / 55.0) * lat)
    adjustment = _seasonal_adjustment(days_since_solstice(day, year, latitude), a, b, c, d)
    return sunrise - timedelta(seconds=math.floor(adjustment * 60.0 + 0.5))


def season_adjusted_evening_twilight(
    latitude: float, day: int, year: int, sunset: datetime
) -> datetime:
    """Latest acceptable isha for the seasonal-adjustment method."""
    lat = abs(latitude)
    a = 75 + ((25.60 / 55.0) * lat)
    b = 75 + ((2.050 / 55.0) * lat)
    c = 75 - ((9.210 / 55.0) * lat)
    d = 75 + ((6.140 / 55.0) * lat)
    adjustment = _seasonal_adjustment(days_since_solstice(day, year, latitude), a, b, c, d)
    return sunset + timedelta(seconds=math.floor(adjustment * 60.0 + 0.5))
