"""Tests for the low-level astronomy functions, checked against Meeus worked examples."""

from datetime import date, datetime, timedelta

import pytest
from pytz import utc

from prayertimes import astronomical as astro
from prayertimes.solar_coordinates import SolarCoordinates


def test_julian_day_known_epochs() -> None:
    """J2000.0 and Meeus example 7.a."""
    assert astro.julian_day(2000, 1, 1, 12.0) == pytest.approx(2451545.0)
    assert astro.julian_day(1992, 10, 13) == pytest.approx(2448908.5)
    assert astro.julian_day(1957, 10, 4, 19.44) == pytest.approx(2436116.31)


def test_julian_day_hours_are_fractional_days() -> None:
    base = astro.julian_day(2010, 1, 2)
    assert astro.julian_day(2010, 1, 2, 6.0) == pytest.approx(base + 0.25)
    assert astro.julian_day(2010, 1, 3) == pytest.approx(base + 1.0)


def test_solar_position_meeus_example_25a() -> None:
    """1992-10-13 0h: the low-precision solar coordinates of Meeus example 25.a."""
    jd = astro.julian_day(1992, 10, 13)
    t = astro.julian_century(jd)
    l0 = astro.mean_solar_longitude(t)
    e0 = astro.mean_obliquity_of_the_ecliptic(t)
    e_app = astro.apparent_obliquity_of_the_ecliptic(t, e0)
    m = astro.mean_solar_anomaly(t)
    c = astro.solar_equation_of_the_center(t, m)
    lam = astro.apparent_solar_longitude(t, l0)

    assert t == pytest.approx(-0.072183436, abs=1e-9)
    assert l0 == pytest.approx(201.80720, abs=1e-4)
    assert e0 == pytest.approx(23.44023, abs=1e-4)
    assert e_app == pytest.approx(23.43999, abs=1e-4)
    assert m == pytest.approx(278.99397, abs=1e-4)
    assert c == pytest.approx(-1.89732, abs=1e-4)
    assert lam == pytest.approx(199.90895, abs=1e-4)

    assert astro.declination(lam, e_app) == pytest.approx(-7.78507, abs=1e-4)
    assert astro.right_ascension(lam, e_app) == pytest.approx(198.38083, abs=1e-4)

    solar = SolarCoordinates.from_julian_day(jd)
    assert solar.declination == pytest.approx(-7.78507, abs=1e-4)
    assert solar.right_ascension == pytest.approx(198.38083, abs=1e-4)
    assert solar.apparent_longitude == pytest.approx(lam)


def test_sidereal_time_and_nutation_meeus_example_12a() -> None:
    """1987-04-10 0h: mean and apparent sidereal time, nutation."""
    jd = astro.julian_day(1987, 4, 10)
    t = astro.julian_century(jd)
    l0 = astro.mean_solar_longitude(t)
    lp = astro.mean_lunar_longitude(t)
    omega = astro.ascending_lunar_node_longitude(t)
    e0 = astro.mean_obliquity_of_the_ecliptic(t)
    delta_psi = astro.nutation_in_longitude(t, l0, lp, omega)
    delta_eps = astro.nutation_in_obliquity(t, l0, lp, omega)

    assert astro.mean_sidereal_time(t) == pytest.approx(197.693195, abs=1e-5)
    assert omega == pytest.approx(11.2531, abs=1e-3)
    assert delta_psi == pytest.approx(-0.0010522, abs=1e-3)
    assert delta_eps == pytest.approx(0.0026230556, abs=1e-3)
    assert e0 == pytest.approx(23.4409463889, abs=1e-3)
    assert e0 + delta_eps == pytest.approx(23.4435694444, abs=1e-3)

    solar = SolarCoordinates.from_julian_day(jd)
    assert solar.apparent_sidereal_time == pytest.approx(197.6922295833, abs=1e-3)


def test_equation_of_time_meeus_example_28b() -> None:
    """1992-10-13: apparent minus mean time is 13m42.6s."""
    jd = astro.julian_day(1992, 10, 13)
    assert astro.equation_of_time(jd) == pytest.approx(13.71, abs=0.2)


@pytest.mark.parametrize(
    "day, sign",
    [
        (date(2023, 2, 11), -1),  # Near the February minimum (about -14 min)
        (date(2023, 11, 3), 1),  # Near the November maximum (about +16 min)
    ],
)
def test_equation_of_time_seasonal_extremes(day: date, sign: int) -> None:
    eot = astro.equation_of_time(astro.julian_day(day.year, day.month, day.day))
    assert 13.0 < sign * eot < 17.0


def test_altitude_of_celestial_body_meeus_example_13b() -> None:
    assert astro.altitude_of_celestial_body(
        38.9213889, -6.7198055556, 64.352133
    ) == pytest.approx(15.1249, abs=1e-3)


def test_rising_and_transit_meeus_example_15a() -> None:
    """Venus at Boston, 1988-03-20: transit 0.81980 and rising 0.51766 of a day."""
    latitude, longitude = 42.3333, -71.0833
    sidereal = 177.74208
    ra1, ra2, ra3 = 40.68021, 41.73129, 42.78204
    dec1, dec2, dec3 = 18.04761, 18.44092, 18.82742

    m0 = astro.approximate_transit(longitude, sidereal, ra2)
    assert m0 == pytest.approx(0.81965, abs=1e-5)

    transit = astro.corrected_transit(m0, longitude, sidereal, ra2, ra1, ra3) / 24
    assert transit == pytest.approx(0.81980, abs=1e-5)

    rise = astro.corrected_hour_angle(
        m0, -0.5667, latitude, longitude, False, sidereal, ra2, ra1, ra3, dec2, dec1, dec3
    )
    assert rise is not None
    assert rise / 24 == pytest.approx(0.51766, abs=1e-4)


def test_corrected_hour_angle_returns_none_when_angle_unreachable() -> None:
    """The sun never sinks 18° below the horizon at 70°N around the June solstice."""
    result = astro.corrected_hour_angle(
        0.5, -18.0, 70.0, 0.0, True, 0.0, 90.0, 89.0, 91.0, 23.44, 23.43, 23.44
    )
    assert result is None


def test_interpolate_meeus_example_3a() -> None:
    assert astro.interpolate(0.877366, 0.884226, 0.870531, 4.35 / 24) == pytest.approx(
        0.876125, abs=1e-6
    )


def test_interpolate_angles_across_zero() -> None:
    """Yesterday 359°, today 1°, tomorrow 3°: halfway to tomorrow is 2°, not ~180°."""
    assert astro.interpolate_angles(1.0, 359.0, 3.0, 0.5) == pytest.approx(2.0)
    assert astro.interpolate_angles(1.0, 359.0, 3.0, -0.5) == pytest.approx(0.0)


@pytest.mark.parametrize(
    "angle, expected",
    [(-45, 315), (361, 1), (259, 259), (2340, 180), (-360, 0), (720, 0)],
)
def test_unwind_angle(angle: float, expected: float) -> None:
    assert astro.unwind_angle(angle) == pytest.approx(expected)


@pytest.mark.parametrize(
    "angle, expected",
    [(360, 0), (361, 1), (-361, -1), (-180, -180), (180, 180), (270, -90), (-270, 90)],
)
def test_closest_angle(angle: float, expected: float) -> None:
    assert astro.closest_angle(angle) == pytest.approx(expected)


def test_normalize_to_scale() -> None:
    assert astro.normalize_to_scale(2.5, 1) == pytest.approx(0.5)
    assert astro.normalize_to_scale(-0.25, 1) == pytest.approx(0.75)


@pytest.mark.parametrize(
    "year, leap", [(2000, True), (1900, False), (2016, True), (2015, False), (2100, False)]
)
def test_is_leap_year(year: int, leap: bool) -> None:
    assert astro.is_leap_year(year) is leap


def test_day_of_year() -> None:
    assert astro.day_of_year(date(2023, 1, 1)) == 1
    assert astro.day_of_year(date(2016, 12, 31)) == 366
    assert astro.day_of_year(datetime(2015, 12, 31, 23, 59)) == 365


@pytest.mark.parametrize(
    "day_of_year, year, latitude, expected",
    [
        (1, 2023, 10.0, 11),
        (355, 2015, 1.0, 0),  # Wraps at the northern solstice offset
        (366, 2016, 1.0, 10),
        (1, 2023, -10.0, 194),  # 1 - 172 + 365
        (172, 2015, -1.0, 0),
        (173, 2016, -1.0, 0),
        (365, 2016, -1.0, 192),
        (1, 2016, -1.0, 194),  # 1 - 173 + 366
    ],
)
def test_days_since_solstice(
    day_of_year: int, year: int, latitude: float, expected: int
) -> None:
    assert astro.days_since_solstice(day_of_year, year, latitude) == expected


def test_season_adjusted_twilight_is_constant_at_equator() -> None:
    """At 0° every breakpoint collapses to 75 minutes."""
    sunrise = datetime(2023, 3, 1, 6, 0, tzinfo=utc)
    sunset = datetime(2023, 3, 1, 18, 0, tzinfo=utc)
    for day in (1, 100, 200, 300):
        fajr = astro.season_adjusted_morning_twilight(0.0, day, 2023, sunrise)
        isha = astro.season_adjusted_evening_twilight(0.0, day, 2023, sunset)
        assert sunrise - fajr == timedelta(minutes=75)
        assert isha - sunset == timedelta(minutes=75)


def test_season_adjusted_twilight_grows_with_latitude() -> None:
    sunrise = datetime(2023, 6, 21, 4, 0, tzinfo=utc)
    low = astro.season_adjusted_morning_twilight(20.0, 172, 2023, sunrise)
    high = astro.season_adjusted_morning_twilight(50.0, 172, 2023, sunrise)
    assert high < low < sunrise
