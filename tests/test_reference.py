# tests/test_reference.py

import pytest

from polycal.reference import astro_args as aa
from polycal.reference import deltat, moon


def test_meeus_example_47a_time_and_eccentricity():
    """
    Jean Meeus, Astronomical Algorithms (2nd Ed), Example 47.a.
    Date: 1992 April 12, 0h TD (TT).
    """
    T = aa.T_centuries(2448724.5)
    assert T == pytest.approx(-0.077221081451, abs=1e-12)
    assert aa.eccentricity_factor(T) == pytest.approx(1.000194, abs=1e-6)


def test_meeus_example_49a_new_moon():
    """
    Example 49.a: the new moon of 1977 February (k = -283),
    1977 Feb 18, 3h37m40s TD.
    """
    assert aa.lunation_T(-283) == pytest.approx(-0.22881, abs=1e-5)
    assert aa.jde_mean_new_moon(-283) == pytest.approx(2443192.94102, abs=1e-5)
    assert moon.jde_true_new_moon(-283) == pytest.approx(2443192.65118, abs=1e-4)


def test_new_moon_in_ut():
    jde = moon.jde_true_new_moon(-283)
    jd = moon.jd_ut_true_new_moon(-283)
    # Delta T was about 48 s in 1977
    assert (jde - jd) * 86400.0 == pytest.approx(48.0, abs=2.0)


def test_lunation_index():
    assert aa.lunation_of_jd(aa.JDE_NEW_MOON_K0) == 0
    assert aa.lunation_of_jd(2443192.65) == -283
    assert aa.lunation_of_jd(2443192.65 + 10.0) == -283


@pytest.mark.parametrize("x,expected", [(-30.0, 330.0), (720.5, 0.5), (359.0, 359.0), (0.0, 0.0)])
def test_wrap_deg(x, expected):
    assert aa.wrap_deg(x) == pytest.approx(expected)


def test_delta_t():
    assert deltat.delta_t_em2006(2000.0) == pytest.approx(63.86, abs=0.01)
    assert deltat.delta_t_em2006(1900.0) == pytest.approx(-2.79, abs=0.1)
    # the long-term parabola
    assert deltat.delta_t_em2006(-1000.0) == pytest.approx(-20.0 + 32.0 * 28.2 ** 2, rel=1e-9)
    assert deltat.decimal_year_of_jd(2451545.0) == 2000.0
    assert deltat.delta_t_seconds_for_jd(2451545.0) == pytest.approx(63.86, abs=0.01)
