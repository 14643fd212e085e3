"""
polycal.reference.deltat

ΔT (= TT − UT1) for converting ephemeris new-moon instants to civil time.

Uses the Espenak–Meeus (NASA) piecewise polynomials from the Five Millennium Canon,
valid across roughly −1999..+3000, which covers every lunisolar table this package
builds. No tabulated IERS data is consulted: calendar days only need ΔT to within
a minute or so.
"""

from __future__ import annotations

from typing import Tuple


# ---------------------------------------------------------------------------
# Utilities
# ---------------------------------------------------------------------------

def decimal_year_of_jd(jd: float) -> float:
    """Decimal year of a Julian Date, using the mean Julian year around J2000."""
    return 2000.0 + (jd - 2451545.0) / 365.25


# ---------------------------------------------------------------------------
# Espenak–Meeus (NASA) piecewise polynomial
# ---------------------------------------------------------------------------

def _poly(u: float, coeffs: Tuple[float, ...]) -> float:
    """Horner evaluation for Σ coeffs[k] u^k."""
    acc = 0.0
    for c in reversed(coeffs):
        acc = acc * u + c
    return acc


def delta_t_em2006(y: float, *, apply_correction_c: bool = False) -> float:
    """
    Espenak–Meeus piecewise polynomial ΔT(y) in seconds.

    y is the decimal year (often y = year + (month-0.5)/12).
    The branch polynomials match those published by NASA for the Five Millennium Canon.

    apply_correction_c:
        If True, apply the lunar-secular-acceleration correction
        c = -0.000012932 (y-1955)^2 outside 1955..2005, as described
        in the Canon documentation. (Many users can leave this False.)
    """
    # (11) and (25): long-term parabola
    if y < -500.0:
        u = (y - 1820.0) / 100.0
        dt = -20.0 + 32.0 * u * u
    elif y < 500.0:
        # (12): u = y/100
        u = y / 100.0
        dt = _poly(u, (
            10583.6,
            -1014.41,
            33.78311,
            -5.952053,
            -0.1798452,
            0.022174192,
            0.0090316521,
        ))
    elif y < 1600.0:
        # (13): u=(y-1000)/100
        u = (y - 1000.0) / 100.0
        dt = _poly(u, (
            1574.2,
            -556.01,
            71.23472,
            0.319781,
            -0.8503463,
            -0.005050998,
            0.0083572073,
        ))
    elif y < 1700.0:
        # (14): t = y-1600
        t = y - 1600.0
        dt = 120.0 - 0.9808 * t - 0.01532 * t * t + (t ** 3) / 7129.0
    elif y < 1800.0:
        # (15): t=y-1700
        t = y - 1700.0
        dt = 8.83 + 0.1603 * t - 0.0059285 * t * t + 0.00013336 * (t ** 3) - (t ** 4) / 1174000.0
    elif y < 1860.0:
        # (16): t=y-1800
        t = y - 1800.0
        dt = _poly(t, (
            13.72,
            -0.332447,
            0.0068612,
            0.0041116,
            -0.00037436,
            0.0000121272,
            -0.0000001699,
            0.000000000875,
        ))
    elif y < 1900.0:
        # (17): t=y-1860
        t = y - 1860.0
        dt = 7.62 + 0.5737 * t - 0.251754 * (t ** 2) + 0.01680668 * (t ** 3) - 0.0004473624 * (t ** 4) + (t ** 5) / 233174.0
    elif y < 1920.0:
        # (18): t=y-1900
        t = y - 1900.0
        dt = -2.79 + 1.494119 * t - 0.0598939 * (t ** 2) + 0.0061966 * (t ** 3) - 0.000197 * (t ** 4)
    elif y < 1941.0:
        # (19): t=y-1920
        t = y - 1920.0
        dt = 21.20 + 0.84493 * t - 0.076100 * (t ** 2) + 0.0020936 * (t ** 3)
    elif y < 1961.0:
        # (20): t=y-1950
        t = y - 1950.0
        dt = 29.07 + 0.407 * t - (t ** 2) / 233.0 + (t ** 3) / 2547.0
    elif y < 1986.0:
        # (21): t=y-1975
        t = y - 1975.0
        dt = 45.45 + 1.067 * t - (t ** 2) / 260.0 - (t ** 3) / 718.0
    elif y < 2005.0:
        # (22): t=y-2000
        t = y - 2000.0
        dt = _poly(t, (
            63.86,
            0.3345,
            -0.060374,
            0.0017275,
            0.000651814,
            0.00002373599,
        ))
    elif y < 2050.0:
        # (23): t=y-2000
        t = y - 2000.0
        dt = 62.92 + 0.32217 * t + 0.005589 * (t ** 2)
    elif y < 2150.0:
        # (24): discontinuity-fix term
        u = (y - 1820.0) / 100.0
        dt = -20.0 + 32.0 * u * u - 0.5628 * (2150.0 - y)
    else:
        u = (y - 1820.0) / 100.0
        dt = -20.0 + 32.0 * u * u

    if apply_correction_c and (y < 1955.0 or y > 2005.0):
        dt += -0.000012932 * (y - 1955.0) ** 2

    return float(dt)


def delta_t_seconds_for_jd(jd: float) -> float:
    """ΔT in seconds at a Julian Date (TT or UT; the difference is immaterial here)."""
    return delta_t_em2006(decimal_year_of_jd(jd))
