"""
polycal.reference.moon
----------------------
True new moons after Meeus, Astronomical Algorithms (2nd ed.), ch. 49.

Accuracy is a few seconds of time for modern dates, which is enough to place the
civil day of a new moon except in the rare cases where it falls within seconds of
local midnight (those are handled as literal data by the calendars).
"""

from __future__ import annotations

import math
from typing import Tuple

from .astro_args import eccentricity_factor, jde_mean_new_moon, lunation_T, wrap_deg
from .deltat import delta_t_seconds_for_jd

# periodic terms for the new moon: coefficient, E-power, multipliers of M, M', F
_V_NEW: Tuple[float, ...] = (
    -0.40720, 0.17241, 0.01608, 0.01039, 0.00739, -0.00514, 0.00208, -0.00111,
    -0.00057, 0.00056, -0.00042, 0.00042, 0.00038, -0.00024, -0.00007, 0.00004,
    0.00004, 0.00003, 0.00003, -0.00003, 0.00003, -0.00002, -0.00002, 0.00002,
)
_W: Tuple[int, ...] = (0, 1, 0, 0, 1, 1, 2, 0, 0, 1, 0, 1, 1, 1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0)
_X: Tuple[int, ...] = (0, 1, 0, 0, -1, 1, 2, 0, 0, 1, 0, 1, 1, -1, 2, 0, 3, 1, 0, 1, -1, -1, 1, 0)
_Y: Tuple[int, ...] = (1, 0, 2, 0, 1, 1, 0, 1, 1, 2, 3, 0, 0, 2, 1, 2, 0, 1, 2, 1, 1, 1, 3, 4)
_Z: Tuple[int, ...] = (0, 0, 0, 2, 0, 0, 0, -2, 2, 0, 0, 2, -2, 0, 0, -2, 0, -2, 2, 2, 2, -2, 0, 0)

# planetary arguments A1..A14: (constant, k-rate, coefficient)
_PLANETARY: Tuple[Tuple[float, float, float], ...] = (
    (299.77, 0.107408, 0.000325),
    (251.88, 0.016321, 0.000165),
    (251.83, 26.651886, 0.000164),
    (349.42, 36.412478, 0.000126),
    (84.66, 18.206239, 0.000110),
    (141.74, 53.303771, 0.000062),
    (207.14, 2.453732, 0.000060),
    (154.84, 7.306860, 0.000056),
    (34.52, 27.261239, 0.000047),
    (207.19, 0.121824, 0.000042),
    (291.34, 1.844379, 0.000040),
    (161.72, 24.198154, 0.000037),
    (239.56, 25.513099, 0.000035),
    (331.55, 3.592518, 0.000023),
)


def jde_true_new_moon(k: int) -> float:
    """Julian Ephemeris Day (TT) of the true new moon of lunation k (k=0: 2000-01-06)."""
    T = lunation_T(k)
    T2 = T * T
    jde = jde_mean_new_moon(k)

    E = eccentricity_factor(T)
    M = math.radians(wrap_deg(2.5534 + 29.1053567 * k - (0.0000014 + 0.00000011 * T) * T2))
    Mp = math.radians(wrap_deg(
        201.5643 + 385.81693528 * k + (0.0107582 + (0.00001238 - 0.000000058 * T) * T) * T2))
    F = math.radians(wrap_deg(
        160.7108 + 390.67050284 * k + (-0.0016118 + (-0.00000227 + 0.000000011 * T) * T) * T2))
    Omega = math.radians(wrap_deg(124.7746 - 1.56375588 * k + (0.0020672 + 0.00000215 * T) * T2))

    corr = -0.00017 * math.sin(Omega)
    for v, w, x, y, z in zip(_V_NEW, _W, _X, _Y, _Z):
        if w == 1:
            v *= E
        elif w == 2:
            v *= E * E
        corr += v * math.sin(x * M + y * Mp + z * F)

    # A1 carries an extra T^2 term
    for i, (a0, a1, coeff) in enumerate(_PLANETARY):
        arg = a0 + a1 * k
        if i == 0:
            arg -= 0.009173 * T2
        corr += coeff * math.sin(math.radians(wrap_deg(arg)))

    return jde + corr


def jd_ut_true_new_moon(k: int) -> float:
    """True new moon of lunation k as a Julian Date in UT (ΔT removed)."""
    jde = jde_true_new_moon(k)
    return jde - delta_t_seconds_for_jd(jde) / 86400.0
