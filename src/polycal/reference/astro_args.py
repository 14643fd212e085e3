from __future__ import annotations

from math import fmod


# ------------------------------------------------------------
# Units & helpers
# ------------------------------------------------------------

def wrap_deg(x_deg: float) -> float:
    """Wrap degrees to [0,360)."""
    # avoid slow % for huge values; fmod is fine
    y = fmod(x_deg, 360.0)
    if y < 0:
        y += 360.0
    return y

# ------------------------------------------------------------
# Time variable (TT)
# ------------------------------------------------------------

J2000_TT = 2451545.0  # JD(TT) at J2000.0
MEAN_SYNODIC_MONTH = 29.530588861
JDE_NEW_MOON_K0 = 2451550.09766  # mean new moon of 2000-01-06 (Meeus k = 0)


def T_centuries(jd_tt: float) -> float:
    """Julian centuries from J2000.0 in TT."""
    return (jd_tt - J2000_TT) / 36525.0


def lunation_T(k: float) -> float:
    """Meeus' approximation of T for lunation k (ch. 49)."""
    return k / 1236.85


def jde_mean_new_moon(k: float) -> float:
    """
    Mean Julian Ephemeris Day (TT) of the k-th new moon relative to 2000.

    Commonly cited Meeus mean-phase polynomial:
      JDE = 2451550.09766 + 29.530588861 k
            + 0.00015437 T^2 - 0.000000150 T^3 + 0.00000000073 T^4,
      T = k / 1236.85.
    """
    T = lunation_T(k)
    T2 = T * T
    T3 = T2 * T
    T4 = T2 * T2
    return (
        JDE_NEW_MOON_K0
        + MEAN_SYNODIC_MONTH * k
        + 0.00015437 * T2
        - 0.000000150 * T3
        + 0.00000000073 * T4
    )


def eccentricity_factor(T: float) -> float:
    """
    Eccentricity factor E for the Earth's orbit.
    Used to scale analytical lunar perturbations that depend on
    the Sun's mean anomaly.
    """
    return 1.0 - 0.002516 * T - 0.0000074 * (T * T)


def lunation_of_jd(jd: float) -> int:
    """Nearest Meeus lunation index for a Julian Date."""
    return round((jd - JDE_NEW_MOON_K0) / MEAN_SYNODIC_MONTH)
