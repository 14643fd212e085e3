"""
polycal.core.time
-----------------
The epoch-day clock: a signed day count since 1972-01-01 (JDN 2441318), shared by
every calendar in the package, plus proleptic Gregorian/Julian day-number helpers.
"""

from __future__ import annotations
from datetime import date
from typing import Tuple

EPOCH_JDN = 2441318          # 1972-01-01 (proleptic Gregorian)
JD_UNIX_EPOCH = 2440587.5    # 1970-01-01T00:00 UTC


def gregorian_to_jdn(y: int, m: int, d: int) -> int:
    """Proleptic Gregorian date to Julian Day Number (floor arithmetic, any year)."""
    a = (14 - m) // 12
    y2 = y + 4800 - a
    m2 = m + 12 * a - 3
    return d + (153 * m2 + 2) // 5 + 365 * y2 + y2 // 4 - y2 // 100 + y2 // 400 - 32045

def jdn_to_gregorian(jdn: int) -> Tuple[int, int, int]:
    """Fliegel-Van Flandern inverse of gregorian_to_jdn."""
    a = jdn + 32044
    b = (4 * a + 3) // 146097
    c = a - (146097 * b) // 4
    d = (4 * c + 3) // 1461
    e = c - (1461 * d) // 4
    m = (5 * e + 2) // 153
    day = e - (153 * m + 2) // 5 + 1
    month = m + 3 - 12 * (m // 10)
    year = 100 * b + d - 4800 + (m // 10)
    return year, month, day

def julian_to_jdn(y: int, m: int, d: int) -> int:
    """Proleptic Julian date to Julian Day Number."""
    a = (14 - m) // 12
    y2 = y + 4800 - a
    m2 = m + 12 * a - 3
    return d + (153 * m2 + 2) // 5 + 365 * y2 + y2 // 4 - 32083

def jdn_to_julian(jdn: int) -> Tuple[int, int, int]:
    c = jdn + 32082
    d = (4 * c + 3) // 1461
    e = c - (1461 * d) // 4
    m = (5 * e + 2) // 153
    day = e - (153 * m + 2) // 5 + 1
    month = m + 3 - 12 * (m // 10)
    year = d - 4800 + (m // 10)
    return year, month, day

def is_gregorian_leap(y: int) -> bool:
    return (y % 4 == 0) and ((y % 100 != 0) or (y % 400 == 0))

def is_julian_leap(y: int) -> bool:
    return y % 4 == 0

# ============================================================
# Epoch-day conversions
# ============================================================

def jdn_to_epoch_day(jdn: int) -> int:
    return jdn - EPOCH_JDN

def epoch_day_to_jdn(epoch_day: int) -> int:
    return epoch_day + EPOCH_JDN

def gregorian_epoch_day(y: int, m: int, d: int) -> int:
    return gregorian_to_jdn(y, m, d) - EPOCH_JDN

def julian_epoch_day(y: int, m: int, d: int) -> int:
    return julian_to_jdn(y, m, d) - EPOCH_JDN

def to_epoch_day(d: date) -> int:
    """Gregorian `datetime.date` to epoch-day."""
    return gregorian_to_jdn(d.year, d.month, d.day) - EPOCH_JDN

def from_epoch_day(epoch_day: int) -> date:
    """Epoch-day to Gregorian `datetime.date` (years 1..9999 only)."""
    return date(*jdn_to_gregorian(epoch_day + EPOCH_JDN))

def jd_to_epoch_day(jd: float, offset_hours: float = 0.0) -> int:
    """
    Local calendar day containing the continuous Julian Date `jd` (UT),
    for a zone `offset_hours` east of Greenwich.
    """
    local = jd + offset_hours / 24.0 + 0.5
    return int(local // 1) - EPOCH_JDN

def iso_weekday(epoch_day: int) -> int:
    """ISO day of week (Monday=1 .. Sunday=7); 1972-01-01 was a Saturday."""
    return (epoch_day + 5) % 7 + 1
