"""
polycal.engines.lunisolar
-------------------------
Month starts of East Asian lunisolar calendars: each month begins on the local civil
day containing a true new moon. The number of months per year (12, or 13 with a leap
month) is supplied by the caller, so this layer never decides leap placement.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Mapping, Optional

import numpy as np

from polycal.core.errors import ResourceFormatError
from polycal.core.time import epoch_day_to_jdn, jd_to_epoch_day
from polycal.engines.tables import MonthTable
from polycal.reference.astro_args import lunation_of_jd
from polycal.reference.moon import jd_ut_true_new_moon

log = logging.getLogger(__name__)

# offset (hours east of Greenwich) as a function of the UT Julian Date
OffsetFn = Callable[[float], float]


def lmt_offset_hours(longitude_deg_east: float) -> float:
    """Local mean time offset from UT."""
    return longitude_deg_east / 15.0


def switched_offset(before_hours: float, after_hours: float, switch_epoch_day: int) -> OffsetFn:
    """
    Offset that changes from `before_hours` to `after_hours` on the local day
    `switch_epoch_day` (as counted in the new zone).
    """
    def offset(jd_ut: float) -> float:
        if jd_to_epoch_day(jd_ut, after_hours) >= switch_epoch_day:
            return after_hours
        return before_hours
    return offset


def new_moon_day(k: int, offset: OffsetFn, overrides: Optional[Mapping[int, int]] = None) -> int:
    """Local epoch-day of the true new moon of lunation k."""
    jd = jd_ut_true_new_moon(k)
    day = jd_to_epoch_day(jd, offset(jd))
    if overrides and day in overrides:
        log.debug("new moon %d: documented override %d -> %d", k, day, overrides[day])
        day = overrides[day]
    return day


def nearest_lunation(epoch_day: int, offset: OffsetFn, overrides: Optional[Mapping[int, int]] = None) -> int:
    """Lunation whose new moon falls on `epoch_day`, or the closest one before it."""
    k = lunation_of_jd(float(epoch_day_to_jdn(epoch_day)))
    while new_moon_day(k, offset, overrides) > epoch_day:
        k -= 1
    while new_moon_day(k + 1, offset, overrides) <= epoch_day:
        k += 1
    return k


def build_lunisolar_table(
    variant: str,
    min_year: int,
    max_year: int,
    first_lunation: int,
    leap_month_of: Callable[[int], Optional[int]],
    offset: OffsetFn,
    *,
    overrides: Optional[Mapping[int, int]] = None,
    version: str = "computed",
) -> MonthTable:
    """
    Lay consecutive lunations, starting with `first_lunation`, over the years
    min_year..max_year (13 months where `leap_month_of` names a leap month).
    """
    leap_months: Dict[int, int] = {}
    year_index: List[int] = [0]
    for year in range(min_year, max_year + 1):
        leap = leap_month_of(year)
        if leap is not None:
            leap_months[year] = leap
        year_index.append(year_index[-1] + (13 if leap is not None else 12))

    total = year_index[-1]
    starts = np.fromiter(
        (new_moon_day(first_lunation + i, offset, overrides) for i in range(total + 1)),
        dtype=np.int64,
        count=total + 1,
    )
    lengths = np.diff(starts)
    bad = np.flatnonzero((lengths < 29) | (lengths > 30))
    if bad.size:
        raise ResourceFormatError(f"Implausible lunar month length in {variant} at month index {int(bad[0])}")

    log.debug("computed lunisolar table %s: years %d..%d, %d months", variant, min_year, max_year, total)
    return MonthTable(
        variant=variant,
        version=version,
        min_year=min_year,
        max_year=max_year,
        starts=starts,
        lengths=lengths,
        year_index=np.asarray(year_index, dtype=np.int64),
        leap_months=leap_months,
    )
