"""
polycal.engines.arithmetic
--------------------------
Closed-form solar calendars: Coptic (era of the martyrs) and the Indian national
calendar (Saka era). Both directions are O(1); month and year lengths come from the
same leap predicate used by the transform, never from a table.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from polycal.core.errors import InvalidDate, OutOfRange
from polycal.core.time import (
    gregorian_epoch_day,
    is_gregorian_leap,
    jdn_to_gregorian,
    julian_epoch_day,
    epoch_day_to_jdn,
)

# ============================================================
# Coptic
# ============================================================

# 284-08-29 (proleptic Julian), start of the era of Diocletian
DIOCLETIAN = julian_epoch_day(284, 8, 29)
COPTIC_MAX_YEAR = 9999


@dataclass(frozen=True)
class CopticDate:
    year: int
    month: int
    day: int

    @property
    def era(self) -> str:
        return "ANNO_MARTYRUM"

    def __str__(self) -> str:
        return f"A.M.-{self.year:04d}-{self.month:02d}-{self.day:02d}"


class CopticCalendar:
    """Twelve 30-day months plus a 5/6-day epagomenal month 13; leap when year % 4 == 3."""

    variant = "coptic"

    def __init__(self) -> None:
        self._max = self._to_days(COPTIC_MAX_YEAR, 13, self.length_of_month(COPTIC_MAX_YEAR, 13))

    @property
    def min_epoch_day(self) -> int:
        return DIOCLETIAN

    @property
    def max_epoch_day(self) -> int:
        return self._max

    @property
    def min_year(self) -> int:
        return 1

    @property
    def max_year(self) -> int:
        return COPTIC_MAX_YEAR

    def is_leap_year(self, year: int) -> bool:
        return year % 4 == 3

    def length_of_month(self, year: int, month: int) -> int:
        if month == 13:
            return 6 if self.is_leap_year(year) else 5
        if 1 <= month <= 12:
            return 30
        raise InvalidDate(f"Coptic month out of range: {month}")

    def length_of_year(self, year: int) -> int:
        return 366 if self.is_leap_year(year) else 365

    def months(self, year: int) -> List[int]:
        return list(range(1, 14))

    def is_valid(self, year: int, month: int, day: int) -> bool:
        return (
            (1 <= year <= COPTIC_MAX_YEAR)
            and (1 <= month <= 13)
            and (1 <= day <= self.length_of_month(year, month))
        )

    def year_of(self, date: CopticDate) -> int:
        return date.year

    def create(self, year: int, month: int, day: int) -> CopticDate:
        if not (1 <= year <= COPTIC_MAX_YEAR):
            raise OutOfRange(f"Coptic year out of range: {year}")
        if not self.is_valid(year, month, day):
            raise InvalidDate(f"Invalid Coptic date: {year}-{month}-{day}")
        return CopticDate(year, month, day)

    def _to_days(self, y: int, m: int, d: int) -> int:
        return DIOCLETIAN - 1 + 365 * (y - 1) + y // 4 + 30 * (m - 1) + d

    def to_epoch_day(self, date: CopticDate) -> int:
        self.create(date.year, date.month, date.day)
        return self._to_days(date.year, date.month, date.day)

    def from_epoch_day(self, epoch_day: int) -> CopticDate:
        if not (DIOCLETIAN <= epoch_day <= self._max):
            raise OutOfRange(f"Out of Coptic range: {epoch_day}")
        y = (4 * (epoch_day - DIOCLETIAN) + 1463) // 1461
        start = self._to_days(y, 1, 1)
        m = (epoch_day - start) // 30 + 1
        d = epoch_day - start - 30 * (m - 1) + 1
        return CopticDate(y, m, d)


# ============================================================
# Indian national calendar
# ============================================================

SAKA_OFFSET = 78
INDIAN_MAX_YEAR = 9999 - SAKA_OFFSET


@dataclass(frozen=True)
class IndianDate:
    year: int
    month: int
    day: int

    @property
    def era(self) -> str:
        return "SAKA"

    def __str__(self) -> str:
        return f"Saka-{self.year:04d}-{self.month:02d}-{self.day:02d}"


class IndianCalendar:
    """
    Saka year Y starts on March 22 of Gregorian year Y+78 (March 21 if that is a leap
    year). Month 1 has 31 days in a Gregorian leap year, else 30; months 2..6 have 31,
    months 7..12 have 30. The last supported year ends on 9999-12-31.
    """

    variant = "indian"

    def __init__(self) -> None:
        self._min = self._year_start(1)
        self._max = gregorian_epoch_day(9999, 12, 31)

    @property
    def min_epoch_day(self) -> int:
        return self._min

    @property
    def max_epoch_day(self) -> int:
        return self._max

    @property
    def min_year(self) -> int:
        return 1

    @property
    def max_year(self) -> int:
        return INDIAN_MAX_YEAR

    def is_leap_year(self, year: int) -> bool:
        return is_gregorian_leap(year + SAKA_OFFSET)

    def _year_start(self, year: int) -> int:
        gy = year + SAKA_OFFSET
        return gregorian_epoch_day(gy, 3, 21 if is_gregorian_leap(gy) else 22)

    def _full_month_length(self, year: int, month: int) -> int:
        if month == 1:
            return 31 if self.is_leap_year(year) else 30
        if 2 <= month <= 6:
            return 31
        if 7 <= month <= 12:
            return 30
        raise InvalidDate(f"Indian month out of range: {month}")

    def length_of_month(self, year: int, month: int) -> int:
        n = self._full_month_length(year, month)
        if year == INDIAN_MAX_YEAR:
            # truncated by the end of Gregorian year 9999
            before = sum(self._full_month_length(year, m) for m in range(1, month))
            n = max(0, min(n, self.length_of_year(year) - before))
        return n

    def length_of_year(self, year: int) -> int:
        if year == INDIAN_MAX_YEAR:
            return self._max - self._year_start(year) + 1
        return 366 if self.is_leap_year(year) else 365

    def months(self, year: int) -> List[int]:
        return [m for m in range(1, 13) if self.length_of_month(year, m) > 0]

    def is_valid(self, year: int, month: int, day: int) -> bool:
        return (
            (1 <= year <= INDIAN_MAX_YEAR)
            and (1 <= month <= 12)
            and (1 <= day <= self.length_of_month(year, month))
        )

    def year_of(self, date: IndianDate) -> int:
        return date.year

    def create(self, year: int, month: int, day: int) -> IndianDate:
        if not (1 <= year <= INDIAN_MAX_YEAR):
            raise OutOfRange(f"Saka year out of range: {year}")
        if not self.is_valid(year, month, day):
            raise InvalidDate(f"Invalid Indian date: {year}-{month}-{day}")
        return IndianDate(year, month, day)

    def to_epoch_day(self, date: IndianDate) -> int:
        self.create(date.year, date.month, date.day)
        days = self._year_start(date.year)
        for m in range(1, date.month):
            days += self._full_month_length(date.year, m)
        return days + date.day - 1

    def from_epoch_day(self, epoch_day: int) -> IndianDate:
        if not (self._min <= epoch_day <= self._max):
            raise OutOfRange(f"Out of Indian range: {epoch_day}")
        gy = jdn_to_gregorian(epoch_day_to_jdn(epoch_day))[0]
        year = gy - SAKA_OFFSET
        start = self._year_start(year)
        if epoch_day < start:
            year -= 1
            start = self._year_start(year)
        delta = epoch_day - start
        month = 1
        while True:
            mlen = self._full_month_length(year, month)
            if delta < mlen:
                break
            delta -= mlen
            month += 1
        return IndianDate(year, month, delta + 1)
