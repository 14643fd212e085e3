"""
polycal.engines.japanese
------------------------
Japanese calendar: the Tenpo lunisolar reckoning (table driven) up to 1872-12-31,
the Gregorian calendar from 1873-01-01 (Meiji 6), with nengo eras on top.

Linear year = related Gregorian year (the year in which the lunisolar year starts).
Month values are EastAsianMonth; after 1872 only regular months occur.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from polycal.core.errors import InvalidDate, OutOfRange
from polycal.core.time import gregorian_epoch_day, is_gregorian_leap, jdn_to_gregorian, epoch_day_to_jdn
from polycal.core.types import EastAsianMonth, Leniency, MonthSpec, coerce_month
from polycal.engines.eras import EraEntry, EraResolver
from polycal.engines.resources import GREGORIAN_SWITCH, JAPANESE_LUNISOLAR, load_month_table
from polycal.engines.tables import MonthTable

KOKI_OFFSET = 660
MAX_RELATED_YEAR = 9999
FIRST_GREGORIAN_YEAR = 1873

_GREGORIAN_MONTH_LENGTHS = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


class Nengo(Enum):
    """
    Eras from Keio onwards, with (first related year, ISO start).

    Earlier nengo are not tabulated. Keio 1..3 (1865-1867) lie before the first
    lunisolar month of the table and raise OutOfRange.
    """
    KEIO = (1865, (1865, 5, 1))
    MEIJI = (1868, (1868, 10, 23))
    TAISHO = (1912, (1912, 7, 30))
    SHOWA = (1926, (1926, 12, 25))
    HEISEI = (1989, (1989, 1, 8))
    REIWA = (2019, (2019, 5, 1))

    @property
    def first_related_year(self) -> int:
        return self.value[0]

    @property
    def start(self) -> int:
        return gregorian_epoch_day(*self.value[1])


@dataclass(frozen=True)
class JapaneseDate:
    era: Nengo
    year_of_era: int
    month: EastAsianMonth
    day: int

    @property
    def related_gregorian_year(self) -> int:
        return self.era.first_related_year + self.year_of_era - 1

    @property
    def koki_year(self) -> int:
        """Imperial year count (Jimmu era)."""
        return self.related_gregorian_year + KOKI_OFFSET

    def __str__(self) -> str:
        return f"{self.era.name.lower()}-{self.year_of_era}-{self.month}-{self.day:02d}"


class JapaneseCalendar:
    """
    Japanese calendar: tabulated lunisolar months up to 1872, Gregorian months after.

    The range starts at the first tabulated month, the new year of 1868 (1868-01-25).
    Any earlier day or related year raises OutOfRange.
    """
    variant = "japanese"

    def __init__(self, table: Optional[MonthTable] = None) -> None:
        self.table = table if table is not None else load_month_table(JAPANESE_LUNISOLAR)
        if self.table.last_day != GREGORIAN_SWITCH - 1:
            raise OutOfRange(
                f"Japanese lunisolar table must end on 1872-12-31, ends at epoch-day {self.table.last_day}")
        self.eras: EraResolver[Nengo] = EraResolver(
            [EraEntry(n, n.first_related_year, n.start) for n in Nengo])

    # ---------------------------------------------------------
    # Range and lengths (linear year = related Gregorian year)
    # ---------------------------------------------------------
    @property
    def min_epoch_day(self) -> int:
        return self.table.first_day

    @property
    def max_epoch_day(self) -> int:
        return gregorian_epoch_day(MAX_RELATED_YEAR, 12, 31)

    @property
    def min_year(self) -> int:
        return self.table.min_year

    @property
    def max_year(self) -> int:
        return MAX_RELATED_YEAR

    def _check_year(self, year: int) -> None:
        if not (self.min_year <= year <= self.max_year):
            raise OutOfRange(f"Japanese related year out of range [{self.min_year}, {self.max_year}]: {year}")

    def is_lunisolar(self, year: int) -> bool:
        return year < FIRST_GREGORIAN_YEAR

    def months(self, year: int) -> List[EastAsianMonth]:
        self._check_year(year)
        if self.is_lunisolar(year):
            return self.table.months(year)
        return [EastAsianMonth(m) for m in range(1, 13)]

    def length_of_month(self, year: int, month: MonthSpec) -> int:
        self._check_year(year)
        m = coerce_month(month)
        if self.is_lunisolar(year):
            return self.table.length_of(year, m)
        if m.leap:
            raise InvalidDate(f"No leap months after 1872: {year}-{m}")
        if m.number == 2 and is_gregorian_leap(year):
            return 29
        return _GREGORIAN_MONTH_LENGTHS[m.number - 1]

    def length_of_year(self, year: int) -> int:
        self._check_year(year)
        if self.is_lunisolar(year):
            return self.table.length_of_year(year)
        return 366 if is_gregorian_leap(year) else 365

    def is_valid(self, year: int, month: MonthSpec, day: int) -> bool:
        if not (self.min_year <= year <= self.max_year):
            return False
        try:
            return 1 <= day <= self.length_of_month(year, month)
        except InvalidDate:
            return False

    def year_of(self, date: JapaneseDate) -> int:
        return date.related_gregorian_year

    # ---------------------------------------------------------
    # Transform
    # ---------------------------------------------------------
    def _epoch_of(self, year: int, month: MonthSpec, day: int) -> int:
        m = coerce_month(month)
        if not self.is_valid(year, m, day):
            self._check_year(year)
            raise InvalidDate(f"Invalid Japanese date: related year {year}, month {m}, day {day}")
        if self.is_lunisolar(year):
            return self.table.start_of(year, m) + day - 1
        return gregorian_epoch_day(year, m.number, day)

    def create(self, year: int, month: MonthSpec, day: int) -> JapaneseDate:
        """Date from the linear year; the era is the one in force on that day."""
        m = coerce_month(month)
        entry = self.eras.find(self._epoch_of(year, m, day))
        return JapaneseDate(entry.era, self.eras.year_of_era(entry.era, year), m, day)

    def of_era(
        self,
        era: Nengo,
        year_of_era: int,
        month: MonthSpec,
        day: int,
        leniency: Leniency = Leniency.SMART,
    ) -> JapaneseDate:
        """
        Date from era fields. An era that is not in force on the resulting day raises
        EraMismatch (STRICT), is replaced by the actual era (SMART), or is kept (LAX).
        """
        if year_of_era < 1:
            raise OutOfRange(f"Year of era must be >= 1: {year_of_era}")
        m = coerce_month(month)
        related = self.linear_year(era, year_of_era)
        epoch = self._epoch_of(related, m, day)
        actual = self.eras.resolve(era, epoch, leniency)
        return JapaneseDate(actual, self.eras.year_of_era(actual, related), m, day)

    def to_epoch_day(self, date: JapaneseDate) -> int:
        return self._epoch_of(date.related_gregorian_year, date.month, date.day)

    def from_epoch_day(self, epoch_day: int) -> JapaneseDate:
        if not (self.min_epoch_day <= epoch_day <= self.max_epoch_day):
            raise OutOfRange(f"Japanese calendar out of range: {epoch_day}")
        if epoch_day < GREGORIAN_SWITCH:
            idx = self.table.search(epoch_day)
            year, month = self.table.locate(idx)
            day = epoch_day - int(self.table.starts[idx]) + 1
        else:
            year, mn, day = jdn_to_gregorian(epoch_day_to_jdn(epoch_day))
            month = EastAsianMonth(mn)
        era = self.eras.find(epoch_day).era
        return JapaneseDate(era, self.eras.year_of_era(era, year), month, day)

    # ---------------------------------------------------------
    # Eras
    # ---------------------------------------------------------
    def era_of(self, date: JapaneseDate) -> Nengo:
        return self.eras.find(self.to_epoch_day(date)).era

    def year_of_era(self, date: JapaneseDate) -> int:
        return date.year_of_era

    def linear_year(self, era: Nengo, year_of_era: int) -> int:
        return self.eras.related_year(era, year_of_era)

    def max_year_of_era(self, era: Nengo) -> int:
        return self.eras.max_year_of_era(
            era, lambda d: self.from_epoch_day(d).related_gregorian_year, self.max_epoch_day)
