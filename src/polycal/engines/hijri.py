"""
polycal.engines.hijri
---------------------
Tabular (30-year cycle) Islamic calendars.

Eight variants = four leap-year patterns x two epochs:
  * suffix "c" / "islamic-civil": Friday 622-07-16 (Julian)
  * suffix "a" / "islamic-tbla":  Thursday 622-07-15 (Julian)

A variant string may carry a local sighting correction "<name>:<adj>", adj in -3..+3,
which shifts the whole mapping by `adj` days.
"""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass
from typing import Dict, List, Tuple

from polycal.core.errors import InvalidDate, OutOfRange, UnsupportedVariant

LENGTH_OF_30_YEAR_CYCLE = 30 * 354 + 11
MAX_YEAR = 1600
MAX_ADJUSTMENT = 3

START_622_07_15 = -492879   # astronomical epoch (Thursday)
START_622_07_16 = START_622_07_15 + 1   # civil epoch (Friday)

_EAST = (2, 5, 7, 10, 13, 15, 18, 21, 24, 26, 29)
_WEST = (2, 5, 7, 10, 13, 16, 18, 21, 24, 26, 29)
_FATIMID = (2, 5, 8, 10, 13, 16, 19, 21, 24, 27, 29)
_HABASH_AL_HASIB = (2, 5, 8, 11, 13, 16, 19, 21, 24, 27, 30)

# variant -> (leap pattern, civil epoch?)
HIJRI_ALGORITHMS: Dict[str, Tuple[Tuple[int, ...], bool]] = {
    "islamic-eastc": (_EAST, True),
    "islamic-easta": (_EAST, False),
    "islamic-civil": (_WEST, True),
    "islamic-tbla": (_WEST, False),
    "islamic-fatimidc": (_FATIMID, True),
    "islamic-fatimida": (_FATIMID, False),
    "islamic-habashalhasibc": (_HABASH_AL_HASIB, True),
    "islamic-habashalhasiba": (_HABASH_AL_HASIB, False),
}


def split_variant(variant: str) -> Tuple[str, int]:
    """'islamic-civil:-2' -> ('islamic-civil', -2); a missing suffix means 0."""
    base, sep, adj = variant.partition(":")
    if not sep:
        return base, 0
    try:
        return base, int(adj)
    except ValueError:
        raise UnsupportedVariant(f"Bad day adjustment in variant '{variant}'") from None


def join_variant(base: str, adjustment: int) -> str:
    return base if adjustment == 0 else f"{base}:{adjustment:+d}"


@dataclass(frozen=True)
class HijriDate:
    variant: str
    year: int
    month: int
    day: int

    @property
    def era(self) -> str:
        return "ANNO_HEGIRAE"

    def __str__(self) -> str:
        return f"AH-{self.year:04d}-{self.month:02d}-{self.day:02d}[{self.variant}]"


class HijriAlgorithm:
    """A 30-year-cycle Hijri calendar for one leap pattern, epoch and day adjustment."""

    def __init__(self, base: str, adjustment: int = 0) -> None:
        if base not in HIJRI_ALGORITHMS:
            raise UnsupportedVariant(
                f"Unknown Hijri algorithm '{base}'. Available: {sorted(HIJRI_ALGORITHMS)}")
        if abs(adjustment) > MAX_ADJUSTMENT:
            raise OutOfRange(f"Day adjustment out of range -3..+3: {adjustment}")
        self.base = base
        self.adjustment = adjustment
        self.intercalaries, self.civil = HIJRI_ALGORITHMS[base]
        self.variant = join_variant(base, adjustment)
        self._start = START_622_07_16 if self.civil else START_622_07_15
        self._max = self._days(MAX_YEAR, 12, 29) - adjustment

    # ---------------------------------------------------------
    # Leap pattern
    # ---------------------------------------------------------
    def is_leap_year(self, year: int) -> bool:
        y = ((year - 1) % 30) + 1
        i = bisect_left(self.intercalaries, y)
        return i < len(self.intercalaries) and self.intercalaries[i] == y

    def length_of_year(self, year: int) -> int:
        return 355 if self.is_leap_year(year) else 354

    def length_of_month(self, year: int, month: int) -> int:
        if not (1 <= month <= 12):
            raise InvalidDate(f"Hijri month out of range: {month}")
        if month == 12:
            return 30 if self.is_leap_year(year) else 29
        return 30 if (month % 2 == 1) else 29

    def months(self, year: int) -> List[int]:
        return list(range(1, 13))

    # ---------------------------------------------------------
    # Range
    # ---------------------------------------------------------
    @property
    def min_epoch_day(self) -> int:
        return self._start - self.adjustment

    @property
    def max_epoch_day(self) -> int:
        return self._max

    @property
    def min_year(self) -> int:
        return 1

    @property
    def max_year(self) -> int:
        return MAX_YEAR

    def is_valid(self, year: int, month: int, day: int) -> bool:
        if not (1 <= year <= MAX_YEAR) or not (1 <= month <= 12) or day < 1:
            return False
        # the range ends on 1600-12-29 even where the pattern makes 1600 a leap year
        if year == MAX_YEAR and month == 12 and day > 29:
            return False
        return day <= self.length_of_month(year, month)

    def year_of(self, date: HijriDate) -> int:
        return date.year

    def create(self, year: int, month: int, day: int) -> HijriDate:
        if not (1 <= year <= MAX_YEAR):
            raise OutOfRange(f"Hijri year out of range 1..{MAX_YEAR}: {year}")
        if not self.is_valid(year, month, day):
            raise InvalidDate(f"Invalid Hijri date: {year}-{month}-{day} ({self.variant})")
        return HijriDate(self.variant, year, month, day)

    # ---------------------------------------------------------
    # Transform
    # ---------------------------------------------------------
    def _days(self, year: int, month: int, day: int) -> int:
        """Unadjusted epoch-day."""
        days = ((year - 1) // 30) * LENGTH_OF_30_YEAR_CYCLE
        y = ((year - 1) % 30) + 1
        for i in range(1, y):
            days += self.length_of_year(i)
        for i in range(1, month):
            days += 30 if (i % 2 == 1) else 29
        return self._start + days + day - 1

    def to_epoch_day(self, date: HijriDate) -> int:
        if date.variant != self.variant:
            raise InvalidDate(f"Variant mismatch: {date.variant} != {self.variant}")
        self.create(date.year, date.month, date.day)
        return self._days(date.year, date.month, date.day) - self.adjustment

    def from_epoch_day(self, epoch_day: int) -> HijriDate:
        if not (self.min_epoch_day <= epoch_day <= self._max):
            raise OutOfRange(f"Out of Hijri range ({self.variant}): {epoch_day}")
        days = epoch_day + self.adjustment - self._start

        year = 1 + (days // LENGTH_OF_30_YEAR_CYCLE) * 30
        delta = days % LENGTH_OF_30_YEAR_CYCLE

        # at most 29 year lengths and 11 month lengths to skip
        for i in range(1, 30):
            ylen = self.length_of_year(i)
            if delta < ylen:
                break
            delta -= ylen
            year += 1

        month = 1
        while month < 12:
            mlen = self.length_of_month(year, month)
            if delta < mlen:
                break
            delta -= mlen
            month += 1

        return HijriDate(self.variant, year, month, delta + 1)
