"""
polycal.engines.history
-----------------------
European historic calendar: Julian before a cutover, Gregorian after it, with the
days skipped by the cutover treated as invalid dates.

Also provides
  * the Swedish interlude 1700..1712 (one day ahead of Julian, with 1712-02-30),
  * historic eras (AD/BC and year conversions for Byzantine, AUC, Hispanic),
  * New-Year rules and strategies for the displayed year,
  * the Scaliger sequence of irregular Julian leap years 45 BC .. AD 8.

Linear year = proleptic year (1 BC = 0, 2 BC = -1, ...).
"""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass
from datetime import date
from enum import Enum
from functools import cached_property, total_ordering
from typing import Iterable, List, Optional, Sequence, Tuple

from polycal.core.errors import InvalidDate, OutOfRange, UnsupportedVariant
from polycal.core.types import Leniency
from polycal.core.time import (
    epoch_day_to_jdn,
    gregorian_epoch_day,
    is_gregorian_leap,
    is_julian_leap,
    jdn_to_gregorian,
    jdn_to_julian,
    julian_epoch_day,
    to_epoch_day,
)
from polycal.engines.eras import EraEntry, EraResolver

MAX_YEAR_OF_ERA = 9999

_MONTH_LENGTHS = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


# ============================================================
# Eras and dates
# ============================================================

class HistoricEra(Enum):
    BC = 0
    AD = 1
    BYZANTINE = 2
    AB_URBE_CONDITA = 3
    HISPANIC = 4

    def anno_domini(self, year_of_era: int) -> int:
        """Proleptic (astronomical) year of `year_of_era` counted in this era."""
        if self is HistoricEra.BC:
            return 1 - year_of_era
        if self is HistoricEra.AD:
            return year_of_era
        if self is HistoricEra.BYZANTINE:
            return year_of_era - 5508
        if self is HistoricEra.AB_URBE_CONDITA:
            return year_of_era - 753
        return year_of_era - 38

    def year_of_era(self, proleptic_year: int) -> int:
        """Inverse of anno_domini (January-based years)."""
        if self is HistoricEra.BC:
            return 1 - proleptic_year
        return proleptic_year - self.anno_domini(0)


@total_ordering
@dataclass(frozen=True)
class HistoricDate:
    """A date as written at the time; era is always AD or BC."""
    era: HistoricEra
    year_of_era: int
    month: int
    day: int

    def __post_init__(self) -> None:
        if self.era not in (HistoricEra.AD, HistoricEra.BC):
            raise ValueError(f"Use HistoricDate.of() for era {self.era.name}")
        if not (1 <= self.year_of_era <= MAX_YEAR_OF_ERA):
            raise OutOfRange(f"Year of era out of range 1..{MAX_YEAR_OF_ERA}: {self.year_of_era}")
        if not (1 <= self.month <= 12) or not (1 <= self.day <= 31):
            raise InvalidDate(f"Invalid historic date: {self.year_of_era}-{self.month}-{self.day}")

    @classmethod
    def of(cls, era: HistoricEra, year_of_era: int, month: int, day: int) -> HistoricDate:
        """Normalize any era to AD/BC."""
        return cls.of_proleptic(era.anno_domini(year_of_era), month, day)

    @classmethod
    def of_proleptic(cls, year: int, month: int, day: int) -> HistoricDate:
        if year >= 1:
            return cls(HistoricEra.AD, year, month, day)
        return cls(HistoricEra.BC, 1 - year, month, day)

    @property
    def proleptic_year(self) -> int:
        return self.era.anno_domini(self.year_of_era)

    def key(self) -> Tuple[int, int, int]:
        return (self.proleptic_year, self.month, self.day)

    def __lt__(self, other: HistoricDate) -> bool:
        return self.key() < other.key()

    def __str__(self) -> str:
        return f"{self.era.name}-{self.year_of_era:04d}-{self.month:02d}-{self.day:02d}"


# ============================================================
# Calendar algorithms
# ============================================================

_SWEDISH_LEAP_DAY = (1712, 2, 30)
_SWEDISH_LEAP_DAY_EPOCH = julian_epoch_day(1712, 2, 29)


class CalendarAlgorithm(Enum):
    JULIAN = "julian"
    GREGORIAN = "gregorian"
    SWEDISH = "swedish"

    def max_day_of_month(self, year: int, month: int) -> int:
        if self is CalendarAlgorithm.SWEDISH:
            if (year, month) == (1712, 2):
                return 30
            if (year, month) == (1700, 2):
                return 28
        if month == 2:
            leap = is_gregorian_leap(year) if self is CalendarAlgorithm.GREGORIAN else is_julian_leap(year)
            return 29 if leap else 28
        return _MONTH_LENGTHS[month - 1]

    def is_valid(self, d: HistoricDate) -> bool:
        return d.day <= self.max_day_of_month(d.proleptic_year, d.month)

    def to_epoch_day(self, d: HistoricDate) -> int:
        y = d.proleptic_year
        if self is CalendarAlgorithm.GREGORIAN:
            return gregorian_epoch_day(y, d.month, d.day)
        if self is CalendarAlgorithm.SWEDISH:
            if (y, d.month, d.day) == _SWEDISH_LEAP_DAY:
                return _SWEDISH_LEAP_DAY_EPOCH
            return julian_epoch_day(y, d.month, d.day) - 1
        return julian_epoch_day(y, d.month, d.day)

    def from_epoch_day(self, epoch_day: int) -> HistoricDate:
        if self is CalendarAlgorithm.GREGORIAN:
            return HistoricDate.of_proleptic(*jdn_to_gregorian(epoch_day_to_jdn(epoch_day)))
        if self is CalendarAlgorithm.SWEDISH:
            if epoch_day == _SWEDISH_LEAP_DAY_EPOCH:
                return HistoricDate.of_proleptic(*_SWEDISH_LEAP_DAY)
            epoch_day += 1
        return HistoricDate.of_proleptic(*jdn_to_julian(epoch_day_to_jdn(epoch_day)))


# ============================================================
# Irregular Julian leap years
# ============================================================

SCALIGER_SEQUENCE = (42, 39, 36, 33, 30, 27, 24, 21, 18, 15, 12, 9)
_AD8 = HistoricDate(HistoricEra.AD, 8, 1, 1)
_BC45 = HistoricDate(HistoricEra.BC, 45, 1, 1)
_AD8_EPOCH = julian_epoch_day(8, 1, 1)


class AncientJulianLeapYears:
    """
    Leap years actually observed between the Julian reform (45 BC) and AD 8, given as
    BC years. Dates before 45 BC cannot be expressed.
    """

    def __init__(self, bc_years: Iterable[int]) -> None:
        values = tuple(bc_years)
        leaps = sorted(1 - bc for bc in values)
        if not leaps:
            raise ValueError("Missing leap years.")
        if leaps[0] < -44 or leaps[-1] >= 8:
            raise ValueError(f"Out of range: {values}")
        if len(set(leaps)) != len(leaps):
            raise ValueError(f"Contains duplicates: {values}")
        self._leaps: Tuple[int, ...] = tuple(leaps)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, AncientJulianLeapYears) and self._leaps == other._leaps

    def __hash__(self) -> int:
        return hash(self._leaps)

    def __repr__(self) -> str:
        parts = [f"BC {1 - y}" if y <= 0 else f"AD {y}" for y in self._leaps]
        return f"AncientJulianLeapYears({', '.join(parts)})"

    @property
    def pattern(self) -> Tuple[int, ...]:
        """Leap years as proleptic years."""
        return self._leaps

    def is_leap_year(self, proleptic_year: int) -> bool:
        i = bisect_left(self._leaps, proleptic_year)
        return i < len(self._leaps) and self._leaps[i] == proleptic_year

    def _year_length(self, proleptic_year: int) -> int:
        return 366 if self.is_leap_year(proleptic_year) else 365

    def max_day_of_month(self, proleptic_year: int, month: int) -> int:
        if proleptic_year >= 8:
            return CalendarAlgorithm.JULIAN.max_day_of_month(proleptic_year, month)
        if proleptic_year < -44:
            raise OutOfRange(f"Not valid before BC 45: {proleptic_year}")
        if month == 2:
            return 29 if self.is_leap_year(proleptic_year) else 28
        return _MONTH_LENGTHS[month - 1]

    def is_valid(self, d: HistoricDate) -> bool:
        if d.proleptic_year < -44:
            return False
        return d.day <= self.max_day_of_month(d.proleptic_year, d.month)

    def to_epoch_day(self, d: HistoricDate) -> int:
        if d >= _AD8:
            return CalendarAlgorithm.JULIAN.to_epoch_day(d)
        if d < _BC45:
            raise OutOfRange(f"Not valid before BC 45: {d}")
        target = d.proleptic_year
        e = _AD8_EPOCH
        for year in range(7, target - 1, -1):
            e -= self._year_length(year)
        for month in range(1, d.month):
            e += self.max_day_of_month(target, month)
        return e + d.day - 1

    def from_epoch_day(self, epoch_day: int) -> HistoricDate:
        if epoch_day >= _AD8_EPOCH:
            return CalendarAlgorithm.JULIAN.from_epoch_day(epoch_day)
        start = _AD8_EPOCH
        for year in range(7, -45, -1):
            start -= self._year_length(year)
            if start <= epoch_day:
                for month in range(1, 13):
                    n = self.max_day_of_month(year, month)
                    if start + n > epoch_day:
                        return HistoricDate.of_proleptic(year, month, epoch_day - start + 1)
                    start += n
        raise OutOfRange(f"Not valid before BC 45: epoch-day {epoch_day}")


SCALIGER = AncientJulianLeapYears(SCALIGER_SEQUENCE)


# ============================================================
# New year
# ============================================================

COUNCIL_OF_TOURS = 567


def julian_easter_march_day(year: int) -> int:
    """Orthodox Easter Sunday as a day of March (April 1 = 32), Julian calendar."""
    a = year % 4
    b = year % 7
    c = year % 19
    d = (19 * c + 15) % 30
    e = (2 * a + 4 * b - d + 34) % 7
    return 22 + d + e


def _march_or_april(era: HistoricEra, year_of_era: int, march_day: int) -> HistoricDate:
    if march_day > 31:
        return HistoricDate.of(era, year_of_era, 4, march_day - 31)
    return HistoricDate.of(era, year_of_era, 3, march_day)


class NewYearRule(Enum):
    BEGIN_OF_JANUARY = "begin-of-january"
    BEGIN_OF_MARCH = "begin-of-march"
    BEGIN_OF_SEPTEMBER = "begin-of-september"
    CHRISTMAS_STYLE = "christmas-style"
    EASTER_STYLE = "easter-style"
    GOOD_FRIDAY = "good-friday"
    MARIA_ANUNCIATA = "maria-anunciata"
    CALCULUS_PISANUS = "calculus-pisanus"
    EPIPHANY = "epiphany"

    def new_year(self, era: HistoricEra, year_of_era: int) -> HistoricDate:
        """First day of the displayed year `year_of_era`, as a standard date."""
        R = NewYearRule
        if self is R.BEGIN_OF_JANUARY:
            return HistoricDate.of(era, year_of_era, 1, 1)
        if self is R.BEGIN_OF_MARCH:
            return HistoricDate.of(era, year_of_era, 3, 1)
        if self is R.BEGIN_OF_SEPTEMBER:
            return HistoricDate.of(era, year_of_era - 1, 9, 1)
        if self is R.CHRISTMAS_STYLE:
            return HistoricDate.of(era, year_of_era - 1, 12, 25)
        if self is R.EASTER_STYLE:
            return _march_or_april(era, year_of_era, julian_easter_march_day(era.anno_domini(year_of_era)) - 1)
        if self is R.GOOD_FRIDAY:
            return _march_or_april(era, year_of_era, julian_easter_march_day(era.anno_domini(year_of_era)) - 2)
        if self in (R.MARIA_ANUNCIATA, R.CALCULUS_PISANUS):
            return HistoricDate.of(era, year_of_era, 3, 25)
        return HistoricDate.of(era, year_of_era, 1, 6)

    def displayed_year(self, strategy: NewYearStrategy, d: HistoricDate) -> int:
        R = NewYearRule
        yoe = d.year_of_era
        if self is R.BEGIN_OF_JANUARY:
            return yoe
        if self in (R.BEGIN_OF_SEPTEMBER, R.CHRISTMAS_STYLE):
            # the new year of the following displayed year may fall in this standard year
            nxt = strategy.new_year(d.era, yoe + 1)
            return yoe + 1 if d >= nxt else yoe
        if self is R.CALCULUS_PISANUS:
            shown = yoe - 1
            return shown - 1 if d < self.new_year(d.era, yoe) else shown
        return yoe - 1 if d < self.new_year(d.era, yoe) else yoe

    def until(self, anno_domini: int) -> NewYearStrategy:
        """Strategy using this rule for all years before `anno_domini`."""
        if anno_domini <= COUNCIL_OF_TOURS:
            raise ValueError(
                "Defining New-Year-strategy is not supported before Council of Tours in AD 567.")
        nys = NewYearStrategy(((self, anno_domini),))
        if self is not NewYearRule.BEGIN_OF_JANUARY:
            nys = NewYearStrategy(((NewYearRule.BEGIN_OF_JANUARY, COUNCIL_OF_TOURS),)).and_then(nys)
        return nys


_FOREVER = 2 ** 31 - 1


@dataclass(frozen=True)
class NewYearStrategy:
    """
    Sequence of (rule, last AD year exclusive) segments ordered by end year.
    After the last segment the year begins on January 1st.
    """
    segments: Tuple[Tuple[NewYearRule, int], ...]

    def __post_init__(self) -> None:
        ordered = sorted(self.segments, key=lambda s: s[1])
        kept: List[Tuple[NewYearRule, int]] = []
        for rule, last in ordered:
            if kept and kept[-1][1] == last:
                if kept[-1][0] is rule:
                    continue
                raise ValueError(f"Multiple strategies with overlapping validity range: {ordered}")
            kept.append((rule, last))
        object.__setattr__(self, "segments", tuple(kept))

    def and_then(self, other: NewYearStrategy) -> NewYearStrategy:
        return NewYearStrategy(self.segments + other.segments)

    def rule(self, era: HistoricEra, year_of_era: int) -> NewYearRule:
        if len(self.segments) == 1:
            return self.segments[0][0]
        ad = era.anno_domini(year_of_era)
        previous = -_FOREVER
        prev_rule: Optional[NewYearRule] = None
        for rule, last in self.segments:
            if previous <= ad < last:
                return rule
            previous, prev_rule = last, rule
        if ad == previous and era is HistoricEra.BYZANTINE and prev_rule is NewYearRule.BEGIN_OF_SEPTEMBER:
            # Russia in Byzantine year 7208 still began on September 1st
            return prev_rule
        return NewYearRule.BEGIN_OF_JANUARY

    def new_year(self, era: HistoricEra, year_of_era: int) -> HistoricDate:
        return self.rule(era, year_of_era).new_year(era, year_of_era)

    def displayed_year(self, d: HistoricDate) -> int:
        return self.rule(d.era, d.year_of_era).displayed_year(self, d)

    def __str__(self) -> str:
        return "[" + ",".join(
            r.name if last == _FOREVER else f"{r.name}->{last}" for r, last in self.segments) + "]"


DEFAULT_NEW_YEAR = NewYearStrategy(((NewYearRule.BEGIN_OF_JANUARY, _FOREVER),))


# ============================================================
# Chronological history
# ============================================================

@dataclass(frozen=True)
class CutOverEvent:
    """Switch to `algorithm` on epoch-day `start` (None: in force for all time)."""
    start: Optional[int]
    previous: CalendarAlgorithm
    algorithm: CalendarAlgorithm

    @property
    def date_at_cutover(self) -> HistoricDate:
        return self.algorithm.from_epoch_day(self.start)

    @property
    def date_before_cutover(self) -> HistoricDate:
        return self.previous.from_epoch_day(self.start - 1)


FIRST_GREGORIAN_DAY = gregorian_epoch_day(1582, 10, 15)

PROLEPTIC_GREGORIAN_VARIANT = "proleptic-gregorian"
PROLEPTIC_JULIAN_VARIANT = "proleptic-julian"
FIRST_REFORM_VARIANT = "first-gregorian-reform"
REFORM_PREFIX = "gregorian-reform"
SWEDEN_VARIANT = "sweden"
REGION_PREFIX = "historic"
REGIONS = ("GB", "SE", "RU", "FR")


def canonical_reform_variant(variant: str) -> str:
    """`gregorian-reform:<iso date>` in canonical spelling; the 1582 cutover is the first reform."""
    _, _, iso = variant.partition(":")
    try:
        start = to_epoch_day(date.fromisoformat(iso))
    except ValueError:
        raise UnsupportedVariant(f"Bad cutover date in variant '{variant}'") from None
    if start == FIRST_GREGORIAN_DAY:
        return FIRST_REFORM_VARIANT
    return f"{REFORM_PREFIX}:{ChronoHistory._iso(start)}"


class ChronoHistory:
    """Historic calendar system defined by its cutover events."""

    def __init__(
        self,
        variant: str,
        events: Sequence[CutOverEvent],
        *,
        new_year: NewYearStrategy = DEFAULT_NEW_YEAR,
        ancient: Optional[AncientJulianLeapYears] = None,
    ) -> None:
        if not events:
            raise ValueError("At least one cutover event must be present in chronological history.")
        self.variant = variant
        self.events: Tuple[CutOverEvent, ...] = tuple(events)
        self.new_year_strategy = new_year
        self.ancient = ancient
        self.eras: EraResolver[HistoricEra] = EraResolver([
            EraEntry(HistoricEra.BC, 0, self.min_epoch_day),
            EraEntry(HistoricEra.AD, 1, self.to_epoch_day(HistoricDate(HistoricEra.AD, 1, 1, 1))),
        ])

    # ---------------------------------------------------------
    # Constructors
    # ---------------------------------------------------------
    @classmethod
    def proleptic_gregorian(cls) -> ChronoHistory:
        G = CalendarAlgorithm.GREGORIAN
        return cls(PROLEPTIC_GREGORIAN_VARIANT, [CutOverEvent(None, G, G)])

    @classmethod
    def proleptic_julian(cls) -> ChronoHistory:
        J = CalendarAlgorithm.JULIAN
        return cls(PROLEPTIC_JULIAN_VARIANT, [CutOverEvent(None, J, J)])

    @classmethod
    def of_gregorian_reform(cls, start: int) -> ChronoHistory:
        """Single switch Julian -> Gregorian on epoch-day `start` (not before 1582-10-15)."""
        if start < FIRST_GREGORIAN_DAY:
            raise OutOfRange("Gregorian calendar did not exist before 1582-10-15")
        if start == FIRST_GREGORIAN_DAY:
            variant = FIRST_REFORM_VARIANT
        else:
            variant = f"{REFORM_PREFIX}:{ChronoHistory._iso(start)}"
        return cls(variant, [CutOverEvent(start, CalendarAlgorithm.JULIAN, CalendarAlgorithm.GREGORIAN)])

    @classmethod
    def of_first_gregorian_reform(cls) -> ChronoHistory:
        return cls.of_gregorian_reform(FIRST_GREGORIAN_DAY)

    @classmethod
    def sweden(cls) -> ChronoHistory:
        J, S, G = CalendarAlgorithm.JULIAN, CalendarAlgorithm.SWEDISH, CalendarAlgorithm.GREGORIAN
        return cls(SWEDEN_VARIANT, [
            CutOverEvent(julian_epoch_day(1700, 2, 29), J, S),
            CutOverEvent(julian_epoch_day(1712, 3, 1), S, J),
            CutOverEvent(gregorian_epoch_day(1753, 3, 1), J, G),
        ])

    @classmethod
    def from_variant(cls, variant: str) -> ChronoHistory:
        if variant == PROLEPTIC_GREGORIAN_VARIANT:
            return cls.proleptic_gregorian()
        if variant == PROLEPTIC_JULIAN_VARIANT:
            return cls.proleptic_julian()
        if variant == FIRST_REFORM_VARIANT:
            return cls.of_first_gregorian_reform()
        if variant == SWEDEN_VARIANT:
            return cls.sweden()
        base, sep, iso = variant.partition(":")
        if base == REFORM_PREFIX and sep:
            try:
                start = to_epoch_day(date.fromisoformat(iso))
            except ValueError:
                raise UnsupportedVariant(f"Bad cutover date in variant '{variant}'") from None
            return cls.of_gregorian_reform(start)
        if base == REGION_PREFIX and sep:
            return cls.of_region(iso)
        raise UnsupportedVariant(f"Unknown historic variant '{variant}'")

    @classmethod
    def of_region(cls, region: str) -> ChronoHistory:
        """History of a country (ISO 3166 code); unknown regions use the first reform."""
        region = region.upper()
        R = NewYearRule
        if region == "GB":
            base = cls.of_gregorian_reform(gregorian_epoch_day(1752, 9, 14))
            new_year = R.CHRISTMAS_STYLE.until(1087).and_then(
                R.BEGIN_OF_JANUARY.until(1155)).and_then(R.MARIA_ANUNCIATA.until(1752))
        elif region == "SE":
            base, new_year = cls.sweden(), DEFAULT_NEW_YEAR
        elif region == "RU":
            base = cls.of_gregorian_reform(gregorian_epoch_day(1918, 2, 14))
            new_year = R.BEGIN_OF_MARCH.until(1492).and_then(R.BEGIN_OF_SEPTEMBER.until(1700))
        elif region == "FR":
            base, new_year = cls.of_gregorian_reform(gregorian_epoch_day(1582, 12, 20)), DEFAULT_NEW_YEAR
        else:
            base, new_year = cls.of_first_gregorian_reform(), DEFAULT_NEW_YEAR
        return cls(f"{REGION_PREFIX}:{region}", base.events, new_year=new_year)

    def with_new_year(self, strategy: NewYearStrategy) -> ChronoHistory:
        return ChronoHistory(self.variant, self.events, new_year=strategy, ancient=self.ancient)

    def with_ancient_julian_leap_years(self, ancient: AncientJulianLeapYears) -> ChronoHistory:
        return ChronoHistory(self.variant, self.events, new_year=self.new_year_strategy, ancient=ancient)

    @staticmethod
    def _iso(epoch_day: int) -> str:
        y, m, d = jdn_to_gregorian(epoch_day_to_jdn(epoch_day))
        return f"{y:04d}-{m:02d}-{d:02d}"

    def __repr__(self) -> str:
        return f"ChronoHistory[{self.variant}]"

    # ---------------------------------------------------------
    # Algorithm selection
    # ---------------------------------------------------------
    @property
    def gregorian_cutover(self) -> Optional[int]:
        """Epoch-day of the final switch to Gregorian (None when proleptic)."""
        return self.events[-1].start

    def algorithm_for(self, d: HistoricDate) -> Optional[CalendarAlgorithm]:
        """Algorithm in force for `d`, None when `d` falls into a cutover gap."""
        for ev in reversed(self.events):
            if ev.start is None:
                return ev.algorithm
            if d >= ev.date_at_cutover:
                return ev.algorithm
            if d > ev.date_before_cutover:
                return None
        return CalendarAlgorithm.JULIAN

    def _uses_ancient(self, algorithm: CalendarAlgorithm, d: HistoricDate) -> bool:
        return self.ancient is not None and algorithm is CalendarAlgorithm.JULIAN and d < _AD8

    def is_valid_date(self, d: HistoricDate) -> bool:
        algorithm = self.algorithm_for(d)
        if algorithm is None:
            return False
        if self._uses_ancient(algorithm, d):
            return self.ancient.is_valid(d)
        return algorithm.is_valid(d)

    def to_epoch_day(self, d: HistoricDate) -> int:
        algorithm = self.algorithm_for(d)
        if algorithm is None:
            raise InvalidDate(f"Date in cutover gap of {self.variant}: {d}")
        if not self.is_valid_date(d):
            raise InvalidDate(f"Invalid historic date in {self.variant}: {d}")
        if self._uses_ancient(algorithm, d):
            return self.ancient.to_epoch_day(d)
        return algorithm.to_epoch_day(d)

    def from_epoch_day(self, epoch_day: int) -> HistoricDate:
        if not (self.min_epoch_day <= epoch_day <= self.max_epoch_day):
            raise OutOfRange(f"Historic calendar out of range: {epoch_day}")
        for ev in reversed(self.events):
            if ev.start is None or epoch_day >= ev.start:
                algorithm = ev.algorithm
                break
        else:
            algorithm = CalendarAlgorithm.JULIAN
        if self.ancient is not None and algorithm is CalendarAlgorithm.JULIAN and epoch_day < _AD8_EPOCH:
            return self.ancient.from_epoch_day(epoch_day)
        return algorithm.from_epoch_day(epoch_day)

    def adjust_day_of_month(self, d: HistoricDate) -> HistoricDate:
        """Clamp the day to the month maximum; a date inside a gap is returned unchanged."""
        algorithm = self.algorithm_for(d)
        if algorithm is None:
            return d
        mx = self.max_day_of_month(d.proleptic_year, d.month)
        if d.day > mx:
            return HistoricDate(d.era, d.year_of_era, d.month, mx)
        return d

    # ---------------------------------------------------------
    # New year and displayed year
    # ---------------------------------------------------------
    def begin_of_year(self, era: HistoricEra, year_of_era: int) -> HistoricDate:
        return self.new_year_strategy.new_year(era, year_of_era)

    def displayed_year(self, d: HistoricDate) -> int:
        return self.new_year_strategy.displayed_year(d)

    # ---------------------------------------------------------
    # CalendarSystem (linear year = proleptic year)
    # ---------------------------------------------------------
    @property
    def min_year(self) -> int:
        return -44 if self.ancient is not None else 1 - MAX_YEAR_OF_ERA

    @property
    def max_year(self) -> int:
        return MAX_YEAR_OF_ERA

    @cached_property
    def min_epoch_day(self) -> int:
        return self.to_epoch_day(HistoricDate.of_proleptic(self.min_year, 1, 1))

    @cached_property
    def max_epoch_day(self) -> int:
        return self.to_epoch_day(HistoricDate.of_proleptic(self.max_year, 12, 31))

    def _algorithm_of_month(self, year: int, month: int) -> CalendarAlgorithm:
        # the last day of a month is never inside a gap for the supported cutovers,
        # but the first may be (e.g. a reform on a 14th)
        for day in (28, 1):
            algorithm = self.algorithm_for(HistoricDate.of_proleptic(year, month, day))
            if algorithm is not None:
                return algorithm
        raise InvalidDate(f"Month entirely skipped in {self.variant}: {year}-{month}")

    def max_day_of_month(self, year: int, month: int) -> int:
        """Largest day-of-month number in use (31 for October 1582, not 21)."""
        algorithm = self._algorithm_of_month(year, month)
        if self.ancient is not None and algorithm is CalendarAlgorithm.JULIAN and year < 8:
            return self.ancient.max_day_of_month(year, month)
        return algorithm.max_day_of_month(year, month)

    def months(self, year: int) -> List[int]:
        self._check_year(year)
        return list(range(1, 13))

    def length_of_month(self, year: int, month: int) -> int:
        """Number of days actually in the month (cutover gaps excluded)."""
        self._check_year(year)
        if not (1 <= month <= 12):
            raise InvalidDate(f"Month out of range: {month}")
        return sum(1 for d in range(1, self.max_day_of_month(year, month) + 1)
                   if self.is_valid_date(HistoricDate.of_proleptic(year, month, d)))

    def length_of_year(self, year: int) -> int:
        self._check_year(year)
        first = self.to_epoch_day(self._first_valid(year, 1))
        last = self.to_epoch_day(HistoricDate.of_proleptic(year, 12, 31))
        return last - first + 1

    def length_of_year_of_era(self, era: HistoricEra, year_of_era: int) -> int:
        return self.length_of_year(era.anno_domini(year_of_era))

    def _first_valid(self, year: int, month: int) -> HistoricDate:
        for day in range(1, 32):
            d = HistoricDate.of_proleptic(year, month, day)
            if self.is_valid_date(d):
                return d
        raise InvalidDate(f"No valid day in {year}-{month} ({self.variant})")

    def _check_year(self, year: int) -> None:
        if not (self.min_year <= year <= self.max_year):
            raise OutOfRange(f"Historic year out of range [{self.min_year}, {self.max_year}]: {year}")

    def is_valid(self, year: int, month: int, day: int) -> bool:
        if not (self.min_year <= year <= self.max_year) or not (1 <= month <= 12) or not (1 <= day <= 31):
            return False
        return self.is_valid_date(HistoricDate.of_proleptic(year, month, day))

    def year_of(self, d: HistoricDate) -> int:
        return d.proleptic_year

    def create(self, year: int, month: int, day: int) -> HistoricDate:
        self._check_year(year)
        if not self.is_valid(year, month, day):
            raise InvalidDate(f"Invalid historic date in {self.variant}: {year}-{month}-{day}")
        return HistoricDate.of_proleptic(year, month, day)

    # ---------------------------------------------------------
    # Eras (AD/BC; other eras are normalized on input)
    # ---------------------------------------------------------
    def era_of(self, d: HistoricDate) -> HistoricEra:
        return self.eras.find(self.to_epoch_day(d)).era

    def year_of_era(self, d: HistoricDate) -> int:
        return d.year_of_era

    def linear_year(self, era: HistoricEra, year_of_era: int) -> int:
        return era.anno_domini(year_of_era)

    def max_year_of_era(self, era: HistoricEra) -> int:
        if era is HistoricEra.BC:
            return 1 - self.min_year
        return era.year_of_era(self.max_year)

    def of_era(
        self,
        era: HistoricEra,
        year_of_era: int,
        month: int,
        day: int,
        leniency: Leniency = Leniency.SMART,
    ) -> HistoricDate:
        """
        Date from era fields. Any historic era is accepted and normalized to AD/BC,
        which is then checked against the era in force on that day.
        """
        d = self.create(self.linear_year(era, year_of_era), month, day)
        self.eras.resolve(d.era, self.to_epoch_day(d), leniency)
        return d
