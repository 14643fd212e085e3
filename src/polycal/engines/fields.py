"""
polycal.engines.fields
----------------------
Field rules: one small object per (calendar, field) that reads, bounds, validates
and rewrites a single field of a date, so that one formatter/parser can drive every
calendar the same way.

All rules work on the linear-year view of `CalendarSystem` (year_of, months,
create, length_of_month, ...). Era calendars additionally expose `era` and
`year_of_era` rules that go through the calendar's EraResolver.

Setting a coarse field never overflows a finer one: a new year or month keeps the
day-of-month where possible and clamps it to the month's last day otherwise (a leap
month missing in the new year falls back to the regular month of that number).
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple

from polycal.core.errors import InvalidDate, OutOfRange
from polycal.core.types import EastAsianMonth, Leniency, MonthSpec, month_number


# ============================================================
# Positional helpers (shared with engines.weeks)
# ============================================================

def max_day_of_month(system: Any, year: int, month: MonthSpec) -> int:
    """Largest day number in use; exceeds the month length only across a cutover gap."""
    if hasattr(system, "max_day_of_month"):
        return system.max_day_of_month(year, month)
    return system.length_of_month(year, month)


def first_day_of_month(system: Any, year: int, month: MonthSpec) -> int:
    """Smallest valid day number (1 unless the start of the month was skipped)."""
    for day in range(1, max_day_of_month(system, year, month) + 1):
        if system.is_valid(year, month, day):
            return day
    raise InvalidDate(f"No valid day in {year}-{month} ({system.variant})")


def start_of_month(system: Any, year: int, month: MonthSpec) -> int:
    return system.to_epoch_day(system.create(year, month, first_day_of_month(system, year, month)))


def start_of_year(system: Any, year: int) -> int:
    return start_of_month(system, year, system.months(year)[0])


def day_of_year(system: Any, date: Any) -> int:
    return system.to_epoch_day(date) - start_of_year(system, system.year_of(date)) + 1


def month_position(system: Any, date: Any) -> int:
    """0-based position of the date's month within its year."""
    return system.months(system.year_of(date)).index(date.month)


def is_era_calendar(system: Any) -> bool:
    return hasattr(system, "of_era")


def clamp(system: Any, year: int, month: MonthSpec, day: int) -> Tuple[MonthSpec, int]:
    """
    Nearest valid (month, day) inside `year`. A leap month the year does not carry
    becomes its regular month, a month beyond the year's last one becomes the last
    one, a day past the end becomes the last day, and a day inside a cutover gap
    moves to the first day after the gap.
    """
    months = system.months(year)
    if month not in months:
        if isinstance(month, EastAsianMonth) and month.as_regular() in months:
            month = month.as_regular()
        elif month_number(month) > month_number(months[-1]):
            month = months[-1]
        else:
            raise InvalidDate(f"No month {month} in year {year} ({system.variant})")
    last = max_day_of_month(system, year, month)
    day = max(first_day_of_month(system, year, month), min(day, last))
    for d in range(day, last + 1):
        if system.is_valid(year, month, d):
            return month, d
    for d in range(day - 1, 0, -1):
        if system.is_valid(year, month, d):
            return month, d
    raise InvalidDate(f"No valid day in {year}-{month} ({system.variant})")


# ============================================================
# Rules
# ============================================================

class BaseRule:
    """Common navigation for the concrete rules below."""
    name = ""

    def __init__(self, system: Any) -> None:
        self.system = system

    def get_min(self, date: Any) -> Any:
        raise NotImplementedError

    def get_max(self, date: Any) -> Any:
        raise NotImplementedError

    def with_value(self, date: Any, value: Any, lenient: bool = False) -> Any:
        raise NotImplementedError

    def is_valid(self, date: Any, value: Any) -> bool:
        try:
            self.with_value(date, value)
        except (InvalidDate, OutOfRange, ValueError):
            return False
        return True

    def child_at_floor(self, date: Any) -> Optional[BaseRule]:
        return None

    def child_at_ceiling(self, date: Any) -> Optional[BaseRule]:
        return self.child_at_floor(date)

    def at_floor(self, date: Any) -> Any:
        """`date` with every finer field set to its minimum (e.g. year -> first day)."""
        child = self.child_at_floor(date)
        if child is None:
            return date
        return child.at_floor(child.with_value(date, child.get_min(date)))

    def at_ceiling(self, date: Any) -> Any:
        child = self.child_at_ceiling(date)
        if child is None:
            return date
        return child.at_ceiling(child.with_value(date, child.get_max(date)))

    def _rules(self) -> CalendarRules:
        return rules_for(self.system)

    def __repr__(self) -> str:
        return f"{type(self).__name__}[{self.system.variant}]"


class IntRule(BaseRule):
    """Numeric field: `get_int`/`with_int` are the primary path, `get`/`with_value` delegate."""

    def get_int(self, date: Any) -> int:
        raise NotImplementedError

    def with_int(self, date: Any, value: int, lenient: bool = False) -> Any:
        raise NotImplementedError

    def get(self, date: Any) -> int:
        return self.get_int(date)

    def with_value(self, date: Any, value: int, lenient: bool = False) -> Any:
        return self.with_int(date, int(value), lenient)

    def is_valid(self, date: Any, value: int) -> bool:
        return self.get_min(date) <= value <= self.get_max(date)


class YearRule(IntRule):
    name = "year"

    def get_int(self, date: Any) -> int:
        return self.system.year_of(date)

    def get_min(self, date: Any) -> int:
        return self.system.min_year

    def get_max(self, date: Any) -> int:
        return self.system.max_year

    def with_int(self, date: Any, value: int, lenient: bool = False) -> Any:
        # no adjacent unit to roll into
        if not self.is_valid(date, value):
            raise OutOfRange(
                f"Year {value} outside [{self.system.min_year}, {self.system.max_year}] ({self.system.variant})")
        month, day = clamp(self.system, value, date.month, date.day)
        return self.system.create(value, month, day)

    def child_at_floor(self, date: Any) -> Optional[BaseRule]:
        return self._rules().month


class MonthRule(BaseRule):
    """
    Month values are whatever the calendar uses (int, or EastAsianMonth for lunisolar
    calendars). In lenient mode an int outside the year's months counts months
    past the end (or before the start) of the year: 13 in a 12-month year is the
    first month of the next year, 0 the last month of the previous one.
    """
    name = "month"

    def _months(self, date: Any) -> List[Any]:
        return self.system.months(self.system.year_of(date))

    def _coerce(self, months: List[Any], value: Any) -> Any:
        if isinstance(months[0], EastAsianMonth):
            if isinstance(value, EastAsianMonth):
                return value
            if 1 <= int(value) <= 12:
                return EastAsianMonth(int(value))
            return int(value)
        if isinstance(value, EastAsianMonth):
            if value.leap:
                raise InvalidDate(f"{self.system.variant} has no leap months: {value}")
            return value.number
        return int(value)

    def get(self, date: Any) -> Any:
        return date.month

    def ordinal(self, date: Any) -> int:
        """1-based position of the month in its year (a leap month counts)."""
        return month_position(self.system, date) + 1

    def get_min(self, date: Any) -> Any:
        return self._months(date)[0]

    def get_max(self, date: Any) -> Any:
        return self._months(date)[-1]

    def is_valid(self, date: Any, value: Any) -> bool:
        months = self._months(date)
        try:
            return self._coerce(months, value) in months
        except (InvalidDate, ValueError):
            return False

    def with_value(self, date: Any, value: Any, lenient: bool = False) -> Any:
        year = self.system.year_of(date)
        months = self.system.months(year)
        month = self._coerce(months, value)
        if month in months:
            month, day = clamp(self.system, year, month, date.day)
            return self.system.create(year, month, day)
        if not lenient or isinstance(month, EastAsianMonth):
            raise InvalidDate(f"Month {value} not in year {year} ({self.system.variant})")
        return self._roll(year, int(month) - 1, date.day)

    def with_ordinal(self, date: Any, ordinal: int, lenient: bool = False) -> Any:
        year = self.system.year_of(date)
        months = self.system.months(year)
        if 1 <= ordinal <= len(months):
            month, day = clamp(self.system, year, months[ordinal - 1], date.day)
            return self.system.create(year, month, day)
        if not lenient:
            raise InvalidDate(f"Month ordinal {ordinal} out of range 1..{len(months)} ({self.system.variant})")
        return self._roll(year, ordinal - 1, date.day)

    def _roll(self, year: int, pos: int, day: int) -> Any:
        """Month at 0-based position `pos` counted from the start of `year`, any sign."""
        months = self.system.months(year)
        while pos >= len(months):
            pos -= len(months)
            year = self._next_year(year, 1)
            months = self.system.months(year)
        while pos < 0:
            year = self._next_year(year, -1)
            months = self.system.months(year)
            pos += len(months)
        month, day = clamp(self.system, year, months[pos], day)
        return self.system.create(year, month, day)

    def _next_year(self, year: int, step: int) -> int:
        year += step
        if not (self.system.min_year <= year <= self.system.max_year):
            raise OutOfRange(f"Month roll-over leaves the calendar range ({self.system.variant}): year {year}")
        return year

    def child_at_floor(self, date: Any) -> Optional[BaseRule]:
        return self._rules().day_of_month


class DayOfMonthRule(IntRule):
    name = "day_of_month"

    def get_int(self, date: Any) -> int:
        return date.day

    def get_min(self, date: Any) -> int:
        return first_day_of_month(self.system, self.system.year_of(date), date.month)

    def get_max(self, date: Any) -> int:
        return max_day_of_month(self.system, self.system.year_of(date), date.month)

    def is_valid(self, date: Any, value: int) -> bool:
        return self.system.is_valid(self.system.year_of(date), date.month, value)

    def with_int(self, date: Any, value: int, lenient: bool = False) -> Any:
        s = self.system
        year = s.year_of(date)
        if s.is_valid(year, date.month, value):
            return s.create(year, date.month, value)
        if not lenient:
            raise InvalidDate(f"Invalid day of month {value} in {year}-{date.month} ({s.variant})")
        first = first_day_of_month(s, year, date.month)
        last = max_day_of_month(s, year, date.month)
        if value > last:
            e = s.to_epoch_day(s.create(year, date.month, last)) + value - last
        else:
            # days in a cutover gap count on from the start of the month
            e = s.to_epoch_day(s.create(year, date.month, first)) + value - first
        return s.from_epoch_day(e)


class DayOfYearRule(IntRule):
    name = "day_of_year"

    def get_int(self, date: Any) -> int:
        return day_of_year(self.system, date)

    def get_min(self, date: Any) -> int:
        return 1

    def get_max(self, date: Any) -> int:
        return self.system.length_of_year(self.system.year_of(date))

    def with_int(self, date: Any, value: int, lenient: bool = False) -> Any:
        if not lenient and not self.is_valid(date, value):
            raise InvalidDate(f"Day of year {value} out of range 1..{self.get_max(date)} ({self.system.variant})")
        start = start_of_year(self.system, self.system.year_of(date))
        return self.system.from_epoch_day(start + value - 1)


class EraRule(BaseRule):
    """
    Setting the era keeps year-of-era, month and day (clamped) and resolves the
    result under STRICT (default) or SMART (lenient) leniency; an explicit
    `leniency` overrides both.
    """
    name = "era"

    def get(self, date: Any) -> Any:
        return self.system.era_of(date)

    def get_min(self, date: Any) -> Any:
        return self.system.eras.eras[0]

    def get_max(self, date: Any) -> Any:
        return self.system.eras.eras[-1]

    def with_value(
        self,
        date: Any,
        value: Any,
        lenient: bool = False,
        leniency: Optional[Leniency] = None,
    ) -> Any:
        if leniency is None:
            leniency = Leniency.SMART if lenient else Leniency.STRICT
        s = self.system
        yoe = s.year_of_era(date)
        year = s.linear_year(value, yoe)
        if not (s.min_year <= year <= s.max_year):
            raise OutOfRange(f"Year {yoe} of era {value} outside the calendar range ({s.variant})")
        month, day = clamp(s, year, date.month, date.day)
        return s.of_era(value, yoe, month, day, leniency)

    def child_at_floor(self, date: Any) -> Optional[BaseRule]:
        return self._rules().year_of_era

    def at_floor(self, date: Any) -> Any:
        """First day of the era (within the calendar range)."""
        s = self.system
        return s.from_epoch_day(max(s.eras.entry(s.era_of(date)).start, s.min_epoch_day))

    def at_ceiling(self, date: Any) -> Any:
        s = self.system
        end = s.eras.end_of(s.era_of(date))
        return s.from_epoch_day(s.max_epoch_day if end is None else min(end, s.max_epoch_day))


class YearOfEraRule(IntRule):
    name = "year_of_era"

    def get_int(self, date: Any) -> int:
        return self.system.year_of_era(date)

    def get_min(self, date: Any) -> int:
        return 1

    def get_max(self, date: Any) -> int:
        return self.system.max_year_of_era(self.system.era_of(date))

    def with_int(self, date: Any, value: int, lenient: bool = False) -> Any:
        s = self.system
        era = s.era_of(date)
        if not lenient and not self.is_valid(date, value):
            raise OutOfRange(f"Year of era {value} outside 1..{self.get_max(date)} for {era} ({s.variant})")
        year = s.linear_year(era, value)
        if not (s.min_year <= year <= s.max_year):
            raise OutOfRange(f"Year {value} of era {era} outside the calendar range ({s.variant})")
        month, day = clamp(s, year, date.month, date.day)
        return s.of_era(era, value, month, day, Leniency.SMART if lenient else Leniency.STRICT)

    def child_at_floor(self, date: Any) -> Optional[BaseRule]:
        return self._rules().month

    # an era may start or end inside a year: clip the year to the era
    def at_floor(self, date: Any) -> Any:
        s = self.system
        first = max(start_of_year(s, s.year_of(date)), s.eras.entry(s.era_of(date)).start, s.min_epoch_day)
        return s.from_epoch_day(first)

    def at_ceiling(self, date: Any) -> Any:
        s = self.system
        year = s.year_of(date)
        last = min(start_of_year(s, year) + s.length_of_year(year) - 1, s.max_epoch_day)
        end = s.eras.end_of(s.era_of(date))
        return s.from_epoch_day(last if end is None else min(last, end))


# ============================================================
# Registry of rules per calendar
# ============================================================

@dataclass(frozen=True)
class CalendarRules:
    year: YearRule
    month: MonthRule
    day_of_month: DayOfMonthRule
    day_of_year: DayOfYearRule
    era: Optional[EraRule] = None
    year_of_era: Optional[YearOfEraRule] = None

    def as_dict(self) -> Dict[str, BaseRule]:
        out: Dict[str, BaseRule] = {}
        for rule in (self.era, self.year_of_era, self.year, self.month, self.day_of_month, self.day_of_year):
            if rule is not None:
                out[rule.name] = rule
        return out

    def get(self, name: str) -> BaseRule:
        rules = self.as_dict()
        if name not in rules:
            raise KeyError(f"Unknown field '{name}'. Available: {sorted(rules)}")
        return rules[name]


@lru_cache(maxsize=None)
def rules_for(system: Any) -> CalendarRules:
    """The rule set of `system`, built once per (shared, immutable) calendar system."""
    era = EraRule(system) if is_era_calendar(system) else None
    yoe = YearOfEraRule(system) if is_era_calendar(system) else None
    return CalendarRules(
        year=YearRule(system),
        month=MonthRule(system),
        day_of_month=DayOfMonthRule(system),
        day_of_year=DayOfYearRule(system),
        era=era,
        year_of_era=yoe,
    )
