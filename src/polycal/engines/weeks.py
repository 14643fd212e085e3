"""
polycal.engines.weeks
---------------------
Week fields derived from any calendar with a 7-day week: the localized day of week,
week-of-year and week-of-month under a WeekModel.

Periods (years or months) are handled as epoch-day windows [start, start + length),
so the rules do not care how irregular the calendar is: short cutover years,
13-month lunisolar years and months with a gap inside all work the same way.

The first week of a period is the first week that has at least
`minimal_days_in_first_week` days inside the period. Days before it belong to the
last week of the previous period, days on or after the first week of the next period
belong to that period's week 1.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional, Tuple

from polycal.core.errors import InvalidDate, OutOfRange
from polycal.core.time import iso_weekday
from polycal.core.types import ISO_WEEK, WeekModel
from polycal.engines.fields import IntRule, month_position, start_of_month, start_of_year

log = logging.getLogger(__name__)

Period = Tuple[int, int]  # (first epoch-day, number of days)


class WeekFieldEngine:
    """Week arithmetic of one calendar system under one week model."""

    def __init__(self, system: Any, model: WeekModel = ISO_WEEK) -> None:
        self.system = system
        self.model = model

    # ---------------------------------------------------------
    # Day of week
    # ---------------------------------------------------------
    def local_day_of_week(self, epoch_day: int) -> int:
        """1 for the model's first day of week .. 7 for its last."""
        return (iso_weekday(epoch_day) - self.model.first_day_of_week) % 7 + 1

    def first_week_start(self, period_start: int) -> int:
        """Epoch-day on which week 1 of the period starting at `period_start` begins."""
        n = self.local_day_of_week(period_start)
        if 8 - n >= self.model.minimal_days_in_first_week:
            return period_start - (n - 1)
        return period_start + (8 - n)

    # ---------------------------------------------------------
    # Periods
    # ---------------------------------------------------------
    def year_period(self, year: int) -> Period:
        return start_of_year(self.system, year), self.system.length_of_year(year)

    def month_period(self, year: int, month: Any) -> Period:
        return start_of_month(self.system, year, month), self.system.length_of_month(year, month)

    def _previous_year(self, year: int) -> Optional[Period]:
        if year - 1 < self.system.min_year:
            return None
        try:
            return self.year_period(year - 1)
        except (OutOfRange, InvalidDate):
            return None

    def _previous_month(self, year: int, pos: int) -> Optional[Period]:
        if pos > 0:
            return self.month_period(year, self.system.months(year)[pos - 1])
        if year - 1 < self.system.min_year:
            return None
        try:
            return self.month_period(year - 1, self.system.months(year - 1)[-1])
        except (OutOfRange, InvalidDate):
            return None

    # ---------------------------------------------------------
    # Week counting
    # ---------------------------------------------------------
    def _weeks_between(self, period: Period) -> int:
        start, length = period
        return (self.first_week_start(start + length) - self.first_week_start(start)) // 7

    def _locate(self, epoch_day: int, period: Period, previous: Optional[Period]) -> Tuple[int, Optional[Period]]:
        """(week number, period owning that week); owner None means the next period."""
        start, length = period
        w1 = self.first_week_start(start)
        if epoch_day < w1:
            if previous is None:
                # calendar starts here: widen the first week
                log.debug("first week widened (%s, epoch-day %d)", self.system.variant, epoch_day)
                return 1, period
            return (epoch_day - self.first_week_start(previous[0])) // 7 + 1, previous
        if epoch_day >= self.first_week_start(start + length):
            if start + length > self.system.max_epoch_day:
                # no next period to hand the days to: widen the last week
                log.debug("last week widened (%s, epoch-day %d)", self.system.variant, epoch_day)
                return max(self._weeks_between(period), 1), period
            return 1, None
        return (epoch_day - w1) // 7 + 1, period

    def _year_week(self, date: Any) -> Tuple[int, int]:
        e = self.system.to_epoch_day(date)
        year = self.system.year_of(date)
        week, owner = self._locate(e, self.year_period(year), self._previous_year(year))
        if owner is None:
            owner = self.year_period(year + 1)
        return week, max(self._weeks_between(owner), week)

    def _month_week(self, date: Any) -> Tuple[int, int]:
        s = self.system
        e = s.to_epoch_day(date)
        year = s.year_of(date)
        pos = month_position(s, date)
        week, owner = self._locate(e, self.month_period(year, date.month), self._previous_month(year, pos))
        if owner is None:
            months = s.months(year)
            if pos + 1 < len(months):
                owner = self.month_period(year, months[pos + 1])
            else:
                owner = self.month_period(year + 1, s.months(year + 1)[0])
        return week, max(self._weeks_between(owner), week)

    def week_of_year(self, date: Any) -> int:
        return self._year_week(date)[0]

    def weeks_in_year(self, date: Any) -> int:
        """Number of weeks of the (week-based) year that `date`'s week belongs to."""
        return self._year_week(date)[1]

    def week_of_month(self, date: Any) -> int:
        return self._month_week(date)[0]

    def weeks_in_month(self, date: Any) -> int:
        return self._month_week(date)[1]

    def week_info(self, date: Any) -> dict:
        week, weeks = self._year_week(date)
        return {
            "model": str(self.model),
            "day_of_week": self.local_day_of_week(self.system.to_epoch_day(date)),
            "week_of_year": week,
            "weeks_in_year": weeks,
            "week_of_month": self.week_of_month(date),
        }


# ============================================================
# Rules
# ============================================================

class _WeekRule(IntRule):
    step = 1  # days per unit

    def __init__(self, system: Any, engine: WeekFieldEngine) -> None:
        super().__init__(system)
        self.engine = engine

    def get_min(self, date: Any) -> int:
        return 1

    def _shift(self, date: Any, days: int) -> Any:
        e = self.system.to_epoch_day(date) + days
        if not (self.system.min_epoch_day <= e <= self.system.max_epoch_day):
            raise OutOfRange(f"{self.name} adjustment leaves the calendar range ({self.system.variant})")
        return self.system.from_epoch_day(e)

    def with_int(self, date: Any, value: int, lenient: bool = False) -> Any:
        if not lenient and not self.is_valid(date, value):
            raise InvalidDate(
                f"{self.name} {value} out of range {self.get_min(date)}..{self.get_max(date)} ({self.system.variant})")
        return self._shift(date, self.step * (value - self.get_int(date)))

    def __repr__(self) -> str:
        return f"{type(self).__name__}[{self.system.variant}, {self.engine.model}]"


class LocalDayOfWeekRule(_WeekRule):
    name = "day_of_week"

    def get_int(self, date: Any) -> int:
        return self.engine.local_day_of_week(self.system.to_epoch_day(date))

    def get_max(self, date: Any) -> int:
        return 7


class WeekOfYearRule(_WeekRule):
    name = "week_of_year"
    step = 7

    def get_int(self, date: Any) -> int:
        return self.engine.week_of_year(date)

    def get_max(self, date: Any) -> int:
        return self.engine.weeks_in_year(date)


class WeekOfMonthRule(_WeekRule):
    name = "week_of_month"
    step = 7

    def get_int(self, date: Any) -> int:
        return self.engine.week_of_month(date)

    def get_max(self, date: Any) -> int:
        return self.engine.weeks_in_month(date)


@dataclass(frozen=True)
class WeekRules:
    engine: WeekFieldEngine
    day_of_week: LocalDayOfWeekRule
    week_of_year: WeekOfYearRule
    week_of_month: WeekOfMonthRule


@lru_cache(maxsize=None)
def week_rules(system: Any, model: WeekModel = ISO_WEEK) -> WeekRules:
    engine = WeekFieldEngine(system, model)
    return WeekRules(
        engine=engine,
        day_of_week=LocalDayOfWeekRule(system, engine),
        week_of_year=WeekOfYearRule(system, engine),
        week_of_month=WeekOfMonthRule(system, engine),
    )
