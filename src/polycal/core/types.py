from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class Leniency(Enum):
    """Policy for era/field conflicts: reject, auto-correct, or pass through."""
    STRICT = "strict"
    SMART = "smart"
    LAX = "lax"

    def is_strict(self) -> bool:
        return self is Leniency.STRICT

    def is_lax(self) -> bool:
        return self is Leniency.LAX


@dataclass(frozen=True, order=True)
class EastAsianMonth:
    """
    Month of a lunisolar year. A leap month carries the number of the month it follows,
    so the natural order is: N < N-leap < N+1.
    """
    number: int
    leap: bool = False

    def __post_init__(self) -> None:
        if not (1 <= self.number <= 12):
            raise ValueError(f"Month number out of range 1..12: {self.number}")

    def as_leap(self) -> EastAsianMonth:
        return EastAsianMonth(self.number, True)

    def as_regular(self) -> EastAsianMonth:
        return EastAsianMonth(self.number, False)

    def __str__(self) -> str:
        return f"{self.number}L" if self.leap else str(self.number)

    @classmethod
    def parse(cls, s: str) -> EastAsianMonth:
        """Accepts '7', '7L' or '7*' (leap)."""
        s = s.strip()
        if s and s[-1] in "Ll*":
            return cls(int(s[:-1]), True)
        return cls(int(s), False)


MonthSpec = Union[int, EastAsianMonth]


def month_number(month: MonthSpec) -> int:
    return month.number if isinstance(month, EastAsianMonth) else int(month)


def month_is_leap(month: MonthSpec) -> bool:
    return isinstance(month, EastAsianMonth) and month.leap


def coerce_month(value: MonthSpec, leap: Optional[bool] = None) -> EastAsianMonth:
    """Normalize an int or EastAsianMonth into an EastAsianMonth."""
    if isinstance(value, EastAsianMonth):
        return value if leap is None else EastAsianMonth(value.number, leap)
    return EastAsianMonth(int(value), bool(leap))


@dataclass(frozen=True)
class WeekModel:
    """
    First day of week (ISO numbering, Monday=1 .. Sunday=7) and the minimal number of
    days a week needs inside a year or month to count as its first week.
    """
    first_day_of_week: int = 1
    minimal_days_in_first_week: int = 4

    def __post_init__(self) -> None:
        if not (1 <= self.first_day_of_week <= 7):
            raise ValueError(f"First day of week out of range 1..7: {self.first_day_of_week}")
        if not (1 <= self.minimal_days_in_first_week <= 7):
            raise ValueError(f"Minimal days in first week out of range 1..7: {self.minimal_days_in_first_week}")

    @property
    def last_day_of_week(self) -> int:
        return (self.first_day_of_week + 5) % 7 + 1

    @classmethod
    def of_region(cls, region: str) -> WeekModel:
        """Week model of a CLDR region code; unknown regions fall back to ISO-8601."""
        return _REGION_WEEK_MODELS.get(region.upper(), ISO_WEEK)

    def __str__(self) -> str:
        return f"WeekModel(first={self.first_day_of_week}, min={self.minimal_days_in_first_week})"


ISO_WEEK = WeekModel(1, 4)

# CLDR supplemental week data for a few representative regions
_REGION_WEEK_MODELS = {
    "US": WeekModel(7, 1),
    "CA": WeekModel(7, 1),
    "JP": WeekModel(7, 1),
    "CN": WeekModel(1, 1),
    "IN": WeekModel(7, 1),
    "EG": WeekModel(6, 1),
    "SA": WeekModel(7, 1),
    "IR": WeekModel(6, 1),
    "AF": WeekModel(6, 1),
    "GB": WeekModel(1, 4),
    "DE": WeekModel(1, 4),
    "FR": WeekModel(1, 4),
    "SE": WeekModel(1, 4),
    "RU": WeekModel(1, 1),
}
