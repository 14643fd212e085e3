"""
polycal.engines.interfaces
--------------------------
The capability every calendar family implements, whatever its internal mechanics
(closed-form arithmetic, month tables, 30-year cycles, new-moon sequences or a
Julian/Gregorian cutover).

Standard Reference Frame:
All day counts are epoch-days (days since 1972-01-01). "year" below is the family's
linear year number: the Coptic/Saka/Hijri year, the elapsed Chinese year, the
Gregorian-related Japanese year, or the proleptic (astronomical) historic year.
"""

from __future__ import annotations

from typing import Any, List, Optional, Protocol, TypeVar

from polycal.core.types import Leniency, MonthSpec

D = TypeVar("D")
E = TypeVar("E")
T = TypeVar("T")


class CalendarSystem(Protocol[D]):
    """
    Converts epoch-days to and from one family's dates and answers length/range
    queries. Instances are immutable and shared.
    """
    variant: str

    # ---------------------------------------------------------
    # 1. Transform (the round-trip contract)
    # ---------------------------------------------------------
    def to_epoch_day(self, date: D) -> int:
        """Raises OutOfRange/InvalidDate for dates the system does not recognise."""
        ...

    def from_epoch_day(self, epoch_day: int) -> D:
        """Raises OutOfRange outside [min_epoch_day, max_epoch_day]."""
        ...

    @property
    def min_epoch_day(self) -> int: ...

    @property
    def max_epoch_day(self) -> int: ...

    # ---------------------------------------------------------
    # 2. Linear-year view used by the generic field rules
    # ---------------------------------------------------------
    @property
    def min_year(self) -> int: ...

    @property
    def max_year(self) -> int: ...

    def year_of(self, date: D) -> int:
        ...

    def create(self, year: int, month: MonthSpec, day: int) -> D:
        """Validated factory; raises InvalidDate or OutOfRange."""
        ...

    def is_valid(self, year: int, month: MonthSpec, day: int) -> bool:
        ...

    def months(self, year: int) -> List[Any]:
        """The months of `year` in calendar order."""
        ...

    def length_of_month(self, year: int, month: MonthSpec) -> int:
        ...

    def length_of_year(self, year: int) -> int:
        ...


class EraCalendarSystem(CalendarSystem[D], Protocol[D, E]):
    """
    A calendar whose year numbering restarts with each era. The linear year of the
    base protocol stays the navigation key; era fields are layered on top of it.
    """
    eras: Any  # EraResolver[E]

    def era_of(self, date: D) -> E:
        ...

    def year_of_era(self, date: D) -> int:
        ...

    def linear_year(self, era: E, year_of_era: int) -> int:
        ...

    def max_year_of_era(self, era: E) -> int:
        ...

    def of_era(self, era: E, year_of_era: int, month: MonthSpec, day: int, leniency: Leniency = ...) -> D:
        """Resolve the era under `leniency` (see engines.eras)."""
        ...


class FieldRule(Protocol[D, T]):
    """
    Read/write access to one field of one calendar's dates. Every operation is pure:
    `with_value` returns a new date.
    """
    name: str

    def get(self, date: D) -> T:
        ...

    def get_min(self, date: D) -> T:
        """Smallest value in the context of `date` (e.g. the year's first month)."""
        ...

    def get_max(self, date: D) -> T:
        """Largest value in the context of `date` (e.g. the month's last day)."""
        ...

    def is_valid(self, date: D, value: T) -> bool:
        ...

    def with_value(self, date: D, value: T, lenient: bool = False) -> D:
        """
        Strict mode raises InvalidDate/OutOfRange for values outside [min, max];
        lenient mode rolls them over into the adjacent unit.
        """
        ...

    def child_at_floor(self, date: D) -> Optional["FieldRule[D, Any]"]:
        """The finer field to default to its minimum when only this field is known."""
        ...

    def child_at_ceiling(self, date: D) -> Optional["FieldRule[D, Any]"]:
        ...
