"""
polycal.engines.eras
--------------------
Ordered era tables (Japanese nengo, Chinese reigns) and the three-mode resolution
of a caller-supplied era against the era actually in force on a given day.

Leniency contract, for (era, year-of-era, month, day) input:
  * STRICT: the supplied era must be the one in force on that day, else EraMismatch.
  * SMART:  the era in force replaces the supplied one (default).
  * LAX:    the supplied era is kept verbatim.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from typing import Callable, Dict, Generic, List, Optional, Sequence, Tuple, TypeVar

from polycal.core.errors import EraMismatch, OutOfRange
from polycal.core.types import Leniency

E = TypeVar("E")


@dataclass(frozen=True)
class EraEntry(Generic[E]):
    era: E
    first_related_year: int
    start: int  # epoch-day of the first day of the era


class EraResolver(Generic[E]):
    """Binary search over era start days; eras are ordered by start."""

    def __init__(self, entries: Sequence[EraEntry[E]]) -> None:
        if not entries:
            raise ValueError("Era table must not be empty")
        for a, b in zip(entries, entries[1:]):
            if not (b.start > a.start):
                raise ValueError(f"Era starts must be strictly increasing: {a.era} -> {b.era}")
        self._entries: Tuple[EraEntry[E], ...] = tuple(entries)
        self._starts: List[int] = [e.start for e in entries]
        self._pos: Dict[E, int] = {e.era: i for i, e in enumerate(entries)}

    @property
    def eras(self) -> List[E]:
        return [e.era for e in self._entries]

    def entry(self, era: E) -> EraEntry[E]:
        try:
            return self._entries[self._pos[era]]
        except KeyError:
            raise ValueError(f"Era not in table: {era}") from None

    def find(self, epoch_day: int) -> EraEntry[E]:
        """The era in force on `epoch_day`."""
        i = bisect_right(self._starts, epoch_day) - 1
        if i < 0:
            raise OutOfRange(f"No era before {self._entries[0].era}: epoch-day {epoch_day}")
        return self._entries[i]

    def find_by_related_year(self, related_year: int) -> EraEntry[E]:
        """Latest era whose first related year is <= related_year (a year-level guess)."""
        found = None
        for e in self._entries:
            if e.first_related_year <= related_year:
                found = e
            else:
                break
        if found is None:
            raise OutOfRange(f"No era for related year {related_year}")
        return found

    def find_next(self, era: E) -> Optional[E]:
        i = self._pos[era] + 1
        return self._entries[i].era if i < len(self._entries) else None

    def find_previous(self, era: E) -> Optional[E]:
        i = self._pos[era] - 1
        return self._entries[i].era if i >= 0 else None

    def end_of(self, era: E) -> Optional[int]:
        """Last epoch-day of `era`, None for the open-ended current era."""
        nxt = self.find_next(era)
        return None if nxt is None else self.entry(nxt).start - 1

    # ---------------------------------------------------------
    # Year arithmetic
    # ---------------------------------------------------------
    def related_year(self, era: E, year_of_era: int) -> int:
        return self.entry(era).first_related_year + year_of_era - 1

    def year_of_era(self, era: E, related_year: int) -> int:
        return related_year - self.entry(era).first_related_year + 1

    def max_year_of_era(self, era: E, related_year_of: Callable[[int], int], max_epoch_day: int) -> int:
        """Year range of an era is clamped by the next era's start (or the calendar's end)."""
        end = self.end_of(era)
        last = max_epoch_day if end is None else min(end, max_epoch_day)
        return self.year_of_era(era, related_year_of(last))

    # ---------------------------------------------------------
    # Leniency
    # ---------------------------------------------------------
    def resolve(self, era: E, epoch_day: int, leniency: Leniency = Leniency.SMART) -> E:
        if leniency.is_lax():
            return era
        actual = self.find(epoch_day).era
        if actual == era:
            return era
        if leniency.is_strict():
            raise EraMismatch(f"Era {era} does not match {actual} at epoch-day {epoch_day}")
        return actual
