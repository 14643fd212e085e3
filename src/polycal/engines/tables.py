"""
polycal.engines.tables
----------------------
Month-length tables for calendars whose months are observed or tabulated rather
than computed (astronomical Hijri variants, the Japanese lunisolar calendar).

A table is parsed once from a key/value resource:

    type = islamic-umalqura
    version = 1.0
    iso-start = 1924-08-01
    min = 1343
    max = 1500
    1343 = 30 29 30 29 30 30 29 30 29 30 29 30
    ...

A year that embeds a leap month declares `<year>.leap = <n>` and lists 13 lengths.
Parsing and the binary search are independent of any caching (see resources.py).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
import logging
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from polycal.core.errors import InvalidDate, OutOfRange, ResourceFormatError
from polycal.core.time import to_epoch_day
from polycal.core.types import EastAsianMonth, MonthSpec, month_is_leap, month_number
from polycal.engines.hijri import HijriDate, MAX_ADJUSTMENT, join_variant

log = logging.getLogger(__name__)


# ============================================================
# Resource parsing
# ============================================================

def _unquote(s: str) -> str:
    s = s.strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in "\"'":
        s = s[1:-1].strip()
    return s


def parse_properties(lines: Iterable[str]) -> Dict[str, str]:
    """Minimal `key = value` reader: '#'/'!' comments, optional quotes around both sides."""
    out: Dict[str, str] = {}
    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line[0] in "#!":
            continue
        key, sep, value = line.partition("=")
        if not sep:
            raise ResourceFormatError(f"Line {lineno}: expected 'key = value', got {raw!r}")
        out[_unquote(key)] = _unquote(value)
    return out


def _int(props: Dict[str, str], key: str, variant: str) -> int:
    if key not in props:
        raise ResourceFormatError(f"Missing key '{key}' in table '{variant}'")
    try:
        return int(props[key])
    except ValueError:
        raise ResourceFormatError(f"Key '{key}' is not an integer in table '{variant}': {props[key]!r}") from None


@dataclass(frozen=True, eq=False)
class MonthTable:
    """
    Parallel month arrays over a flattened (year, month) index.

    starts[i] is the epoch-day of month i, lengths[i] its length, and
    starts[-1] is one past the last tabulated day, so starts[i+1] == starts[i] + lengths[i].
    year_index[y - min_year] is the flat index of the first month of year y.
    """
    variant: str
    version: str
    min_year: int
    max_year: int
    starts: np.ndarray
    lengths: np.ndarray
    year_index: np.ndarray
    leap_months: Dict[int, int] = field(default_factory=dict)

    @property
    def first_day(self) -> int:
        return int(self.starts[0])

    @property
    def last_day(self) -> int:
        return int(self.starts[-1]) - 1

    def search(self, epoch_day: int) -> int:
        """Largest month index whose start <= epoch_day."""
        if not (self.first_day <= epoch_day <= self.last_day):
            raise OutOfRange(f"Out of table range ({self.variant}): {epoch_day}")
        return int(np.searchsorted(self.starts, epoch_day, side="right")) - 1

    def months_in_year(self, year: int) -> int:
        self.check_year(year)
        i = year - self.min_year
        return int(self.year_index[i + 1] - self.year_index[i])

    def months(self, year: int) -> List[EastAsianMonth]:
        leap = self.leap_months.get(year)
        out: List[EastAsianMonth] = []
        for m in range(1, 13):
            out.append(EastAsianMonth(m))
            if leap == m:
                out.append(EastAsianMonth(m, True))
        return out

    def check_year(self, year: int) -> None:
        if not (self.min_year <= year <= self.max_year):
            raise OutOfRange(
                f"Year {year} outside table range [{self.min_year}, {self.max_year}] ({self.variant})")

    def index_of(self, year: int, month: MonthSpec) -> int:
        """Flat index of (year, month); InvalidDate for a leap flag the year does not carry."""
        self.check_year(year)
        n = month_number(month)
        if not (1 <= n <= 12):
            raise InvalidDate(f"Month out of range: {month}")
        leap = self.leap_months.get(year)
        is_leap = month_is_leap(month)
        if is_leap and leap != n:
            raise InvalidDate(f"Year {year} has no leap month {n} ({self.variant})")
        pos = n - 1
        if leap is not None and (n > leap or (n == leap and is_leap)):
            pos += 1
        return int(self.year_index[year - self.min_year]) + pos

    def locate(self, index: int) -> Tuple[int, EastAsianMonth]:
        """Inverse of index_of."""
        yi = int(np.searchsorted(self.year_index, index, side="right")) - 1
        year = self.min_year + yi
        pos = index - int(self.year_index[yi])
        return year, self.months(year)[pos]

    def start_of(self, year: int, month: MonthSpec) -> int:
        return int(self.starts[self.index_of(year, month)])

    def length_of(self, year: int, month: MonthSpec) -> int:
        return int(self.lengths[self.index_of(year, month)])

    def length_of_year(self, year: int) -> int:
        self.check_year(year)
        i = year - self.min_year
        a, b = int(self.year_index[i]), int(self.year_index[i + 1])
        return int(self.starts[b] - self.starts[a])


def parse_month_table(lines: Iterable[str], variant: str) -> MonthTable:
    """Build a MonthTable; every format problem raises ResourceFormatError here, not later."""
    props = parse_properties(lines)

    declared = props.get("type")
    if declared != variant:
        raise ResourceFormatError(f"Wrong calendar variant: expected '{variant}', found '{declared}'")
    version = props.get("version", "1.0")

    try:
        iso_start = date.fromisoformat(props["iso-start"])
    except KeyError:
        raise ResourceFormatError(f"Missing key 'iso-start' in table '{variant}'") from None
    except ValueError:
        raise ResourceFormatError(f"Bad iso-start in table '{variant}': {props['iso-start']!r}") from None

    ymin = _int(props, "min", variant)
    ymax = _int(props, "max", variant)
    if ymax < ymin:
        raise ResourceFormatError(f"max < min in table '{variant}': {ymax} < {ymin}")

    lengths: List[int] = []
    year_index: List[int] = [0]
    leap_months: Dict[int, int] = {}

    for year in range(ymin, ymax + 1):
        row = props.get(str(year))
        if row is None:
            raise ResourceFormatError(f"Missing year {year} in table '{variant}'")
        expected = 12
        leap_key = f"{year}.leap"
        if leap_key in props:
            leap = _int(props, leap_key, variant)
            if not (1 <= leap <= 12):
                raise ResourceFormatError(f"Leap month out of range in year {year} ({variant}): {leap}")
            leap_months[year] = leap
            expected = 13
        tokens = row.split()
        if len(tokens) != expected:
            raise ResourceFormatError(
                f"Incomplete year {year} in table '{variant}': {len(tokens)} entries, expected {expected}")
        for tok in tokens:
            try:
                n = int(tok)
            except ValueError:
                raise ResourceFormatError(f"Non-integer month length in year {year} ({variant}): {tok!r}") from None
            if n <= 0:
                raise ResourceFormatError(f"Non-positive month length in year {year} ({variant}): {n}")
            lengths.append(n)
        year_index.append(len(lengths))

    arr = np.asarray(lengths, dtype=np.int64)
    starts = np.empty(len(arr) + 1, dtype=np.int64)
    starts[0] = to_epoch_day(iso_start)
    np.cumsum(arr, out=starts[1:])
    starts[1:] += starts[0]

    log.debug("parsed month table %s v%s: years %d..%d, %d months", variant, version, ymin, ymax, len(arr))
    return MonthTable(
        variant=variant,
        version=version,
        min_year=ymin,
        max_year=ymax,
        starts=starts,
        lengths=arr,
        year_index=np.asarray(year_index, dtype=np.int64),
        leap_months=leap_months,
    )


def render_month_table(
    variant: str,
    iso_start: date,
    rows: Dict[int, List[int]],
    *,
    leap_months: Optional[Dict[int, int]] = None,
    version: str = "1.0",
    header: str = "",
) -> str:
    """Inverse of parse_month_table, used by the table exporters."""
    years = sorted(rows)
    out: List[str] = []
    if header:
        out.extend(f"# {h}" for h in header.splitlines())
    out.append(f"type={variant}")
    out.append(f"version={version}")
    out.append(f"iso-start={iso_start.isoformat()}")
    out.append(f"min={years[0]}")
    out.append(f"max={years[-1]}")
    for y in years:
        if leap_months and y in leap_months:
            out.append(f"{y}.leap={leap_months[y]}")
        out.append(f"{y}=" + " ".join(str(n) for n in rows[y]))
    return "\n".join(out) + "\n"


# ============================================================
# Astronomical Hijri (e.g. Umm al-Qura)
# ============================================================

class AstronomicalHijri:
    """Hijri calendar backed by a MonthTable, optionally shifted by a day adjustment."""

    def __init__(self, table: MonthTable, adjustment: int = 0) -> None:
        if abs(adjustment) > MAX_ADJUSTMENT:
            raise OutOfRange(f"Day adjustment out of range -3..+3: {adjustment}")
        if table.leap_months:
            raise ResourceFormatError(f"Hijri table '{table.variant}' must not declare leap months")
        self.table = table
        self.base = table.variant
        self.adjustment = adjustment
        self.variant = join_variant(table.variant, adjustment)

    @property
    def version(self) -> str:
        return self.table.version

    @property
    def min_epoch_day(self) -> int:
        return self.table.first_day - self.adjustment

    @property
    def max_epoch_day(self) -> int:
        return self.table.last_day - self.adjustment

    @property
    def min_year(self) -> int:
        return self.table.min_year

    @property
    def max_year(self) -> int:
        return self.table.max_year

    def length_of_month(self, year: int, month: int) -> int:
        return self.table.length_of(year, month)

    def length_of_year(self, year: int) -> int:
        return self.table.length_of_year(year)

    def months(self, year: int) -> List[int]:
        return list(range(1, 13))

    def is_valid(self, year: int, month: int, day: int) -> bool:
        if not (self.min_year <= year <= self.max_year) or not (1 <= month <= 12):
            return False
        return 1 <= day <= self.table.length_of(year, month)

    def year_of(self, date: HijriDate) -> int:
        return date.year

    def create(self, year: int, month: int, day: int) -> HijriDate:
        if not (self.min_year <= year <= self.max_year):
            raise OutOfRange(
                f"Hijri year {year} outside table range [{self.min_year}, {self.max_year}] ({self.variant})")
        if not self.is_valid(year, month, day):
            raise InvalidDate(f"Invalid Hijri date: {year}-{month}-{day} ({self.variant})")
        return HijriDate(self.variant, year, month, day)

    def to_epoch_day(self, date: HijriDate) -> int:
        if date.variant != self.variant:
            raise InvalidDate(f"Variant mismatch: {date.variant} != {self.variant}")
        self.create(date.year, date.month, date.day)
        return self.table.start_of(date.year, date.month) + date.day - 1 - self.adjustment

    def from_epoch_day(self, epoch_day: int) -> HijriDate:
        real = epoch_day + self.adjustment
        idx = self.table.search(real)
        year, month = self.table.locate(idx)
        return HijriDate(self.variant, year, month.number, real - int(self.table.starts[idx]) + 1)
