"""
polycal.engines.serial
----------------------
Stable persisted form of calendar dates, independent of the in-memory classes.

A date is stored as its type tag, the variant string of its calendar system and
the minimal fields needed to rebuild it:

    tag | variant | era | year | month | leap | day

`year` is the year the family writes down: the year of era for Japanese and
historic dates, the elapsed year for Chinese dates, the plain year otherwise.
Tags are fixed numbers and must never be reassigned.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict

from polycal.core.errors import InvalidDate, UnsupportedVariant
from polycal.core.types import EastAsianMonth, Leniency
from polycal.engines.arithmetic import CopticCalendar, CopticDate, IndianCalendar, IndianDate
from polycal.engines.chinese import ChineseCalendar, ChineseDate
from polycal.engines.hijri import HijriAlgorithm, HijriDate
from polycal.engines.history import ChronoHistory, HistoricDate, HistoricEra
from polycal.engines.japanese import JapaneseCalendar, JapaneseDate, Nengo
from polycal.engines.tables import AstronomicalHijri

HIJRI = 1
COPTIC = 3
INDIAN = 10
JAPANESE = 11
CHINESE = 14
HISTORIC = 16

TAGS = {
    HIJRI: "hijri",
    COPTIC: "coptic",
    INDIAN: "indian",
    JAPANESE: "japanese",
    CHINESE: "chinese",
    HISTORIC: "historic",
}

SEPARATOR = "|"

_SYSTEM_TAGS = (
    ((HijriAlgorithm, AstronomicalHijri), HIJRI),
    ((CopticCalendar,), COPTIC),
    ((IndianCalendar,), INDIAN),
    ((JapaneseCalendar,), JAPANESE),
    ((ChineseCalendar,), CHINESE),
    ((ChronoHistory,), HISTORIC),
)


def tag_of(system: Any) -> int:
    for types, tag in _SYSTEM_TAGS:
        if isinstance(system, types):
            return tag
    raise UnsupportedVariant(f"No serial tag for calendar {system!r}")


@dataclass(frozen=True)
class SerialForm:
    tag: int
    variant: str
    era: str
    year: int
    month: int
    leap: bool
    day: int

    def __post_init__(self) -> None:
        if self.tag not in TAGS:
            raise InvalidDate(f"Unknown serial tag: {self.tag}")
        if SEPARATOR in self.variant:
            raise InvalidDate(f"Variant must not contain '{SEPARATOR}': {self.variant!r}")

    def encode(self) -> str:
        fields = (self.tag, self.variant, self.era, self.year, self.month, int(self.leap), self.day)
        return SEPARATOR.join(str(f) for f in fields)

    @classmethod
    def decode(cls, text: str) -> SerialForm:
        parts = text.strip().split(SEPARATOR)
        if len(parts) != 7:
            raise InvalidDate(f"Expected 7 fields in serial form, got {len(parts)}: {text!r}")
        tag, variant, era, year, month, leap, day = parts
        try:
            return cls(int(tag), variant, era, int(year), int(month), leap == "1", int(day))
        except ValueError as e:
            if isinstance(e, InvalidDate):
                raise
            raise InvalidDate(f"Malformed serial form {text!r}: {e}") from None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> SerialForm:
        return cls(
            tag=int(d["tag"]),
            variant=str(d["variant"]),
            era=str(d.get("era", "")),
            year=int(d["year"]),
            month=int(d["month"]),
            leap=bool(d.get("leap", False)),
            day=int(d["day"]),
        )


def externalize(system: Any, date: Any) -> SerialForm:
    """Serial form of `date`, which must belong to `system`."""
    system.to_epoch_day(date)  # validates membership
    v = system.variant
    if isinstance(date, HijriDate):
        return SerialForm(HIJRI, v, "", date.year, date.month, False, date.day)
    if isinstance(date, CopticDate):
        return SerialForm(COPTIC, v, "", date.year, date.month, False, date.day)
    if isinstance(date, IndianDate):
        return SerialForm(INDIAN, v, "", date.year, date.month, False, date.day)
    if isinstance(date, JapaneseDate):
        return SerialForm(JAPANESE, v, date.era.name, date.year_of_era, date.month.number, date.month.leap, date.day)
    if isinstance(date, ChineseDate):
        return SerialForm(CHINESE, v, "", date.elapsed_year, date.month.number, date.month.leap, date.day)
    if isinstance(date, HistoricDate):
        return SerialForm(HISTORIC, v, date.era.name, date.year_of_era, date.month, False, date.day)
    raise TypeError(f"Unsupported date type: {type(date).__name__}")


def internalize(form: SerialForm, lookup: Callable[[str], Any]) -> Any:
    """
    Rebuild a date; `lookup` maps a variant string to its calendar system (usually
    the registry's `get`). Eras are restored verbatim (LAX), so a stored date
    comes back exactly as it was written.
    """
    system = lookup(form.variant)
    if tag_of(system) != form.tag:
        raise UnsupportedVariant(f"Variant '{form.variant}' does not hold {TAGS[form.tag]} dates")
    if form.tag in (JAPANESE, HISTORIC):
        era_type = Nengo if form.tag == JAPANESE else HistoricEra
        try:
            era = era_type[form.era]
        except KeyError:
            raise InvalidDate(f"Unknown {TAGS[form.tag]} era: {form.era!r}") from None
        month: Any = EastAsianMonth(form.month, form.leap) if form.tag == JAPANESE else form.month
        date = system.of_era(era, form.year, month, form.day, Leniency.LAX)
    elif form.tag == CHINESE:
        date = system.create(form.year, EastAsianMonth(form.month, form.leap), form.day)
    else:
        date = system.create(form.year, form.month, form.day)
    return date


def encode(system: Any, date: Any) -> str:
    return externalize(system, date).encode()


def decode(text: str, lookup: Callable[[str], Any]) -> Any:
    return internalize(SerialForm.decode(text), lookup)
