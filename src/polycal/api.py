from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional, Tuple, Union

from .core.registry import VariantRegistry
from .core.time import from_epoch_day as _iso_from_epoch_day, to_epoch_day as _iso_to_epoch_day
from .core.types import ISO_WEEK, WeekModel
from .engines import serial
from .engines.factory import make_calendar as _make_calendar
from .engines.fields import BaseRule, rules_for, start_of_month, start_of_year
from .engines.specs import ALL_SPECS, CalendarSpec, spec_for_variant
from .engines.weeks import week_rules

_registry: Optional[VariantRegistry] = None

DayLike = Union[date, int]


def set_registry(reg: VariantRegistry) -> None:
    global _registry
    _registry = reg


def _reg() -> VariantRegistry:
    if _registry is None:
        raise RuntimeError("Calendar registry not initialized")
    return _registry


def _epoch(d: DayLike) -> int:
    return d if isinstance(d, int) else _iso_to_epoch_day(d)


# ============================================================
# Calendars
# ============================================================

def list_calendars() -> List[str]:
    return sorted(set(ALL_SPECS) | set(_reg().list()))


def calendar(variant: str) -> Any:
    """The shared calendar system of `variant` (built and cached on first use)."""
    if variant in _reg():
        return _reg().get(variant)
    return _reg().get(spec_for_variant(variant).name)


def calendar_info(variant: str) -> Dict[str, Any]:
    cal = calendar(variant)
    spec = ALL_SPECS.get(cal.variant)
    return {
        "variant": cal.variant,
        "family": spec.family if spec is not None else spec_for_variant(cal.variant).family,
        "min_epoch_day": cal.min_epoch_day,
        "max_epoch_day": cal.max_epoch_day,
        "first_day": _iso_from_epoch_day(cal.min_epoch_day).isoformat(),
        "last_day": _iso_from_epoch_day(cal.max_epoch_day).isoformat(),
        "min_year": cal.min_year,
        "max_year": cal.max_year,
        "meta": dict(spec.meta) if spec is not None else {},
    }


def make_calendar(spec: CalendarSpec) -> Any:
    return _make_calendar(spec)


def register_calendar(name: str, system: Any, *, overwrite: bool = False) -> None:
    _reg().register(name, system, overwrite=overwrite)


# ============================================================
# Conversion
# ============================================================

def from_epoch_day(epoch_day: int, *, variant: str) -> Any:
    return calendar(variant).from_epoch_day(epoch_day)


def to_epoch_day(value: Any, *, variant: str) -> int:
    return calendar(variant).to_epoch_day(value)


def from_gregorian(d: date, *, variant: str) -> Any:
    return from_epoch_day(_iso_to_epoch_day(d), variant=variant)


def to_gregorian(value: Any, *, variant: str) -> date:
    return _iso_from_epoch_day(to_epoch_day(value, variant=variant))


def convert(value: Any, source: str, target: str) -> Any:
    """Date of calendar `source` -> the same day in calendar `target`."""
    return calendar(target).from_epoch_day(calendar(source).to_epoch_day(value))


def month_bounds(year: int, month: Any, *, variant: str) -> Tuple[date, date]:
    """First and last Gregorian day of a month given in the calendar's linear year."""
    cal = calendar(variant)
    start = start_of_month(cal, year, month)
    return _iso_from_epoch_day(start), _iso_from_epoch_day(start + cal.length_of_month(year, month) - 1)


def new_year(year: int, *, variant: str) -> date:
    return _iso_from_epoch_day(start_of_year(calendar(variant), year))


# ============================================================
# Fields and weeks
# ============================================================

def rules(variant: str, *, model: WeekModel = ISO_WEEK) -> Dict[str, BaseRule]:
    """All field rules of a calendar, week fields included, keyed by field name."""
    cal = calendar(variant)
    out = rules_for(cal).as_dict()
    w = week_rules(cal, model)
    for rule in (w.day_of_week, w.week_of_year, w.week_of_month):
        out[rule.name] = rule
    return out


def week_info(d: DayLike, *, variant: str = "proleptic-gregorian",
              model: Optional[WeekModel] = None, region: Optional[str] = None) -> Dict[str, Any]:
    if model is None:
        model = WeekModel.of_region(region) if region else ISO_WEEK
    cal = calendar(variant)
    out = week_rules(cal, model).engine.week_info(cal.from_epoch_day(_epoch(d)))
    out["calendar"] = cal.variant
    return out


# ============================================================
# Persisted form
# ============================================================

def encode(value: Any, *, variant: str) -> str:
    return serial.encode(calendar(variant), value)


def decode(text: str) -> Any:
    return serial.decode(text, calendar)
