"""
polycal.engines.factory
-----------------------
Transforms pure data specifications into live calendar systems.
"""

from __future__ import annotations

from functools import lru_cache
import logging

from polycal.engines.arithmetic import CopticCalendar, IndianCalendar
from polycal.engines.chinese import ChineseCalendar
from polycal.engines.hijri import HijriAlgorithm
from polycal.engines.history import ChronoHistory
from polycal.engines.japanese import JapaneseCalendar
from polycal.engines.resources import load_month_table
from polycal.engines.specs import (
    ArithmeticParams,
    AstronomicalHijriParams,
    CalendarSpec,
    ChineseParams,
    HijriAlgorithmParams,
    HistoricParams,
    JapaneseParams,
)
from polycal.engines.tables import AstronomicalHijri, MonthTable

log = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def _month_table(name: str) -> MonthTable:
    # one load per table; the adjusted variants share it
    return load_month_table(name)


def make_calendar(spec: CalendarSpec):
    """The universal entry point."""
    p = spec.params
    log.debug("building calendar %s from %s", spec.name, type(p).__name__)
    if isinstance(p, ArithmeticParams):
        return CopticCalendar() if p.calendar == "coptic" else IndianCalendar()
    if isinstance(p, HijriAlgorithmParams):
        return HijriAlgorithm(p.base, p.adjustment)
    if isinstance(p, AstronomicalHijriParams):
        return AstronomicalHijri(_month_table(p.table), p.adjustment)
    if isinstance(p, ChineseParams):
        return ChineseCalendar()
    if isinstance(p, JapaneseParams):
        return JapaneseCalendar(_month_table(p.lunisolar_table))
    if isinstance(p, HistoricParams):
        if p.region is not None:
            return ChronoHistory.of_region(p.region)
        return ChronoHistory.from_variant(p.history)
    raise TypeError(f"Unknown calendar params type: {type(p)}")
