from __future__ import annotations

import logging

from polycal.core.registry import VariantRegistry
from polycal.engines.factory import make_calendar
from polycal.engines.specs import ALL_SPECS, spec_for_variant

log = logging.getLogger(__name__)

# month-table and new-moon calendars are built on first use
LAZY_FAMILIES = ("astronomical-hijri", "chinese", "japanese")


def build_calendar(variant: str):
    return make_calendar(spec_for_variant(variant))


def build_registry() -> VariantRegistry:
    reg = VariantRegistry(factory=build_calendar)
    for name, spec in ALL_SPECS.items():
        if spec.family not in LAZY_FAMILIES:
            reg.register(name, make_calendar(spec))
    log.debug("registry bootstrapped with %d calendars", len(reg.list()))
    return reg
