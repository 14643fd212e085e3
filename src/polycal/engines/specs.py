from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Literal, Optional

from polycal.core.errors import OutOfRange, UnsupportedVariant
from polycal.engines.hijri import HIJRI_ALGORITHMS, MAX_ADJUSTMENT, split_variant, join_variant
from polycal.engines.history import (
    FIRST_REFORM_VARIANT,
    PROLEPTIC_GREGORIAN_VARIANT,
    PROLEPTIC_JULIAN_VARIANT,
    REFORM_PREFIX,
    REGION_PREFIX,
    REGIONS,
    SWEDEN_VARIANT,
    canonical_reform_variant,
)
from polycal.engines.resources import JAPANESE_LUNISOLAR, UMALQURA


# ============================================================
# Parameter payloads (one per calendar family)
# ============================================================

@dataclass(frozen=True)
class ArithmeticParams:
    calendar: Literal["coptic", "indian"]

    def __post_init__(self) -> None:
        if self.calendar not in ("coptic", "indian"):
            raise UnsupportedVariant(f"Unknown arithmetic calendar '{self.calendar}'")


def _check_adjustment(adjustment: int) -> None:
    if abs(adjustment) > MAX_ADJUSTMENT:
        raise OutOfRange(f"Day adjustment out of range -{MAX_ADJUSTMENT}..+{MAX_ADJUSTMENT}: {adjustment}")


@dataclass(frozen=True)
class HijriAlgorithmParams:
    """30-year-cycle Hijri: leap pattern and epoch from `base`, plus a sighting adjustment."""
    base: str
    adjustment: int = 0

    def __post_init__(self) -> None:
        if self.base not in HIJRI_ALGORITHMS:
            raise UnsupportedVariant(
                f"Unknown Hijri algorithm '{self.base}'. Available: {sorted(HIJRI_ALGORITHMS)}")
        _check_adjustment(self.adjustment)


@dataclass(frozen=True)
class AstronomicalHijriParams:
    """Month-table Hijri (a `.properties` resource named after `table`)."""
    table: str = UMALQURA
    adjustment: int = 0

    def __post_init__(self) -> None:
        _check_adjustment(self.adjustment)


@dataclass(frozen=True)
class ChineseParams:
    pass


@dataclass(frozen=True)
class JapaneseParams:
    lunisolar_table: str = JAPANESE_LUNISOLAR


@dataclass(frozen=True)
class HistoricParams:
    """Either a named history (`history`) or a country history (`region`)."""
    history: str = FIRST_REFORM_VARIANT
    region: Optional[str] = None

    def __post_init__(self) -> None:
        if self.region is not None and self.region.upper() not in REGIONS:
            raise UnsupportedVariant(f"Unknown historic region '{self.region}'. Available: {list(REGIONS)}")


# ============================================================
# Catalogue
# ============================================================

Family = Literal["arithmetic", "hijri", "astronomical-hijri", "chinese", "japanese", "historic"]


@dataclass(frozen=True)
class CalendarSpec:
    """Pure data payload for constructing a calendar system."""
    name: str
    family: Family
    params: Any
    meta: Dict[str, Any] = field(default_factory=dict)

    def tweak(self, **kwargs: Any) -> CalendarSpec:
        params = replace(self.params, **kwargs)
        name = self.name
        if hasattr(params, "adjustment"):
            name = join_variant(split_variant(self.name)[0], params.adjustment)
        return replace(self, name=name, params=params)


COPTIC = CalendarSpec("coptic", "arithmetic", ArithmeticParams("coptic"),
                      {"era": "Anno Martyrum", "epoch": "284-08-29 (Julian)"})
INDIAN = CalendarSpec("indian", "arithmetic", ArithmeticParams("indian"),
                      {"era": "Saka", "epoch": "79-03-22 (Gregorian)"})

HIJRI_SPECS = {
    base: CalendarSpec(base, "hijri", HijriAlgorithmParams(base),
                       {"civil_epoch": civil, "leap_years": list(leaps)})
    for base, (leaps, civil) in HIJRI_ALGORITHMS.items()
}

UMALQURA_SPEC = CalendarSpec(UMALQURA, "astronomical-hijri", AstronomicalHijriParams(UMALQURA),
                             {"source": "Umm al-Qura month table"})

CHINESE = CalendarSpec("chinese", "chinese", ChineseParams(),
                       {"day_boundary": "Beijing LMT before 1929, UTC+8 after"})

JAPANESE = CalendarSpec("japanese", "japanese", JapaneseParams(),
                        {"gregorian_since": "1873-01-01"})

HISTORIC_SPECS = {
    name: CalendarSpec(name, "historic", HistoricParams(name))
    for name in (PROLEPTIC_GREGORIAN_VARIANT, PROLEPTIC_JULIAN_VARIANT, FIRST_REFORM_VARIANT, SWEDEN_VARIANT)
}
HISTORIC_SPECS.update({
    f"{REGION_PREFIX}:{region}": CalendarSpec(f"{REGION_PREFIX}:{region}", "historic", HistoricParams(region=region))
    for region in REGIONS
})

ALL_SPECS: Dict[str, CalendarSpec] = {
    "coptic": COPTIC,
    "indian": INDIAN,
    **HIJRI_SPECS,
    UMALQURA: UMALQURA_SPEC,
    "chinese": CHINESE,
    "japanese": JAPANESE,
    **HISTORIC_SPECS,
}


def spec_for_variant(variant: str) -> CalendarSpec:
    """
    Spec of a built-in variant or of a parametrized one: `<hijri base>:<±n>` for a
    day adjustment, `gregorian-reform:<iso date>` for a custom cutover.
    """
    if variant in ALL_SPECS:
        return ALL_SPECS[variant]
    base, sep, _ = variant.partition(":")
    if sep and base == REFORM_PREFIX:
        name = canonical_reform_variant(variant)
        if name in ALL_SPECS:
            return ALL_SPECS[name]
        return CalendarSpec(name, "historic", HistoricParams(name))
    if sep and (base in HIJRI_ALGORITHMS or base == UMALQURA):
        _, adjustment = split_variant(variant)
        return ALL_SPECS[base].tweak(adjustment=adjustment)
    raise UnsupportedVariant(f"Unknown calendar variant '{variant}'. Available: {sorted(ALL_SPECS)}")
