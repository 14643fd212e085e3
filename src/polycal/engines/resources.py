"""
polycal.engines.resources
-------------------------
Locating, rendering and exporting the month-length resources consumed by
`tables.parse_month_table`.

Search order for `<variant>.properties`:
  1) POLYCAL_DATA_DIR environment variable (directory)
  2) user cache ($XDG_CACHE_HOME/polycal or ~/.cache/polycal)
  3) built-in renderer (Umm al-Qura from hijri-converter, Japanese lunisolar from
     the new-moon series)

A file found in 1) or 2) is authoritative: a malformed file raises
ResourceFormatError instead of silently falling through to the renderer.
"""

from __future__ import annotations

from datetime import date
import logging
import os
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from hijri_converter import Hijri

from polycal.core.errors import ResourceFormatError, UnsupportedVariant
from polycal.core.time import from_epoch_day, gregorian_epoch_day
from polycal.engines.lunisolar import lmt_offset_hours, nearest_lunation, new_moon_day
from polycal.engines.tables import MonthTable, parse_month_table, render_month_table

log = logging.getLogger(__name__)

ENV_DATA_DIR = "POLYCAL_DATA_DIR"
UMALQURA = "islamic-umalqura"
JAPANESE_LUNISOLAR = "japanese-lunisolar"


def cache_dir() -> Path:
    xdg = os.environ.get("XDG_CACHE_HOME", "").strip()
    return (Path(xdg).expanduser() / "polycal") if xdg else (Path.home() / ".cache" / "polycal")


def candidate_paths(variant: str) -> List[Path]:
    name = f"{variant}.properties"
    out: List[Path] = []
    p = os.environ.get(ENV_DATA_DIR, "").strip()
    if p:
        out.append(Path(p).expanduser() / name)
    out.append(cache_dir() / name)
    return out


# ============================================================
# Built-in renderers
# ============================================================

UMALQURA_MIN_YEAR = 1343
UMALQURA_MAX_YEAR = 1500


def render_umalqura() -> str:
    """Umm al-Qura month lengths AH 1343..1500 as published by hijri-converter."""
    rows: Dict[int, List[int]] = {}
    for y in range(UMALQURA_MIN_YEAR, UMALQURA_MAX_YEAR + 1):
        rows[y] = [Hijri(y, m, 1).month_length() for m in range(1, 13)]
    start = date(*Hijri(UMALQURA_MIN_YEAR, 1, 1).to_gregorian().datetuple())
    return render_month_table(
        UMALQURA, start, rows,
        header="Umm al-Qura calendar of Saudi Arabia\nsource: hijri-converter",
    )


# Tenpo-era lunisolar calendar, ending with the Gregorian switch of 1873.
KYOTO_LONGITUDE = 135.0 + 46.0 / 60.0
JAPANESE_FIRST_NEW_YEAR = gregorian_epoch_day(1868, 1, 25)
JAPANESE_LEAP_MONTHS: Dict[int, int] = {1868: 4, 1870: 10}
# Meiji 5-12-1 and 5-12-2 (1872-12-30/31) were followed directly by 1873-01-01:
# the last lunisolar month has only two days.
LAST_LUNISOLAR_MONTH_START = gregorian_epoch_day(1872, 12, 30)
GREGORIAN_SWITCH = gregorian_epoch_day(1873, 1, 1)


def render_japanese_lunisolar() -> str:
    offset_h = lmt_offset_hours(KYOTO_LONGITUDE)

    def offset(jd_ut: float) -> float:
        return offset_h

    k = nearest_lunation(JAPANESE_FIRST_NEW_YEAR, offset)
    starts: List[int] = []
    for year in range(1868, 1873):
        n = 13 if year in JAPANESE_LEAP_MONTHS else 12
        for _ in range(n):
            starts.append(new_moon_day(k, offset))
            k += 1
    starts[0] = JAPANESE_FIRST_NEW_YEAR
    starts[-1] = LAST_LUNISOLAR_MONTH_START
    starts.append(GREGORIAN_SWITCH)

    rows: Dict[int, List[int]] = {}
    i = 0
    for year in range(1868, 1873):
        n = 13 if year in JAPANESE_LEAP_MONTHS else 12
        rows[year] = [starts[j + 1] - starts[j] for j in range(i, i + n)]
        i += n
    return render_month_table(
        JAPANESE_LUNISOLAR, from_epoch_day(JAPANESE_FIRST_NEW_YEAR), rows,
        leap_months=JAPANESE_LEAP_MONTHS,
        header="Japanese lunisolar calendar 1868..1872 (Kyoto mean time new moons)",
    )


RENDERERS: Dict[str, Callable[[], str]] = {
    UMALQURA: render_umalqura,
    JAPANESE_LUNISOLAR: render_japanese_lunisolar,
}


# ============================================================
# Loading
# ============================================================

def load_table_text(variant: str) -> Tuple[str, str]:
    """Return (text, source description) following the search order."""
    for path in candidate_paths(variant):
        if path.is_file():
            return path.read_text(encoding="utf-8"), str(path)
    if variant not in RENDERERS:
        raise UnsupportedVariant(f"No month table for '{variant}'. Available: {sorted(RENDERERS)}")
    return RENDERERS[variant](), "built-in"


def load_month_table(variant: str) -> MonthTable:
    text, source = load_table_text(variant)
    try:
        table = parse_month_table(text.splitlines(), variant)
    except ResourceFormatError as e:
        raise ResourceFormatError(f"{e} [source: {source}]") from e
    log.info("loaded month table %s v%s from %s", variant, table.version, source)
    return table


def export_table(variant: str, out: Optional[Path] = None) -> Path:
    """Write the built-in rendering of `variant` (default: into the user cache)."""
    if variant not in RENDERERS:
        raise UnsupportedVariant(f"No month table for '{variant}'. Available: {sorted(RENDERERS)}")
    text = RENDERERS[variant]()
    # parse before writing so a broken renderer never lands on disk
    parse_month_table(text.splitlines(), variant)
    path = Path(out) if out is not None else cache_dir() / f"{variant}.properties"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    log.info("wrote %s table to %s", variant, path)
    return path
