from __future__ import annotations

from datetime import date
import argparse
from typing import List, Tuple

import polycal
from polycal.core.time import from_epoch_day, gregorian_epoch_day
from polycal.engines.fields import start_of_year

DEFAULT_CALENDARS: List[Tuple[str, str]] = [
    ("Chinese", "chinese"),
    ("Japanese", "japanese"),
    ("Umm al-Qura", "islamic-umalqura"),
    ("Civil", "islamic-civil"),
    ("Coptic", "coptic"),
]


def mmdd(d: date) -> str:
    return f"{d.month:02d}-{d.day:02d}"


def parse_calendars(arg: str) -> List[Tuple[str, str]]:
    """
    Parse calendar list from CLI.
    Example:
      --calendars "Chinese=chinese,Civil=islamic-civil"
    Bare variants are labelled with their own name:
      --calendars "chinese,coptic"
    """
    items = [x.strip() for x in arg.split(",") if x.strip()]
    out: List[Tuple[str, str]] = []
    for it in items:
        if "=" in it:
            name, variant = it.split("=", 1)
            out.append((name.strip(), variant.strip()))
        else:
            out.append((it, it))
    return out


def new_years_in(variant: str, gregorian_year: int) -> List[Tuple[int, date]]:
    """(calendar year, Gregorian date) of every new year falling in `gregorian_year`."""
    cal = polycal.calendar(variant)
    lo = max(gregorian_epoch_day(gregorian_year, 1, 1), cal.min_epoch_day)
    hi = min(gregorian_epoch_day(gregorian_year, 12, 31), cal.max_epoch_day)
    if lo > hi:
        return []
    out = []
    year = cal.year_of(cal.from_epoch_day(lo))
    while year <= cal.max_year:
        e = start_of_year(cal, year)
        if e > hi:
            break
        if e >= lo:
            out.append((year, from_epoch_day(e)))
        year += 1
    return out


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Print a New Year date table for several calendars.")
    p.add_argument("--from-year", type=int, default=2000)
    p.add_argument("--to-year", type=int, default=2030)
    p.add_argument(
        "--calendars",
        type=str,
        default="",
        help='Comma list like "Chinese=chinese,Civil=islamic-civil" (default: 5 calendars).',
    )
    p.add_argument(
        "--dates",
        choices=("mmdd", "iso"),
        default="mmdd",
        help="Display format in table columns (default: mmdd).",
    )
    args = p.parse_args(argv)

    calendars = parse_calendars(args.calendars) if args.calendars else DEFAULT_CALENDARS

    def fmt(d: date) -> str:
        return mmdd(d) if args.dates == "mmdd" else d.isoformat()

    Y0, Y1 = args.from_year, args.to_year
    if Y1 < Y0:
        raise SystemExit("--to-year must be >= --from-year")

    headers = ["Year"] + [name for name, _ in calendars]
    colw = [5] + [max(12, len(h)) for h in headers[1:]]
    line = "  ".join(h.ljust(w) for h, w in zip(headers, colw))
    print(line)
    print("-" * len(line))

    for Y in range(Y0, Y1 + 1):
        row = [str(Y).ljust(colw[0])]
        for (_, variant), w in zip(calendars, colw[1:]):
            cell = " ".join(fmt(d) for _, d in new_years_in(variant, Y)) or "-"
            row.append(cell.ljust(w))
        print("  ".join(row))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
