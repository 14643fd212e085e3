from __future__ import annotations

import argparse
from datetime import date
import importlib
import inspect
import json
import logging
import re
import sys
from typing import Any, List, Optional

from polycal.core.errors import PolycalError

log = logging.getLogger(__name__)

_DATE_RE = re.compile(r"^(-?\d+)-(\d+[Ll*]?)-(\d+)$")
GREGORIAN = "gregorian"


def _parse_ymd(s: str) -> date:
    y, m, d = map(int, s.split("-"))
    return date(y, m, d)


def _run_module_main(modpath: str, argv: List[str]) -> int:
    """
    Import module and run its main().

    Supports:
      - main(argv: list[str] | None = None) -> int|None
      - main() -> int|None
    """
    mod = importlib.import_module(modpath)
    if not hasattr(mod, "main"):
        raise SystemExit(f"Module {modpath} has no main()")
    fn = getattr(mod, "main")

    sig = inspect.signature(fn)
    if len(sig.parameters) == 0:
        rv = fn()
    else:
        rv = fn(argv)
    return int(rv or 0)


def _parse_month(cal: Any, year: int, text: str) -> Any:
    from polycal.core.types import EastAsianMonth
    if isinstance(cal.months(year)[0], EastAsianMonth):
        return EastAsianMonth.parse(text)
    return int(text)


def _epoch_of(text: str, source: str) -> int:
    """Epoch-day of `Y-M-D` in calendar `source` (Y is the calendar's linear year)."""
    import polycal
    from polycal.core.time import to_epoch_day

    if source == GREGORIAN:
        return to_epoch_day(_parse_ymd(text))
    m = _DATE_RE.match(text.strip())
    if m is None:
        raise SystemExit(f"Expected Y-M-D (month may carry L for leap), got {text!r}")
    cal = polycal.calendar(source)
    year = int(m.group(1))
    return cal.to_epoch_day(cal.create(year, _parse_month(cal, year, m.group(2)), int(m.group(3))))


def cmd_convert(argv: List[str]) -> int:
    import polycal
    from polycal.core.time import from_epoch_day

    p = argparse.ArgumentParser(prog="polycal convert", description="Convert a date between calendars")
    p.add_argument("date", help="Y-M-D in the source calendar, or an epoch-day with --epoch-day")
    p.add_argument("--from", dest="source", default=GREGORIAN, help="Source calendar (default: gregorian)")
    p.add_argument("--to", action="append", default=[], help="Target calendar (repeatable, default: all)")
    p.add_argument("--epoch-day", action="store_true", help="Interpret `date` as an epoch-day")
    p.add_argument("--encode", action="store_true", help="Also print the persisted form")
    args = p.parse_args(argv)

    e = int(args.date) if args.epoch_day else _epoch_of(args.date, args.source)
    print(f"epoch-day {e}  (ISO {from_epoch_day(e).isoformat()})")
    for variant in args.to or polycal.list_calendars():
        cal = polycal.calendar(variant)
        if not (cal.min_epoch_day <= e <= cal.max_epoch_day):
            print(f"  {variant:28s} (out of range)")
            continue
        d = cal.from_epoch_day(e)
        line = f"  {variant:28s} {d}"
        if args.encode:
            line += f"   {polycal.encode(d, variant=variant)}"
        print(line)
    return 0


def cmd_calendars(argv: List[str]) -> int:
    import polycal

    p = argparse.ArgumentParser(prog="polycal calendars", description="List calendar variants")
    p.add_argument("--info", action="store_true", help="Print range and metadata as JSON")
    args = p.parse_args(argv)

    for variant in polycal.list_calendars():
        if args.info:
            print(json.dumps(polycal.calendar_info(variant), sort_keys=True))
        else:
            print(variant)
    return 0


def cmd_month(argv: List[str]) -> int:
    import polycal

    p = argparse.ArgumentParser(prog="polycal month", description="Gregorian bounds of a calendar month")
    p.add_argument("calendar")
    p.add_argument("year", type=int, help="Linear year of the calendar")
    p.add_argument("month", help="Month, e.g. 4 or 4L for a leap month")
    args = p.parse_args(argv)

    cal = polycal.calendar(args.calendar)
    month = _parse_month(cal, args.year, args.month)
    first, last = polycal.month_bounds(args.year, month, variant=args.calendar)
    print(f"{args.calendar} {args.year}-{month}: {first.isoformat()} .. {last.isoformat()}"
          f"  ({cal.length_of_month(args.year, month)} days)")
    return 0


def cmd_week(argv: List[str]) -> int:
    import polycal
    from polycal.core.types import WeekModel

    p = argparse.ArgumentParser(prog="polycal week", description="Week fields of a Gregorian date")
    p.add_argument("date", help="YYYY-MM-DD")
    p.add_argument("--calendar", default="proleptic-gregorian", help="Calendar giving years and months")
    p.add_argument("--region", default="", help="Region of the week model (default: ISO-8601)")
    p.add_argument("--first-day", type=int, default=None, help="First day of week, 1=Monday .. 7=Sunday")
    p.add_argument("--min-days", type=int, default=None, help="Minimal days in first week")
    args = p.parse_args(argv)

    model = None
    if args.first_day is not None or args.min_days is not None:
        model = WeekModel(args.first_day or 1, args.min_days or 4)
    info = polycal.week_info(_parse_ymd(args.date), variant=args.calendar, model=model, region=args.region or None)
    print(json.dumps(info, sort_keys=True))
    return 0


def cmd_export_table(argv: List[str]) -> int:
    from polycal.engines.resources import RENDERERS, export_table

    p = argparse.ArgumentParser(prog="polycal export-table", description="Write a month-length table resource")
    p.add_argument("variant", choices=sorted(RENDERERS))
    p.add_argument("--out", default=None, help="Output file (default: user cache directory)")
    args = p.parse_args(argv)

    path = export_table(args.variant, args.out)
    print(f"Saved: {path}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    p = argparse.ArgumentParser(prog="polycal", description="Multi-calendar conversion toolkit CLI.")
    p.add_argument("--log-level", default="warning", help="debug|info|warning|error (default: warning)")
    p.add_argument("--log-file", default=None, help="Also log to this (rotating) file")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("convert", help="Convert a date between calendars")
    sub.add_parser("calendars", help="List calendar variants")
    sub.add_parser("month", help="Gregorian bounds of a calendar month")
    sub.add_parser("week", help="Week fields of a date under a week model")
    sub.add_parser("export-table", help="Write a month-length table resource")

    p_diag = sub.add_parser("diag", help="Diagnostics tools")
    p_diag.add_argument(
        "tool",
        choices=["leap-months", "new-years", "pretty-month", "round-trip"],
        help="Which diagnostic to run",
    )

    args, rest = p.parse_known_args(argv)

    from polycal.logging_setup import parse_level, setup_logging
    try:
        setup_logging(level=parse_level(args.log_level), log_file=args.log_file)
    except ValueError as e:
        raise SystemExit(str(e))

    commands = {
        "convert": cmd_convert,
        "calendars": cmd_calendars,
        "month": cmd_month,
        "week": cmd_week,
        "export-table": cmd_export_table,
    }
    try:
        if args.cmd in commands:
            return commands[args.cmd](rest)
        if args.cmd == "diag":
            tool_map = {
                "leap-months": "polycal.diagnostics.leap_months",
                "new-years": "polycal.diagnostics.new_years_table",
                "pretty-month": "polycal.diagnostics.pretty_month",
                "round-trip": "polycal.diagnostics.round_trip",
            }
            return _run_module_main(tool_map[args.tool], rest)
    except PolycalError as e:
        log.debug("command failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 2

    raise RuntimeError("unreachable")


if __name__ == "__main__":
    raise SystemExit(main())
