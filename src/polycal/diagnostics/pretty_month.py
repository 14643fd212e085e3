from __future__ import annotations

import argparse
from datetime import date
from typing import Any, List, Tuple

import polycal
from polycal.core.time import from_epoch_day
from polycal.core.types import EastAsianMonth, WeekModel
from polycal.engines.fields import start_of_month
from polycal.engines.weeks import week_rules

_DAY_NAMES = ("Mo", "Tu", "We", "Th", "Fr", "Sa", "Su")


def dow_header(model: WeekModel) -> str:
    names = [_DAY_NAMES[(model.first_day_of_week - 1 + i) % 7] for i in range(7)]
    return "Wk   " + "     ".join(n.ljust(2) for n in names)


def cell(top: str, bot: str, w: int = 6) -> Tuple[str, str]:
    return (top[:w].ljust(w), bot[:w].ljust(w))


def print_grid(title: str, model: WeekModel, weeks: List[Tuple[int, List[Tuple[str, str]]]]) -> None:
    header = dow_header(model)
    print(title)
    print(header)
    print("-" * len(header))
    for number, wk in weeks:
        print(f"{number:2d}   " + " ".join(c[0] for c in wk))
        print("     " + " ".join(c[1] for c in wk))
    print()


def parse_month(cal: Any, year: int, text: str) -> Any:
    if isinstance(cal.months(year)[0], EastAsianMonth):
        return EastAsianMonth.parse(text)
    return int(text)


def month_calendar(variant: str, year: int, month: Any, model: WeekModel) -> None:
    """Month grid: calendar day on top, Gregorian MM-DD below, week-of-year on the left."""
    cal = polycal.calendar(variant)
    engine = week_rules(cal, model).engine
    e0 = start_of_month(cal, year, month)
    e1 = e0 + cal.length_of_month(year, month) - 1

    weeks: List[Tuple[int, List[Tuple[str, str]]]] = []
    wk: List[Tuple[str, str]] = [cell("", "")] * (engine.local_day_of_week(e0) - 1)
    number = engine.week_of_year(cal.from_epoch_day(e0))
    for e in range(e0, e1 + 1):
        d = cal.from_epoch_day(e)
        g = from_epoch_day(e)
        wk.append(cell(f"{d.day:2d}", f"{g.month:02d}-{g.day:02d}"))
        if len(wk) == 7:
            weeks.append((number, wk))
            wk = []
            if e < e1:
                number = engine.week_of_year(cal.from_epoch_day(e + 1))
    if wk:
        weeks.append((number, wk + [cell("", "")] * (7 - len(wk))))

    title = f"{variant}  {year}-{month}   ({from_epoch_day(e0)} .. {from_epoch_day(e1)}, {model})"
    print_grid(title, model, weeks)


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Print a month grid of any calendar with week numbers.")
    p.add_argument("--calendar", default="chinese", help="Calendar variant (default: chinese).")
    p.add_argument("--year", type=int, default=None, help="Linear year of the calendar (default: current).")
    p.add_argument("--month", default="1", help="Month, e.g. 4 or 4L for a leap month (default: 1).")
    p.add_argument("--region", default="", help="Region for the week model, e.g. US (default: ISO).")
    args = p.parse_args(argv)

    cal = polycal.calendar(args.calendar)
    model = WeekModel.of_region(args.region) if args.region else WeekModel()
    year = args.year
    if year is None:
        year = cal.year_of(polycal.from_gregorian(date.today(), variant=args.calendar))
    month_calendar(args.calendar, year, parse_month(cal, year, args.month), model)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
