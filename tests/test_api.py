# tests/test_api.py

import random
from datetime import date

import pytest

import polycal
from polycal.core.types import EastAsianMonth
from polycal.engines.fields import month_position


def test_convert_between_calendars():
    coptic = polycal.calendar("coptic")
    civil = polycal.convert(coptic.create(1740, 1, 1), "coptic", "islamic-civil")
    assert polycal.to_gregorian(civil, variant="islamic-civil") == date(2023, 9, 12)
    assert polycal.convert(civil, "islamic-civil", "coptic") == coptic.create(1740, 1, 1)


def test_epoch_day_entry_points():
    assert polycal.to_epoch_day(polycal.calendar("proleptic-gregorian").create(1972, 1, 1),
                                variant="proleptic-gregorian") == 0
    d = polycal.from_epoch_day(0, variant="indian")
    assert polycal.to_gregorian(d, variant="indian") == date(1972, 1, 1)


@pytest.mark.parametrize("variant,year,month,first,last", [
    ("coptic", 1740, 13, date(2024, 9, 6), date(2024, 9, 10)),
    ("islamic-civil", 1445, 1, date(2023, 7, 19), date(2023, 8, 17)),
    ("chinese", 4656, EastAsianMonth(4, True), date(2020, 5, 23), date(2020, 6, 20)),
    # bounds are proleptic Gregorian: Julian 1582-10-01 is Gregorian 1582-10-11
    ("first-gregorian-reform", 1582, 10, date(1582, 10, 11), date(1582, 10, 31)),
])
def test_month_bounds(variant, year, month, first, last):
    assert polycal.month_bounds(year, month, variant=variant) == (first, last)


def test_new_year():
    assert polycal.new_year(4656, variant="chinese") == date(2020, 1, 25)
    assert polycal.new_year(1445, variant="islamic-umalqura") == date(2023, 7, 19)
    assert polycal.new_year(1945, variant="indian") == date(2023, 3, 22)


def test_calendar_info():
    info = polycal.calendar_info("islamic-civil:-1")
    assert info["variant"] == "islamic-civil:-1"
    assert info["family"] == "hijri"
    assert info["meta"] == {}
    assert info["min_year"] == 1

    info = polycal.calendar_info("coptic")
    assert info["family"] == "arithmetic"
    assert info["meta"]["era"] == "Anno Martyrum"
    assert info["first_day"] == "0284-08-29"


def test_rules_include_week_fields():
    r = polycal.rules("chinese")
    for name in ("year", "month", "day_of_month", "day_of_year", "era", "year_of_era",
                 "day_of_week", "week_of_year", "week_of_month"):
        assert name in r
    d = polycal.from_gregorian(date(2020, 1, 27), variant="chinese")
    assert r["week_of_year"].get(d) == 1


def test_week_info_epoch_day():
    e = (date(2024, 9, 2) - date(1972, 1, 1)).days
    info = polycal.week_info(e, variant="coptic")
    assert info["day_of_week"] == 1
    assert info["calendar"] == "coptic"


def test_top_level_exports():
    for name in polycal.__all__:
        assert hasattr(polycal, name)
    assert issubclass(polycal.EraMismatch, polycal.PolycalError)
    assert issubclass(polycal.ResourceFormatError, polycal.PolycalError)


@pytest.mark.parametrize("variant", polycal.list_calendars())
def test_dates_increase_with_epoch_day(variant):
    cal = polycal.calendar(variant)
    lo = max(cal.min_epoch_day, -800_000)
    hi = min(cal.max_epoch_day, 800_000) - 400
    rng = random.Random(11)
    starts = [cal.min_epoch_day, cal.max_epoch_day - 400] + [rng.randint(lo, hi) for _ in range(3)]
    for start in starts:
        prev = None
        for e in range(start, start + 401):
            d = cal.from_epoch_day(e)
            assert cal.to_epoch_day(d) == e
            key = (cal.year_of(d), month_position(cal, d), d.day)
            if prev is not None:
                assert key > prev
            prev = key
