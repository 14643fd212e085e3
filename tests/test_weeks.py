# tests/test_weeks.py

import random
from datetime import date, timedelta

import pytest

import polycal
from polycal.core.errors import InvalidDate
from polycal.core.time import iso_weekday, to_epoch_day
from polycal.core.types import ISO_WEEK, WeekModel
from polycal.engines.weeks import WeekFieldEngine, week_rules

US = WeekModel.of_region("US")


@pytest.fixture(scope="module")
def greg():
    return polycal.calendar("proleptic-gregorian")


def on(cal, iso):
    return cal.from_epoch_day(to_epoch_day(iso))


def test_iso_weekday():
    assert iso_weekday(0) == 6          # 1972-01-01 was a Saturday
    assert iso_weekday(to_epoch_day(date(2024, 9, 2))) == 1


def test_week_models():
    assert US == WeekModel(7, 1)
    assert WeekModel.of_region("de") == ISO_WEEK
    assert WeekModel.of_region("XX") == ISO_WEEK
    assert US.last_day_of_week == 6
    assert ISO_WEEK.last_day_of_week == 7
    with pytest.raises(ValueError):
        WeekModel(0, 4)
    with pytest.raises(ValueError):
        WeekModel(1, 8)


@pytest.mark.parametrize("iso,week,weeks", [
    (date(2019, 12, 30), 1, 53),
    (date(2020, 12, 31), 53, 53),
    (date(2021, 1, 3), 53, 53),
    (date(2021, 1, 4), 1, 52),
    (date(2026, 1, 1), 1, 53),
])
def test_iso_weeks(greg, iso, week, weeks):
    engine = WeekFieldEngine(greg)
    d = on(greg, iso)
    assert engine.week_of_year(d) == week
    assert engine.weeks_in_year(d) == weeks


def test_matches_isocalendar(greg):
    random.seed(42)
    engine = WeekFieldEngine(greg, ISO_WEEK)
    for _ in range(2000):
        iso = date(1900, 1, 1) + timedelta(days=random.randint(0, 365 * 200))
        d = on(greg, iso)
        iso_year, iso_week, iso_day = iso.isocalendar()
        assert engine.week_of_year(d) == iso_week
        assert engine.local_day_of_week(to_epoch_day(iso)) == iso_day
        assert engine.weeks_in_year(d) == date(iso_year, 12, 28).isocalendar()[1]


@pytest.mark.parametrize("iso,day,week,weeks", [
    (date(2023, 1, 1), 1, 1, 52),
    (date(2022, 12, 31), 7, 53, 53),
    (date(2021, 12, 31), 6, 1, 53),    # belongs to the first week of 2022
])
def test_us_weeks(greg, iso, day, week, weeks):
    engine = WeekFieldEngine(greg, US)
    d = on(greg, iso)
    assert engine.local_day_of_week(to_epoch_day(iso)) == day
    assert engine.week_of_year(d) == week
    assert engine.weeks_in_year(d) == weeks


def test_week_of_month(greg):
    engine = WeekFieldEngine(greg)
    # 2024-09-01 is a Sunday: too few days for a first week of September
    assert engine.week_of_month(on(greg, date(2024, 9, 1))) == 5
    assert engine.weeks_in_month(on(greg, date(2024, 9, 1))) == 5
    assert engine.week_of_month(on(greg, date(2024, 9, 2))) == 1
    assert engine.week_of_month(on(greg, date(2024, 9, 30))) == 1   # October's first week


def test_calendar_start_widens_first_week():
    coptic = polycal.calendar("coptic")
    engine = WeekFieldEngine(coptic)
    first = coptic.from_epoch_day(coptic.min_epoch_day)
    assert engine.week_of_year(first) == 1
    assert engine.week_of_month(first) == 1


def test_irregular_years():
    reform = polycal.calendar("first-gregorian-reform")
    engine = WeekFieldEngine(reform)
    # 1582-10-04 (Thursday) was followed by 1582-10-15 (Friday)
    before = reform.create(1582, 10, 4)
    after = reform.create(1582, 10, 15)
    assert engine.local_day_of_week(reform.to_epoch_day(after)) == 5
    assert engine.week_of_year(after) == engine.week_of_year(before)

    chinese = polycal.calendar("chinese")
    engine = WeekFieldEngine(chinese)
    # Chinese new year 2020 fell on a Saturday; week 1 starts on the Monday after
    assert engine.week_of_year(on(chinese, date(2020, 1, 27))) == 1
    assert engine.week_of_year(on(chinese, date(2020, 1, 26))) >= 50


def test_week_rules(greg):
    rules = week_rules(greg)
    assert rules is week_rules(greg)
    assert week_rules(greg, US) is not rules
    d = on(greg, date(2021, 1, 3))
    assert rules.week_of_year.get(d) == 53
    assert rules.week_of_year.with_value(d, 1) == on(greg, date(2020, 1, 5))
    with pytest.raises(InvalidDate):
        rules.week_of_year.with_value(d, 54)

    wed = on(greg, date(2024, 9, 4))
    assert rules.day_of_week.get(wed) == 3
    assert rules.day_of_week.with_value(wed, 1) == on(greg, date(2024, 9, 2))
    assert rules.day_of_week.with_value(wed, 9, lenient=True) == on(greg, date(2024, 9, 10))
    assert rules.week_of_month.with_value(wed, 3) == on(greg, date(2024, 9, 18))


def test_week_info():
    info = polycal.week_info(date(2021, 1, 3))
    assert info["week_of_year"] == 53
    assert info["day_of_week"] == 7
    assert info["calendar"] == "proleptic-gregorian"

    us = polycal.week_info(date(2021, 1, 3), region="US")
    assert (us["day_of_week"], us["week_of_year"]) == (1, 2)


@pytest.mark.parametrize("variant", [
    "coptic", "islamic-civil", "chinese", "japanese", "first-gregorian-reform", "historic:GB",
])
def test_week_invariants_across_calendars(variant):
    cal = polycal.calendar(variant)
    engine = WeekFieldEngine(cal)
    lo = max(cal.min_epoch_day, to_epoch_day(date(1870, 1, 1))) + 400
    hi = min(cal.max_epoch_day, to_epoch_day(date(2090, 12, 31))) - 400
    rng = random.Random(7)
    for _ in range(60):
        e = rng.randint(lo, hi)
        for k in range(10):
            d, nxt = cal.from_epoch_day(e + k), cal.from_epoch_day(e + k + 1)
            week = engine.week_of_year(d)
            assert 1 <= week <= engine.weeks_in_year(d)
            assert 1 <= engine.week_of_month(d) <= engine.weeks_in_month(d)
            dow = engine.local_day_of_week(e + k + 1)
            assert dow == engine.local_day_of_week(e + k) % 7 + 1
            if dow == 1:
                assert engine.week_of_year(nxt) in (week + 1, 1)
            else:
                assert engine.week_of_year(nxt) == week
