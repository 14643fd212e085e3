# tests/test_fields.py

from datetime import date

import pytest

import polycal
from polycal.core.errors import EraMismatch, InvalidDate, OutOfRange
from polycal.core.types import EastAsianMonth
from polycal.engines.fields import clamp, rules_for
from polycal.engines.japanese import Nengo


def on(cal, iso):
    return polycal.from_gregorian(iso, variant=cal.variant)


@pytest.fixture(scope="module")
def coptic():
    return polycal.calendar("coptic")


@pytest.fixture(scope="module")
def reform():
    return polycal.calendar("first-gregorian-reform")


@pytest.fixture(scope="module")
def chinese():
    return polycal.calendar("chinese")


@pytest.fixture(scope="module")
def japanese():
    return polycal.calendar("japanese")


def test_rules_are_shared(coptic, japanese):
    assert rules_for(coptic) is rules_for(coptic)
    assert sorted(rules_for(coptic).as_dict()) == ["day_of_month", "day_of_year", "month", "year"]
    assert sorted(rules_for(japanese).as_dict()) == [
        "day_of_month", "day_of_year", "era", "month", "year", "year_of_era"]
    with pytest.raises(KeyError):
        rules_for(coptic).get("week_of_year")


def test_year_keeps_day_where_possible(coptic):
    r = rules_for(coptic)
    d = coptic.create(1739, 13, 6)
    assert r.year.with_value(d, 1740) == coptic.create(1740, 13, 5)
    assert r.year.with_value(coptic.create(1739, 2, 17), 1741) == coptic.create(1741, 2, 17)
    with pytest.raises(OutOfRange):
        r.year.with_value(d, 10_000)


def test_month_roll_over(coptic):
    r = rules_for(coptic).month
    d = coptic.create(1740, 1, 1)
    assert r.get_min(d) == 1
    assert r.get_max(d) == 13
    with pytest.raises(InvalidDate):
        r.with_value(d, 14)
    assert r.with_value(d, 14, lenient=True) == coptic.create(1741, 1, 1)
    assert r.with_value(d, 0, lenient=True) == coptic.create(1739, 13, 1)
    assert r.with_value(coptic.create(1740, 12, 30), 13) == coptic.create(1740, 13, 5)


def test_day_of_month_lenient():
    cal = polycal.calendar("islamic-civil")
    r = rules_for(cal).day_of_month
    d = cal.create(1445, 1, 10)
    assert r.get_max(d) == 30
    with pytest.raises(InvalidDate):
        r.with_value(d, 31)
    assert r.with_value(d, 31, lenient=True) == cal.create(1445, 2, 1)
    assert r.with_value(d, 0, lenient=True) == cal.create(1444, 12, 29)


def test_day_of_year(coptic):
    r = rules_for(coptic).day_of_year
    d = coptic.create(1739, 2, 1)
    assert r.get(d) == 31
    assert r.get_max(d) == 366
    assert r.with_value(d, 366) == coptic.create(1739, 13, 6)
    with pytest.raises(InvalidDate):
        r.with_value(d, 367)
    assert r.with_value(d, 367, lenient=True) == coptic.create(1740, 1, 1)


def test_floor_and_ceiling(coptic, chinese):
    r = rules_for(coptic)
    d = coptic.create(1739, 5, 12)
    assert r.year.at_floor(d) == coptic.create(1739, 1, 1)
    assert r.year.at_ceiling(d) == coptic.create(1739, 13, 6)
    assert r.month.at_ceiling(d) == coptic.create(1739, 5, 30)

    c = on(chinese, date(2020, 8, 1))
    assert polycal.to_gregorian(rules_for(chinese).year.at_floor(c), variant="chinese") == date(2020, 1, 25)


def test_cutover_gap(reform):
    r = rules_for(reform)
    d = reform.create(1582, 10, 4)
    assert r.day_of_month.get_min(d) == 1
    assert r.day_of_month.get_max(d) == 31
    assert not r.day_of_month.is_valid(d, 10)
    with pytest.raises(InvalidDate):
        r.day_of_month.with_value(d, 10)
    # days inside the gap count on from the first of the month
    assert r.day_of_month.with_value(d, 10, lenient=True) == reform.create(1582, 10, 20)
    # setting the year clamps into the gap's far side
    assert r.year.with_value(reform.create(1581, 10, 10), 1582) == reform.create(1582, 10, 15)
    assert r.day_of_year.get_max(d) == 355
    assert clamp(reform, 1582, 10, 7) == (10, 15)


def test_lunisolar_months(chinese):
    r = rules_for(chinese)
    y2020 = 4656
    leap = chinese.create(y2020, EastAsianMonth(4, True), 1)
    assert r.month.ordinal(leap) == 5
    assert r.month.with_ordinal(chinese.create(y2020, 1, 1), 5) == leap
    # a leap month missing in the target year falls back to the regular month
    assert r.year.with_value(leap, y2020 + 1).month == EastAsianMonth(4)
    with pytest.raises(InvalidDate):
        r.month.with_value(chinese.create(y2020 + 1, 1, 1), EastAsianMonth(4, True))
    # plain ints are month numbers; 13 rolls past a 12-month year
    d = chinese.create(y2020 + 2, 1, 1)
    assert r.month.with_value(d, 3).month == EastAsianMonth(3)
    assert r.month.with_value(d, 13, lenient=True).month == EastAsianMonth(1)
    assert chinese.year_of(r.month.with_value(d, 13, lenient=True)) == y2020 + 3


def test_non_lunisolar_rejects_leap_month(coptic):
    r = rules_for(coptic).month
    d = coptic.create(1740, 1, 1)
    assert not r.is_valid(d, EastAsianMonth(4, True))
    assert r.with_value(d, EastAsianMonth(4)) == coptic.create(1740, 4, 1)


def test_era_rule(japanese):
    r = rules_for(japanese)
    reiwa = on(japanese, date(2019, 5, 1))
    assert r.era.get(reiwa) is Nengo.REIWA
    assert r.era.with_value(reiwa, Nengo.HEISEI) == on(japanese, date(1989, 5, 1))

    showa = on(japanese, date(1975, 1, 7))
    with pytest.raises(EraMismatch):
        r.era.with_value(showa, Nengo.TAISHO)
    moved = r.era.with_value(showa, Nengo.TAISHO, lenient=True)
    assert (moved.era, moved.year_of_era) == (Nengo.SHOWA, 36)

    heisei = on(japanese, date(2000, 6, 1))
    assert polycal.to_gregorian(r.era.at_floor(heisei), variant="japanese") == date(1989, 1, 8)
    assert polycal.to_gregorian(r.era.at_ceiling(heisei), variant="japanese") == date(2019, 4, 30)


def test_year_of_era_rule(japanese):
    r = rules_for(japanese).year_of_era
    first = on(japanese, date(1989, 5, 1))
    assert r.get(first) == 1
    assert r.get_max(first) == 31
    assert polycal.to_gregorian(r.at_floor(first), variant="japanese") == date(1989, 1, 8)
    assert polycal.to_gregorian(r.at_ceiling(on(japanese, date(2019, 2, 1))), variant="japanese") \
        == date(2019, 4, 30)
    assert polycal.to_gregorian(r.at_floor(on(japanese, date(2019, 8, 1))), variant="japanese") \
        == date(2019, 5, 1)

    late = on(japanese, date(2018, 7, 1))
    with pytest.raises(OutOfRange):
        r.with_value(late, 32)
    moved = r.with_value(late, 32, lenient=True)
    assert (moved.era, moved.year_of_era) == (Nengo.REIWA, 2)
