# tests/test_hijri.py

import random
from datetime import date

import pytest

from polycal.core.errors import InvalidDate, OutOfRange, UnsupportedVariant
from polycal.core.time import julian_epoch_day, to_epoch_day
from polycal.engines.hijri import (
    HIJRI_ALGORITHMS,
    MAX_YEAR,
    START_622_07_15,
    START_622_07_16,
    HijriAlgorithm,
    HijriDate,
    join_variant,
    split_variant,
)


def test_epochs():
    assert START_622_07_15 == julian_epoch_day(622, 7, 15)
    assert START_622_07_16 == julian_epoch_day(622, 7, 16)

    assert HijriAlgorithm("islamic-eastc").from_epoch_day(START_622_07_16) == HijriDate("islamic-eastc", 1, 1, 1)
    assert HijriAlgorithm("islamic-tbla").from_epoch_day(START_622_07_15) == HijriDate("islamic-tbla", 1, 1, 1)


@pytest.mark.parametrize("variant,iso", [
    ("islamic-civil", date(2023, 7, 19)),
    ("islamic-tbla", date(2023, 7, 18)),
])
def test_known_new_year(variant, iso):
    cal = HijriAlgorithm(variant)
    assert cal.to_epoch_day(cal.create(1445, 1, 1)) == to_epoch_day(iso)
    assert cal.from_epoch_day(to_epoch_day(iso)) == HijriDate(variant, 1445, 1, 1)


def test_leap_patterns_differ():
    # year 15 of the cycle is leap only in the eastern pattern, 16 only in the western
    assert HijriAlgorithm("islamic-eastc").is_leap_year(15)
    assert not HijriAlgorithm("islamic-civil").is_leap_year(15)
    assert HijriAlgorithm("islamic-civil").is_leap_year(16)
    assert HijriAlgorithm("islamic-habashalhasibc").is_leap_year(30)
    assert not HijriAlgorithm("islamic-fatimidc").is_leap_year(30)


def test_month_lengths():
    cal = HijriAlgorithm("islamic-civil")
    assert [cal.length_of_month(1444, m) for m in range(1, 13)] == [30, 29] * 6
    assert cal.length_of_month(1445, 12) == 30
    assert cal.length_of_year(1445) == 355
    assert cal.length_of_year(1444) == 354
    with pytest.raises(InvalidDate):
        cal.length_of_month(1445, 13)


def test_last_year_is_cut():
    cal = HijriAlgorithm("islamic-civil")
    # lengths follow the leap pattern; only the range stops at 1600-12-29
    assert cal.is_leap_year(MAX_YEAR)
    assert cal.length_of_year(MAX_YEAR) == 355
    assert not cal.is_valid(MAX_YEAR, 12, 30)
    assert cal.is_valid(MAX_YEAR - 1, 12, 30) == cal.is_leap_year(MAX_YEAR - 1)
    assert cal.from_epoch_day(cal.max_epoch_day) == HijriDate("islamic-civil", MAX_YEAR, 12, 29)
    with pytest.raises(InvalidDate):
        cal.create(MAX_YEAR, 12, 30)
    with pytest.raises(OutOfRange):
        cal.from_epoch_day(cal.max_epoch_day + 1)
    with pytest.raises(OutOfRange):
        cal.create(MAX_YEAR + 1, 1, 1)


@pytest.mark.parametrize("base", sorted(HIJRI_ALGORITHMS))
def test_leap_consistency(base):
    cal = HijriAlgorithm(base)
    leaps = 0
    for y in range(1, MAX_YEAR + 1):
        leap = cal.is_leap_year(y)
        assert leap == (cal.length_of_year(y) == 355)
        assert leap == (cal.length_of_month(y, 12) == 30)
        assert cal.length_of_year(y) == sum(cal.length_of_month(y, m) for m in range(1, 13))
        leaps += leap
    # 11 leap years in every 30-year cycle
    assert leaps == 11 * (MAX_YEAR // 30) + sum(cal.is_leap_year(y) for y in range(1, MAX_YEAR % 30 + 1))


def test_adjustment_shifts_mapping():
    plain = HijriAlgorithm("islamic-civil")
    for adj in (-3, -1, 1, 3):
        cal = HijriAlgorithm("islamic-civil", adj)
        assert cal.variant == f"islamic-civil:{adj:+d}"
        d = cal.create(1445, 1, 1)
        assert cal.to_epoch_day(d) == plain.to_epoch_day(plain.create(1445, 1, 1)) - adj
        assert cal.min_epoch_day == plain.min_epoch_day - adj
        assert cal.max_epoch_day == plain.max_epoch_day - adj


def test_adjustment_bounds():
    with pytest.raises(OutOfRange):
        HijriAlgorithm("islamic-civil", 4)
    with pytest.raises(OutOfRange):
        HijriAlgorithm("islamic-civil", -4)
    with pytest.raises(UnsupportedVariant):
        HijriAlgorithm("islamic-lunar")


def test_variant_strings():
    assert split_variant("islamic-civil") == ("islamic-civil", 0)
    assert split_variant("islamic-civil:-2") == ("islamic-civil", -2)
    assert join_variant("islamic-civil", 0) == "islamic-civil"
    assert join_variant("islamic-civil", 2) == "islamic-civil:+2"
    with pytest.raises(UnsupportedVariant):
        split_variant("islamic-civil:x")


def test_date_of_other_variant_is_rejected():
    civil = HijriAlgorithm("islamic-civil")
    tbla = HijriAlgorithm("islamic-tbla")
    with pytest.raises(InvalidDate):
        civil.to_epoch_day(tbla.create(1445, 1, 1))


@pytest.mark.parametrize("base", sorted(HIJRI_ALGORITHMS))
def test_roundtrip_all_variants(base):
    random.seed(42)
    cal = HijriAlgorithm(base, random.randint(-3, 3))
    for _ in range(2000):
        e = random.randint(cal.min_epoch_day, cal.max_epoch_day)
        d = cal.from_epoch_day(e)
        assert cal.to_epoch_day(d) == e
        assert 1 <= d.day <= cal.length_of_month(d.year, d.month)
