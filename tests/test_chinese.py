# tests/test_chinese.py

import random
from datetime import date

import pytest

from polycal.core.errors import EraMismatch, InvalidDate, OutOfRange, ResourceFormatError
from polycal.core.time import to_epoch_day
from polycal.core.types import EastAsianMonth, Leniency
from polycal.engines.chinese import (
    ELAPSED_OFFSET,
    FIRST_NEW_YEAR,
    MAX_ELAPSED,
    MIN_ELAPSED,
    ChineseCalendar,
    ChineseEra,
    cycle_of,
    elapsed_of,
    sexagesimal_name,
)
from polycal.engines.lunisolar import build_lunisolar_table, nearest_lunation, new_moon_day


@pytest.fixture(scope="module")
def cal():
    return ChineseCalendar()


@pytest.mark.parametrize("gy,iso", [
    (1985, date(1985, 2, 20)),
    (2000, date(2000, 2, 5)),
    (2020, date(2020, 1, 25)),
    (2023, date(2023, 1, 22)),
    (2024, date(2024, 2, 10)),
])
def test_new_year(cal, gy, iso):
    assert cal.new_year(gy) == to_epoch_day(iso)
    d = cal.from_epoch_day(to_epoch_day(iso))
    assert d.month == EastAsianMonth(1)
    assert d.day == 1
    assert d.related_gregorian_year == gy


def test_leap_months(cal):
    # 2020: leap 4th month, 2023: leap 2nd month
    d = cal.from_epoch_day(to_epoch_day(date(2020, 5, 23)))
    assert (d.month, d.day) == (EastAsianMonth(4, True), 1)
    d = cal.from_epoch_day(to_epoch_day(date(2023, 3, 22)))
    assert (d.month, d.day) == (EastAsianMonth(2, True), 1)

    y2023 = 2023 + ELAPSED_OFFSET
    assert cal.is_leap_year(y2023)
    assert len(cal.months(y2023)) == 13
    assert cal.months(y2023)[2] == EastAsianMonth(2, True)
    assert not cal.is_leap_year(2022 + ELAPSED_OFFSET)

    with pytest.raises(InvalidDate):
        cal.create(2022 + ELAPSED_OFFSET, EastAsianMonth(2, True), 1)


def test_cycle_arithmetic():
    assert cycle_of(2020 + ELAPSED_OFFSET) == (78, 37)
    assert elapsed_of(78, 37) == 2020 + ELAPSED_OFFSET
    assert sexagesimal_name(37) == "geng-zi"
    assert sexagesimal_name(1) == "jia-zi"
    assert sexagesimal_name(60) == "gui-hai"


def test_get_leap_month(cal):
    assert cal.get_leap_month(78, 37) == 4
    assert cal.get_leap_month(78, 40) == 2
    assert cal.get_leap_month(78, 39) is None


def test_range(cal):
    assert cal.min_epoch_day == FIRST_NEW_YEAR
    first = cal.from_epoch_day(cal.min_epoch_day)
    assert (first.elapsed_year, first.month, first.day) == (MIN_ELAPSED, EastAsianMonth(1), 1)
    last = cal.from_epoch_day(cal.max_epoch_day)
    assert last.elapsed_year == MAX_ELAPSED
    assert cal.new_year(3000 - 1) <= cal.max_epoch_day
    with pytest.raises(OutOfRange):
        cal.from_epoch_day(cal.max_epoch_day + 1)
    with pytest.raises(OutOfRange):
        cal.create(MAX_ELAPSED + 1, 1, 1)


def test_month_lengths(cal):
    random.seed(42)
    for _ in range(200):
        y = random.randint(MIN_ELAPSED, MAX_ELAPSED)
        lengths = [cal.length_of_month(y, m) for m in cal.months(y)]
        assert all(n in (29, 30) for n in lengths)
        assert sum(lengths) == cal.length_of_year(y)


def test_roundtrip(cal):
    random.seed(42)
    for _ in range(3000):
        e = random.randint(cal.min_epoch_day, cal.max_epoch_day)
        d = cal.from_epoch_day(e)
        assert cal.to_epoch_day(d) == e
        assert cal.to_epoch_day(cal.of(d.cycle, d.year_of_cycle, d.month, d.day)) == e


def test_eras(cal):
    d = cal.from_epoch_day(to_epoch_day(date(1900, 6, 1)))
    assert cal.era_of(d) is ChineseEra.QING_GUANGXU_1875
    assert cal.year_of_era(d) == 26
    assert cal.year_of_era(d, ChineseEra.YELLOW_EMPEROR) == 1900 + 2697 + 1

    after = cal.from_epoch_day(to_epoch_day(date(1912, 2, 12)))
    assert cal.era_of(after) is ChineseEra.YELLOW_EMPEROR
    with pytest.raises(OutOfRange):
        cal.year_of_era(after, ChineseEra.QING_XUANTONG_1909)

    # the abdication fell before the new year of 1912
    assert cal.max_year_of_era(ChineseEra.QING_XUANTONG_1909) == 3


def test_of_era_leniency(cal):
    d = cal.of_era(ChineseEra.QING_GUANGXU_1875, 26, 1, 1, Leniency.STRICT)
    assert d.related_gregorian_year == 1900

    # Guangxu 40 would be 1914, after the abdication
    with pytest.raises(EraMismatch):
        cal.of_era(ChineseEra.QING_GUANGXU_1875, 40, 1, 1, Leniency.STRICT)
    smart = cal.of_era(ChineseEra.QING_GUANGXU_1875, 40, 1, 1, Leniency.SMART)
    lax = cal.of_era(ChineseEra.QING_GUANGXU_1875, 40, 1, 1, Leniency.LAX)
    assert smart == lax
    assert smart.related_gregorian_year == 1914

    yellow = cal.of_era(ChineseEra.YELLOW_EMPEROR, 2020 + 2697 + 1, 1, 1, Leniency.STRICT)
    assert cal.to_epoch_day(yellow) == cal.new_year(2020)


def test_implausible_month_length_fails_at_build():
    def offset(jd):
        return 8.0

    k = nearest_lunation(to_epoch_day(date(2020, 1, 25)), offset)
    assert new_moon_day(k, offset) == to_epoch_day(date(2020, 1, 25))
    second = new_moon_day(k + 1, offset)
    table = build_lunisolar_table("chinese-test", 2020, 2020, k, lambda y: None, offset)
    assert table.lengths.sum() == table.starts[-1] - table.starts[0]
    # pushing one new moon by five days leaves a 34- and a 24-day month
    with pytest.raises(ResourceFormatError):
        build_lunisolar_table("chinese-test", 2020, 2020, k, lambda y: None, offset,
                              overrides={second: second + 5})
