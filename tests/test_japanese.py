# tests/test_japanese.py

import random
from datetime import date

import pytest

from polycal.core.errors import EraMismatch, InvalidDate, OutOfRange
from polycal.core.time import to_epoch_day
from polycal.core.types import EastAsianMonth, Leniency
from polycal.engines.japanese import JapaneseCalendar, JapaneseDate, Nengo
from polycal.engines.resources import (
    GREGORIAN_SWITCH,
    JAPANESE_FIRST_NEW_YEAR,
    JAPANESE_LUNISOLAR,
    render_japanese_lunisolar,
)
from polycal.engines.tables import parse_month_table


@pytest.fixture(scope="module")
def cal():
    table = parse_month_table(render_japanese_lunisolar().splitlines(), JAPANESE_LUNISOLAR)
    return JapaneseCalendar(table)


def test_lunisolar_layout(cal):
    assert cal.min_epoch_day == JAPANESE_FIRST_NEW_YEAR
    assert cal.min_year == 1868
    assert cal.months(1868)[4] == EastAsianMonth(4, True)
    assert len(cal.months(1870)) == 13
    assert len(cal.months(1872)) == 12


def test_final_lunisolar_month_has_two_days(cal):
    assert cal.length_of_month(1872, 12) == 2
    d = cal.from_epoch_day(to_epoch_day(date(1872, 12, 31)))
    assert d == JapaneseDate(Nengo.MEIJI, 5, EastAsianMonth(12), 2)
    assert cal.from_epoch_day(GREGORIAN_SWITCH) == JapaneseDate(Nengo.MEIJI, 6, EastAsianMonth(1), 1)
    with pytest.raises(InvalidDate):
        cal.create(1872, 12, 3)


@pytest.mark.parametrize("iso,expected", [
    (date(1912, 7, 29), (Nengo.MEIJI, 45, 7, 29)),
    (date(1912, 7, 30), (Nengo.TAISHO, 1, 7, 30)),
    (date(1989, 1, 7), (Nengo.SHOWA, 64, 1, 7)),
    (date(1989, 1, 8), (Nengo.HEISEI, 1, 1, 8)),
    (date(2019, 4, 30), (Nengo.HEISEI, 31, 4, 30)),
    (date(2019, 5, 1), (Nengo.REIWA, 1, 5, 1)),
])
def test_gregorian_period(cal, iso, expected):
    era, yoe, month, day = expected
    d = cal.from_epoch_day(to_epoch_day(iso))
    assert d == JapaneseDate(era, yoe, EastAsianMonth(month), day)
    assert cal.to_epoch_day(d) == to_epoch_day(iso)
    assert cal.year_of(d) == iso.year


def test_no_leap_months_after_1872(cal):
    assert cal.length_of_month(2024, 2) == 29
    assert cal.length_of_year(2023) == 365
    with pytest.raises(InvalidDate):
        cal.create(1873, EastAsianMonth(2, True), 1)
    assert not cal.is_valid(1900, EastAsianMonth(2, True), 1)


def test_of_era_leniency(cal):
    # Keio 4, 10th month: Meiji had begun on 1868-10-23
    with pytest.raises(EraMismatch):
        cal.of_era(Nengo.KEIO, 4, 10, 1, Leniency.STRICT)
    smart = cal.of_era(Nengo.KEIO, 4, 10, 1, Leniency.SMART)
    assert (smart.era, smart.year_of_era) == (Nengo.MEIJI, 1)
    lax = cal.of_era(Nengo.KEIO, 4, 10, 1, Leniency.LAX)
    assert (lax.era, lax.year_of_era) == (Nengo.KEIO, 4)
    assert cal.to_epoch_day(smart) == cal.to_epoch_day(lax)

    assert cal.of_era(Nengo.KEIO, 4, 9, 1, Leniency.STRICT).era is Nengo.KEIO
    with pytest.raises(OutOfRange):
        cal.of_era(Nengo.REIWA, 0, 1, 1)


def test_era_lengths(cal):
    assert cal.max_year_of_era(Nengo.SHOWA) == 64
    assert cal.max_year_of_era(Nengo.HEISEI) == 31
    assert cal.linear_year(Nengo.REIWA, 6) == 2024
    assert cal.from_epoch_day(to_epoch_day(date(2024, 1, 1))).koki_year == 2684


def test_range(cal):
    with pytest.raises(OutOfRange):
        cal.from_epoch_day(cal.min_epoch_day - 1)
    with pytest.raises(OutOfRange):
        cal.create(1867, 1, 1)


def test_table_must_end_at_switch():
    text = render_japanese_lunisolar().replace("max=1872", "max=1871")
    table = parse_month_table(text.splitlines(), JAPANESE_LUNISOLAR)
    with pytest.raises(OutOfRange):
        JapaneseCalendar(table)


def test_roundtrip(cal):
    random.seed(42)
    hi = to_epoch_day(date(2100, 12, 31))
    for _ in range(3000):
        e = random.randint(cal.min_epoch_day, hi)
        d = cal.from_epoch_day(e)
        assert cal.to_epoch_day(d) == e
        assert cal.create(cal.year_of(d), d.month, d.day) == d


def test_keio_before_table_is_out_of_range(cal):
    with pytest.raises(OutOfRange):
        cal.of_era(Nengo.KEIO, 3, 12, 1)
    d = cal.of_era(Nengo.KEIO, 4, 1, 1)
    assert cal.to_epoch_day(d) == cal.min_epoch_day
