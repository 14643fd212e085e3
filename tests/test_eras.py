# tests/test_eras.py

import pytest

from polycal.core.errors import EraMismatch, OutOfRange
from polycal.core.types import Leniency
from polycal.engines.eras import EraEntry, EraResolver


@pytest.fixture
def resolver():
    return EraResolver([
        EraEntry("A", 1900, 0),
        EraEntry("B", 1950, 100),
        EraEntry("C", 1980, 250),
    ])


def test_find(resolver):
    assert resolver.find(0).era == "A"
    assert resolver.find(99).era == "A"
    assert resolver.find(100).era == "B"
    assert resolver.find(10_000).era == "C"
    with pytest.raises(OutOfRange):
        resolver.find(-1)


def test_neighbours_and_bounds(resolver):
    assert resolver.eras == ["A", "B", "C"]
    assert resolver.find_next("A") == "B"
    assert resolver.find_next("C") is None
    assert resolver.find_previous("A") is None
    assert resolver.end_of("A") == 99
    assert resolver.end_of("C") is None
    with pytest.raises(ValueError):
        resolver.entry("Z")


def test_year_arithmetic(resolver):
    assert resolver.related_year("B", 1) == 1950
    assert resolver.year_of_era("B", 1960) == 11
    assert resolver.find_by_related_year(1979).era == "B"
    assert resolver.find_by_related_year(1980).era == "C"
    with pytest.raises(OutOfRange):
        resolver.find_by_related_year(1800)

    # B ends on day 249, which falls in related year 1951 here
    assert resolver.max_year_of_era("B", lambda d: 1950 + (d - 100) // 100, 10_000) == 2
    assert resolver.max_year_of_era("C", lambda d: 1980 + (d - 250) // 100, 450) == 3


@pytest.mark.parametrize("leniency,expected", [
    (Leniency.SMART, "B"),
    (Leniency.LAX, "A"),
])
def test_resolve_mismatch(resolver, leniency, expected):
    assert resolver.resolve("A", 150, leniency) == expected


def test_resolve_strict(resolver):
    assert resolver.resolve("B", 150, Leniency.STRICT) == "B"
    with pytest.raises(EraMismatch):
        resolver.resolve("A", 150, Leniency.STRICT)


def test_leniency_flags():
    assert Leniency.STRICT.is_strict()
    assert not Leniency.SMART.is_strict()
    assert Leniency.LAX.is_lax()
    assert not Leniency.SMART.is_lax()


def test_table_validation():
    with pytest.raises(ValueError):
        EraResolver([])
    with pytest.raises(ValueError):
        EraResolver([EraEntry("A", 1900, 10), EraEntry("B", 1950, 10)])
