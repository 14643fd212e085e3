# tests/test_registry.py

import threading
from datetime import date

import pytest

import polycal
from polycal.core.errors import OutOfRange, UnsupportedVariant
from polycal.core.registry import VariantRegistry
from polycal.engines.factory import make_calendar
from polycal.engines.hijri import HijriAlgorithm
from polycal.engines.specs import ALL_SPECS, HIJRI_SPECS, HijriAlgorithmParams, HistoricParams, spec_for_variant


def test_get_without_factory():
    reg = VariantRegistry()
    with pytest.raises(UnsupportedVariant):
        reg.get("coptic")


def test_register_and_overwrite():
    reg = VariantRegistry()
    a, b = object(), object()
    reg.register("x", a)
    with pytest.raises(KeyError):
        reg.register("x", b)
    reg.register("x", b, overwrite=True)
    assert reg.get("x") is b
    assert "x" in reg
    assert reg.list() == ["x"]


def test_get_or_create_is_idempotent_across_threads():
    reg = VariantRegistry()
    barrier = threading.Barrier(8)
    built = []

    def build(name):
        system = HijriAlgorithm("islamic-civil")
        built.append(system)
        return system

    results = []

    def worker():
        barrier.wait()
        results.append(reg.get_or_create("islamic-civil", build))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 8
    assert all(r is results[0] for r in results)
    assert results[0] in built
    assert reg.get("islamic-civil") is results[0]


def test_public_registry_shares_instances():
    assert polycal.calendar("chinese") is polycal.calendar("chinese")
    assert polycal.calendar("islamic-civil:2") is polycal.calendar("islamic-civil:+2")
    assert polycal.calendar("islamic-civil:+2").variant == "islamic-civil:+2"
    with pytest.raises(UnsupportedVariant):
        polycal.calendar("islamic-lunar")
    with pytest.raises(OutOfRange):
        polycal.calendar("islamic-civil:+5")


def test_list_calendars():
    names = polycal.list_calendars()
    for name in ("coptic", "indian", "islamic-umalqura", "chinese", "japanese",
                 "proleptic-gregorian", "sweden", "historic:GB"):
        assert name in names
    assert set(HIJRI_SPECS) <= set(names)


def test_spec_catalogue():
    assert spec_for_variant("coptic") is ALL_SPECS["coptic"]
    s = spec_for_variant("islamic-tbla:-1")
    assert s.name == "islamic-tbla:-1"
    assert s.params == HijriAlgorithmParams("islamic-tbla", -1)
    assert s.tweak(adjustment=0).name == "islamic-tbla"
    assert spec_for_variant("gregorian-reform:1700-03-01").params == HistoricParams("gregorian-reform:1700-03-01")
    with pytest.raises(UnsupportedVariant):
        spec_for_variant("historic:XX")
    with pytest.raises(UnsupportedVariant):
        HistoricParams(region="XX")
    with pytest.raises(UnsupportedVariant):
        HijriAlgorithmParams("islamic-lunar")


def test_factory():
    cal = make_calendar(spec_for_variant("islamic-fatimida:+3"))
    assert isinstance(cal, HijriAlgorithm)
    assert cal.variant == "islamic-fatimida:+3"
    assert make_calendar(ALL_SPECS["historic:SE"]).variant == "historic:SE"
    with pytest.raises(TypeError):
        make_calendar(ALL_SPECS["coptic"].__class__("odd", "arithmetic", object()))


def test_register_custom_calendar():
    reform = make_calendar(spec_for_variant("gregorian-reform:1700-03-01"))
    polycal.register_calendar("denmark", reform, overwrite=True)
    assert polycal.calendar("denmark") is reform
    assert "denmark" in polycal.list_calendars()
    assert polycal.to_gregorian(reform.create(1700, 2, 18), variant="denmark") == date(1700, 2, 28)


def test_reform_variant_is_canonical():
    first = polycal.calendar("first-gregorian-reform")
    assert polycal.calendar("gregorian-reform:1582-10-15") is first
    assert spec_for_variant("gregorian-reform:1582-10-15") is ALL_SPECS["first-gregorian-reform"]
    assert spec_for_variant("gregorian-reform:1752-09-14").name == "gregorian-reform:1752-09-14"
    with pytest.raises(UnsupportedVariant):
        polycal.calendar("gregorian-reform:someday")
