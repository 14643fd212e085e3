# tests/test_cli.py

import json

import pytest

import polycal.logging_setup
from polycal.cli import main
from polycal.logging_setup import parse_level


@pytest.fixture(autouse=True)
def _no_root_logging(monkeypatch):
    # keep pytest's own log capture in place
    monkeypatch.setattr(polycal.logging_setup, "_configured", True)


def test_convert(capsys):
    assert main(["convert", "2023-07-19", "--to", "islamic-civil", "--to", "coptic"]) == 0
    out = capsys.readouterr().out
    assert "(ISO 2023-07-19)" in out
    assert "AH-1445-01-01[islamic-civil]" in out
    assert "A.M.-1739-11-12" in out


def test_convert_from_lunisolar(capsys):
    assert main(["convert", "4656-4L-1", "--from", "chinese", "--to", "proleptic-gregorian", "--encode"]) == 0
    out = capsys.readouterr().out
    assert "(ISO 2020-05-23)" in out
    assert "16|proleptic-gregorian|AD|2020|5|0|23" in out


def test_convert_out_of_range(capsys):
    assert main(["convert", "1600-01-01", "--to", "japanese"]) == 0
    assert "(out of range)" in capsys.readouterr().out


def test_calendars(capsys):
    assert main(["calendars"]) == 0
    names = capsys.readouterr().out.split()
    assert "islamic-umalqura" in names
    assert "historic:GB" in names

    assert main(["calendars", "--info"]) == 0
    rows = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    assert {r["variant"] for r in rows} >= {"coptic", "chinese"}


def test_month(capsys):
    assert main(["month", "chinese", "4656", "4L"]) == 0
    out = capsys.readouterr().out
    assert "2020-05-23 .. 2020-06-20" in out
    assert "(29 days)" in out


def test_week(capsys):
    assert main(["week", "2021-01-03"]) == 0
    info = json.loads(capsys.readouterr().out)
    assert info["week_of_year"] == 53

    assert main(["week", "2021-01-03", "--first-day", "7", "--min-days", "1"]) == 0
    info = json.loads(capsys.readouterr().out)
    assert (info["day_of_week"], info["week_of_year"]) == (1, 2)


def test_error_exit_code(capsys):
    assert main(["month", "coptic", "1740", "14"]) == 2
    assert capsys.readouterr().err.startswith("error:")

    assert main(["convert", "2023-07-19", "--to", "islamic-lunar"]) == 2
    assert "islamic-lunar" in capsys.readouterr().err


def test_diag_round_trip(capsys):
    assert main(["diag", "round-trip", "--calendars", "coptic,islamic-tbla", "--N", "200"]) == 0
    out = capsys.readouterr().out
    assert "coptic" in out and "ok" in out


def test_diag_pretty_month(capsys):
    assert main(["diag", "pretty-month", "--calendar", "coptic", "--year", "1740", "--month", "13"]) == 0
    out = capsys.readouterr().out
    assert "09-06" in out and "09-10" in out


def test_parse_level():
    assert parse_level("debug") == 10
    assert parse_level("Warning") == 30
    with pytest.raises(ValueError):
        parse_level("chatty")


def test_bad_log_level():
    with pytest.raises(SystemExit):
        main(["--log-level", "chatty", "calendars"])
