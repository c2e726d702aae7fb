import json

import pytest

from stormrank import cli
from stormrank.engine import StormAnalysis

CSV_TEXT = (
    "BGN_DATE,EVTYPE,FATALITIES,INJURIES,PROPDMG,PROPDMGEXP,CROPDMG,CROPDMGEXP\n"
    "6/1/1999 0:00:00,TSTM WIND,1,0,10,K,0,\n"
    "5/3/1999 0:00:00,TORNADO,5,20,2.5,M,0,\n"
    "1/1/2001 0:00:00,FLASH FLOOD,0,0,1,x,5,k\n"
)


@pytest.fixture
def engine(sample_records):
    e = StormAnalysis(records=sample_records)
    e.run()
    return e


def test_top_command(engine, capsys):
    cli.handle(engine, "top fatalities 2")
    out = capsys.readouterr().out
    assert "Fatalities by Event Type (top 2)" in out
    assert "Hurricane (Typhoon)" in out
    assert "Tornado" in out
    assert "Thunderstorm" not in out


def test_top_command_reports_exclusions(engine, capsys):
    cli.handle(engine, "top property_damage")
    assert "1 records excluded" in capsys.readouterr().out


def test_top_unknown_metric_raises(engine):
    with pytest.raises(KeyError):
        cli.handle(engine, "top deaths")


def test_stats_and_types(engine, capsys):
    cli.handle(engine, "stats")
    cli.handle(engine, "types t")
    out = capsys.readouterr().out
    assert "Records loaded: 8 | kept: 4" in out
    assert "Tornado" in out and "Thunderstorm" in out
    assert "Flooding" not in out.split("Invalid damage codes")[1]


def test_rules_command(engine, capsys):
    cli.handle(engine, "rules")
    out = capsys.readouterr().out.splitlines()
    assert len(out) == 34
    assert out[0].startswith(" 1. Astronomical Low Tide")


def test_export_json_command(engine, tmp_path, capsys):
    path = tmp_path / "out.json"
    cli.handle(engine, f'export json "{path}"')
    assert "Exported JSON" in capsys.readouterr().out
    assert "fatalities" in json.loads(path.read_text(encoding="utf-8"))


def test_unknown_command(engine, capsys):
    cli.handle(engine, "frobnicate")
    assert "Unknown command" in capsys.readouterr().out


def test_main_runs_pipeline_and_repl(tmp_path, monkeypatch, capsys):
    data = tmp_path / "storm.csv"
    data.write_text(CSV_TEXT, encoding="utf-8")
    commands = iter(["top fatalities 1", "top nothing", "quit"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(commands))

    cli.main(["--csv", str(data)])
    out = capsys.readouterr().out
    assert "Loaded 3 records, 3 in the working set." in out
    assert "Tornado" in out
    assert "Error:" in out


def test_main_stops_on_eof(tmp_path, monkeypatch, capsys):
    data = tmp_path / "storm.csv"
    data.write_text(CSV_TEXT, encoding="utf-8")

    def _eof(prompt=""):
        raise EOFError

    monkeypatch.setattr("builtins.input", _eof)
    cli.main(["--csv", str(data), "--year-min", "2000", "--year-max", "2005"])
    assert "1 in the working set" in capsys.readouterr().out
