"""
Tests for main.py — the command line entry point.

Run with: python -m pytest tests/test_main.py
"""

import json
import logging
import os
import sys
from unittest import mock

import pytest

import config
import main
from core.logging import LOGGER_NAME


@pytest.fixture(autouse=True)
def isolated(tmp_path):
    """Throwaway data dir for log files."""
    config._reset_data_dir()
    with mock.patch.dict(os.environ, {"DASHFRAME_DIR": str(tmp_path / "data")}):
        yield tmp_path
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    config._reset_data_dir()


def _run(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["main.py", *args])
    return main.main()


class TestMain:
    def test_csv_last_value(self, isolated, monkeypatch, capsys):
        path = isolated / "data.csv"
        path.write_text("time,value\n1000,1\n2000,3\n", encoding="utf-8")
        assert _run(monkeypatch, str(path)) == 0
        assert capsys.readouterr().out.strip() == "value: 3"

    def test_json_with_calcs(self, isolated, monkeypatch, capsys):
        path = isolated / "frames.json"
        path.write_text(json.dumps({
            "name": "cpu",
            "fields": [{"name": "v", "type": "number", "values": [1, 2]}],
        }), encoding="utf-8")
        assert _run(monkeypatch, str(path), "--calcs", "mean,max") == 0
        lines = capsys.readouterr().out.strip().splitlines()
        assert lines == ["mean v: 1.5", "max v: 2"]

    def test_values_with_unit_as_json(self, isolated, monkeypatch, capsys):
        path = isolated / "data.csv"
        path.write_text("latency\n500\n1500\n", encoding="utf-8")
        assert _run(monkeypatch, str(path), "--values", "--unit", "ms", "--decimals", "1", "--json") == 0
        out = json.loads(capsys.readouterr().out)
        assert [d["text"] for d in out] == ["500.0 ms", "1.5 s"]
        assert [d["row"] for d in out] == [0, 1]

    def test_missing_file(self, isolated, monkeypatch, capsys):
        assert _run(monkeypatch, str(isolated / "nope.csv")) == 1
        assert "could not load" in capsys.readouterr().out

    def test_frames_sharing_ref_id_all_shown(self, isolated, monkeypatch, capsys):
        path = isolated / "frames.json"
        path.write_text(json.dumps([
            {"refId": "A", "fields": [{"name": "w", "values": [1]}]},
            {"refId": "A", "fields": [{"name": "w", "values": [2]}]},
        ]), encoding="utf-8")
        assert _run(monkeypatch, str(path), "--json") == 0
        out = json.loads(capsys.readouterr().out)
        assert [d["text"] for d in out] == ["1", "2"]

    def test_unnamed_frame(self, isolated, monkeypatch, capsys):
        path = isolated / "frames.json"
        path.write_text(json.dumps({"fields": [{"name": "v", "values": [7]}]}), encoding="utf-8")
        assert _run(monkeypatch, str(path)) == 0
        assert capsys.readouterr().out.strip() == "v: 7"

    def test_missing_json_file(self, isolated, monkeypatch, capsys):
        assert _run(monkeypatch, str(isolated / "nope.json")) == 1
        assert "could not load" in capsys.readouterr().out

    def test_list_units(self, monkeypatch, capsys):
        assert _run(monkeypatch, "--list-units") == 0
        out = capsys.readouterr().out
        assert "Misc" in out
        assert "bytes" in out

    def test_list_reducers(self, monkeypatch, capsys):
        assert _run(monkeypatch, "--list-reducers") == 0
        assert "lastNotNull" in capsys.readouterr().out

    def test_no_path(self, monkeypatch, capsys):
        assert _run(monkeypatch) == 2
