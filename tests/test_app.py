"""
Tests for the command line interface.
"""

import json
import sys

import pytest
from medicate import app, service
from medicate.logger import StructuredLogger


def run_cli(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["medicate", *argv])
    monkeypatch.setattr(app, "load_env", lambda: None)
    app.main()


class TestRank:
    def test_rank_file(self, tmp_path, monkeypatch, capsys):
        data = [
            {"title": "Paracetamol 500mg viên nén | Nhà thuốc Long Châu",
             "link": "https://nhathuoclongchau.com/abc",
             "snippet": "Thuốc giảm đau paracetamol 500mg"},
            {"title": "| Tiki", "link": "https://tiki.vn/x", "snippet": ""},
        ]
        input_path = tmp_path / "items.json"
        input_path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")

        run_cli(monkeypatch, "rank", "--input", str(input_path))

        out = capsys.readouterr().out
        assert "[skip] '| Tiki'" in out
        assert "domain=40 dosage=30 form=20 combo=8 snippet=5 length=8" in out
        assert "Best: Paracetamol 500mg viên nén (confidence 0.96)" in out

    def test_rank_accepts_search_response(self, tmp_path, monkeypatch, capsys):
        data = {"items": [{"title": "Efferalgan 500mg viên sủi - Pharmacity", "link": "https://pharmacity.vn/e"}]}
        input_path = tmp_path / "response.json"
        input_path.write_text(json.dumps(data), encoding="utf-8")

        run_cli(monkeypatch, "rank", "--input", str(input_path))
        assert "Best: Efferalgan 500mg viên sủi" in capsys.readouterr().out

    def test_rank_nothing_usable(self, tmp_path, monkeypatch):
        input_path = tmp_path / "items.json"
        input_path.write_text(json.dumps([{"title": ""}]), encoding="utf-8")

        with pytest.raises(SystemExit):
            run_cli(monkeypatch, "rank", "--input", str(input_path))

    def test_missing_input(self, tmp_path, monkeypatch):
        with pytest.raises(SystemExit, match="Input file not found"):
            run_cli(monkeypatch, "rank", "--input", str(tmp_path / "missing.json"))


class TestResolve:
    def test_resolve_invalid_code(self, monkeypatch, capsys):
        with pytest.raises(SystemExit):
            run_cli(monkeypatch, "resolve", "--code", "123")
        assert "Error: Invalid barcode format" in capsys.readouterr().out

    def test_resolve_json(self, monkeypatch, capsys, search_items):
        monkeypatch.setattr(service, "logger", StructuredLogger(name="test-cli", enable_console=False))

        def fake_resolve(code, settings=None):
            from medicate.service import resolve_barcode
            return resolve_barcode(code, search=lambda q: search_items, settings=settings)

        monkeypatch.setattr(app, "resolve_barcode", fake_resolve)
        run_cli(monkeypatch, "resolve", "--code", "8936036021012", "--json")

        body = json.loads(capsys.readouterr().out)
        assert body["best"]["name"] == "Panadol Extra viên nén"


def test_version(monkeypatch, capsys):
    run_cli(monkeypatch, "--version")
    assert capsys.readouterr().out.strip() == app.__version__
