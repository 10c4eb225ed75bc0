"""
Unit tests for the command-line entry point.
"""

import json

import pytest

from amlrisk import cli
from amlrisk.config import settings


@pytest.fixture(autouse=True)
def no_remote_config(monkeypatch):
    monkeypatch.setattr(settings, "risk_config_url", None)


@pytest.fixture
def movements_file(tmp_path):
    path = tmp_path / "movements.json"
    path.write_text(json.dumps([
        {"timestamp": "2024-03-11T10:00:00", "reason": "Deposito safecharge", "amount": 3000},
        {"timestamp": "2024-03-11T14:00:00", "reason": "Deposito safecharge", "amount": 3000},
    ]), encoding="utf-8")
    return path


class TestLoadMovements:
    """Tests for reading movement exports."""

    def test_list(self, movements_file):
        assert len(cli.load_movements(movements_file)) == 2

    def test_wrapped_object(self, tmp_path):
        path = tmp_path / "export.json"
        path.write_text(json.dumps({"transactions": [
            {"data": "11/03/2024", "causale": "Prelievo voucher", "importo": "-10,00"},
        ]}), encoding="utf-8")

        movements = cli.load_movements(path)

        assert movements[0].reason == "Prelievo voucher"

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"movements": "none"}), encoding="utf-8")

        with pytest.raises(ValueError):
            cli.load_movements(path)


class TestMain:
    """Tests for the CLI main function."""

    def test_prints_verdict(self, movements_file, capsys):
        exit_code = cli.main(["--input", str(movements_file)])

        assert exit_code == 0
        verdict = json.loads(capsys.readouterr().out)
        assert verdict["level"] == "Medium"
        assert verdict["score"] == 50

    def test_config_file(self, movements_file, tmp_path, config_data, capsys):
        config_data["volumeThresholds"]["daily"] = 10000
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps(config_data), encoding="utf-8")

        exit_code = cli.main(["-i", str(movements_file), "-c", str(config_path)])

        assert exit_code == 0
        verdict = json.loads(capsys.readouterr().out)
        assert verdict["level"] == "Low"
        assert verdict["score"] == 20

    def test_missing_input(self, tmp_path):
        assert cli.main(["--input", str(tmp_path / "missing.json")]) == 1

    def test_structuring_from_upstream_detection(self, tmp_path, capsys):
        path = tmp_path / "cash.json"
        path.write_text(json.dumps([
            {"timestamp": "2024-03-11T10:00:00",
             "reason": "Ricarica conto gioco per accredito diretto", "amount": 2500},
            {"timestamp": "2024-03-12T10:00:00",
             "reason": "Ricarica conto gioco per accredito diretto", "amount": 2500},
        ]), encoding="utf-8")

        assert cli.main(["--input", str(path), "--pretty"]) == 0

        verdict = json.loads(capsys.readouterr().out)
        assert verdict["level"] == "High"
        assert "Rilevato structuring tramite operazioni frazionate." in verdict["motivations"]
