"""Tests for the ``mass-send`` console interface.

All runs use ``--offline`` so no node is contacted; fees come from the local
schedule (0.001 WAVES base plus 0.0005 per transfer, rounded up to 0.001).
"""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from mass_send.cli import app, cmd_format

runner = CliRunner()


def _invoke(*args: str):
    # Keep INFO records off the captured output.
    return runner.invoke(app, ["--log-level", "WARNING", *args])


@pytest.fixture
def csv_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    def write(text: str, name: str = "batch.csv"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return write


def test_check_reports_aggregated_batch(csv_file):
    path = csv_file("A,1\nA,2\nB,3\n")
    result = _invoke("check", "--csv-path", str(path), "--balance", "100", "--offline")
    assert result.exit_code == 0, result.output
    lines = result.stdout.splitlines()
    assert lines[:2] == ['A, "3"', 'B, "3"']
    assert "transfers\t2/100" in lines
    assert "total\t6 WAVES" in lines
    assert "fee\t0,002 WAVES" in lines
    assert lines[-1] == "valid\tyes"


def test_check_insufficient_balance_exits_nonzero(csv_file):
    path = csv_file("A,1\nB,abc\n")
    result = _invoke("check", "--csv-path", str(path), "--offline")
    assert result.exit_code == 1
    assert "error\tB\tamount" in result.stdout
    assert "valid\tno" in result.stdout


def test_check_emit_draft_prints_node_json(csv_file):
    path = csv_file('A, "1,5"\n')
    result = _invoke("check", "--csv-path", str(path), "--balance", "10", "--offline", "--emit-draft")
    assert result.exit_code == 0, result.output
    draft = json.loads(result.stdout.splitlines()[-1])
    assert draft == {
        "type": 11,
        "transfers": [{"recipient": "A", "amount": 150_000_000}],
        "fee": 200_000,
        "attachment": "",
    }


def test_check_respects_max_transfers_from_env(csv_file, monkeypatch):
    monkeypatch.setenv("MASS_SEND_MAX_TRANSFERS", "1")
    path = csv_file("A,1\nB,1\n")
    result = _invoke("check", "--csv-path", str(path), "--balance", "100", "--offline")
    assert result.exit_code == 1
    assert "transfers\t2/1" in result.stdout


def test_check_custom_asset_precision(csv_file):
    path = csv_file("A,0.5\nA,0.25\n")
    result = _invoke(
        "check",
        "--csv-path",
        str(path),
        "--asset-id",
        "TOKEN",
        "--precision",
        "2",
        "--asset-name",
        "TKN",
        "--balance",
        "1",
        "--offline",
    )
    assert result.exit_code == 0, result.output
    assert "total\t0,75 TKN" in result.stdout


def test_check_missing_file_exits_nonzero(csv_file):
    result = _invoke("check", "--csv-path", "missing.csv", "--offline")
    assert result.exit_code == 1


def test_check_rejects_bad_balance(csv_file):
    path = csv_file("A,1\n")
    result = _invoke("check", "--csv-path", str(path), "--balance", "lots", "--offline")
    assert result.exit_code == 1


def test_format_prints_canonical_csv(csv_file):
    path = csv_file('x, "1 000,5"\ny,2\nx,0.5\n')
    result = _invoke("format", "--csv-path", str(path))
    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == ['x, "1 001"', 'y, "2"']


def test_cmd_format_missing_file_returns_one(tmp_path, capsys):
    assert cmd_format(str(tmp_path / "nope.csv")) == 1
    assert "File not found" in capsys.readouterr().err
