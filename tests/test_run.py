"""Tests for the command line entry point."""

from io import BytesIO

import mysql.connector
import pytest
from openpyxl import load_workbook

import run
from core import database

CONFIG = """
[mysql]
host = localhost
user = root
password = secret
database = expense_tracker
"""


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config.ini"
    path.write_text(CONFIG)
    return str(path)


def test_export_writes_workbook(monkeypatch, tmp_path, config_path, fake_conn):
    monkeypatch.setattr(database.mysql.connector, "connect", lambda **kwargs: fake_conn)
    output = tmp_path / "report.xlsx"

    assert run.main(["--config", config_path, "export", "--month", "2024-02", "--output", str(output)]) == 0

    wb = load_workbook(BytesIO(output.read_bytes()))
    assert wb["Expenses"]["G2"].value == "3.00"
    assert not fake_conn.is_connected()


def test_export_csv_format(monkeypatch, tmp_path, config_path, fake_conn):
    monkeypatch.setattr(database.mysql.connector, "connect", lambda **kwargs: fake_conn)
    output = tmp_path / "report.csv"

    assert run.main(["--config", config_path, "export", "--format", "csv", "--output", str(output)]) == 0
    assert output.read_text().splitlines()[0] == "Type,Date,Category,Description,Amount"


def test_export_connection_failure_exits_nonzero(monkeypatch, tmp_path, config_path):
    def refuse(**kwargs):
        raise mysql.connector.Error("Can't connect")

    monkeypatch.setattr(database.mysql.connector, "connect", refuse)
    output = tmp_path / "report.xlsx"

    assert run.main(["--config", config_path, "export", "--output", str(output)]) == 1
    assert not output.exists()


def test_export_missing_config_exits_nonzero(tmp_path):
    output = tmp_path / "report.xlsx"

    assert run.main(["--config", str(tmp_path / "missing.ini"), "export", "--output", str(output)]) == 1
    assert not output.exists()
