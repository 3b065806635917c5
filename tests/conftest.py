"""Shared test fixtures."""

import re
from datetime import date
from decimal import Decimal

import pytest


class FakeCursor:
    """Dictionary cursor that answers the report's SELECTs from in-memory tables."""

    def __init__(self, conn, dictionary=False):
        self.conn = conn
        self.dictionary = dictionary
        self._result = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def execute(self, sql, params=()):
        self.conn.executed.append((sql, tuple(params)))
        if self.conn.fail_with is not None:
            raise self.conn.fail_with
        match = re.search(r"SELECT (.+?) FROM (\w+)", sql)
        if match is None:
            return
        columns = [col.strip() for col in match.group(1).split(",")]
        rows = list(self.conn.tables.get(match.group(2), []))
        if " WHERE " in sql:
            year, month = params
            rows = [r for r in rows if r["year"] == year and r["month"] == month]
        rows = sorted(rows, key=lambda r: (r["year"], r["month"], r["day"]), reverse=True)
        self._result = [{col: r.get(col) for col in columns} for r in rows]

    def fetchall(self):
        return list(self._result)

    def close(self):
        pass


class FakeConnection:
    def __init__(self, tables=None, fail_with=None):
        self.tables = tables or {}
        self.fail_with = fail_with
        self.executed = []
        self.connected = True
        self.committed = False

    def cursor(self, dictionary=False):
        return FakeCursor(self, dictionary=dictionary)

    def commit(self):
        self.committed = True

    def is_connected(self):
        return self.connected

    def close(self):
        self.connected = False


def expense(year, month, day, category, description, amount):
    return {
        "year": year, "month": month, "day": day,
        "category": category, "description": description,
        "amount": Decimal(amount),
    }


def income(year, month, day, source, amount):
    return {"year": year, "month": month, "day": day, "source": source, "amount": Decimal(amount)}


@pytest.fixture
def sample_tables():
    return {
        "expenses": [
            expense(2024, 1, 5, "Uber", "ride", "10.00"),
            expense(2024, 1, 6, "Food", "lunch", "5.50"),
            expense(2024, 2, 1, "Misc", "x", "3.00"),
        ],
        "income": [
            income(2024, 1, 2, "Allowance", "60.00"),
            income(2024, 1, 20, "Tutoring", "40.00"),
            income(2024, 2, 3, "Allowance", "50.00"),
        ],
    }


@pytest.fixture
def fake_conn(sample_tables):
    return FakeConnection(sample_tables)


@pytest.fixture
def report_day():
    return date(2024, 3, 1)
