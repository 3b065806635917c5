"""Tests for fetching expense and income records."""

from decimal import Decimal

import mysql.connector
import pytest

from conftest import FakeConnection, expense
from core.utils import MonthFilter, parse_month_filter
from models.records_model import (
    EXPENSE_COLUMNS,
    ExpenseRecord,
    IncomeRecord,
    RecordModel,
    RecordQueryError,
    RecordValidationError,
)


def test_unfiltered_query_has_no_where_clause(fake_conn):
    sql, params = RecordModel(fake_conn).build_query("expenses", EXPENSE_COLUMNS)
    assert sql == (
        "SELECT year, month, day, category, description, amount FROM expenses "
        "ORDER BY year DESC, month DESC, day DESC"
    )
    assert params == ()


def test_filtered_query_binds_integer_params(fake_conn):
    sql, params = RecordModel(fake_conn).build_query("income", ["year", "amount"], MonthFilter(2024, 1))
    assert sql == (
        "SELECT year, amount FROM income WHERE year = %s AND month = %s "
        "ORDER BY year DESC, month DESC, day DESC"
    )
    assert params == (2024, 1)
    assert all(isinstance(p, int) for p in params)


def test_unknown_table_or_column_is_rejected(fake_conn):
    model = RecordModel(fake_conn)
    with pytest.raises(RecordValidationError):
        model.fetch("users", ["year"])
    with pytest.raises(RecordValidationError):
        model.fetch("expenses", ["year", "password"])
    assert fake_conn.executed == []


def test_fetch_expenses_most_recent_first(fake_conn):
    records = RecordModel(fake_conn).fetch_expenses()
    assert [(r.year, r.month, r.day) for r in records] == [(2024, 2, 1), (2024, 1, 6), (2024, 1, 5)]
    assert records[0] == ExpenseRecord(2024, 2, 1, "Misc", "x", Decimal("3.00"))


def test_fetch_with_valid_filter_returns_only_that_month(fake_conn):
    model = RecordModel(fake_conn)
    month_filter = parse_month_filter("2024-01")

    expenses = model.fetch_expenses(month_filter)
    incomes = model.fetch_income(month_filter)

    assert expenses and all((r.year, r.month) == (2024, 1) for r in expenses)
    assert incomes and all((r.year, r.month) == (2024, 1) for r in incomes)
    assert fake_conn.executed[-1][1] == (2024, 1)


@pytest.mark.parametrize("raw", [None, "", "2024-13", "January"])
def test_fetch_with_invalid_filter_returns_everything(fake_conn, raw):
    expenses = RecordModel(fake_conn).fetch_expenses(parse_month_filter(raw))
    assert len(expenses) == 3
    assert fake_conn.executed[-1][1] == ()


def test_fetch_income_records(fake_conn):
    incomes = RecordModel(fake_conn).fetch_income()
    assert incomes[0] == IncomeRecord(2024, 2, 3, "Allowance", Decimal("50.00"))
    assert all(isinstance(i.amount, Decimal) for i in incomes)


def test_missing_text_fields_and_float_amounts_are_normalized():
    row = expense(2024, 5, 1, None, None, "0")
    row["amount"] = 12.5
    conn = FakeConnection({"expenses": [row]})

    (record,) = RecordModel(conn).fetch_expenses()

    assert record.category == ""
    assert record.description == ""
    assert record.amount == Decimal("12.5")


def test_driver_error_becomes_record_query_error():
    conn = FakeConnection(fail_with=mysql.connector.errors.ProgrammingError("bad sql"))
    with pytest.raises(RecordQueryError) as exc_info:
        RecordModel(conn).fetch_income()
    assert isinstance(exc_info.value.__cause__, mysql.connector.Error)
