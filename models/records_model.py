#Read access to the expenses and income tables
from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, List, Dict, Any, Tuple, Sequence
import logging
import mysql.connector

from core.utils import MonthFilter, QueryBuilder, to_decimal

logger = logging.getLogger(__name__)

# ==========================
# Custom Exceptions
# ==========================

class RecordError(Exception):
    """Base class for record fetch exceptions."""


class RecordValidationError(RecordError):
    """Raised when a table or column outside the known schema is requested."""


class RecordQueryError(RecordError):
    """Raised when the database rejects or fails a query."""


# ==========================
# Dataclasses
# ==========================

@dataclass(frozen=True)
class ExpenseRecord:
    year: int
    month: int
    day: int
    category: str
    description: str
    amount: Decimal


@dataclass(frozen=True)
class IncomeRecord:
    year: int
    month: int
    day: int
    source: str
    amount: Decimal


EXPENSE_TABLE = "expenses"
INCOME_TABLE = "income"

EXPENSE_COLUMNS = ("year", "month", "day", "category", "description", "amount")
INCOME_COLUMNS = ("year", "month", "day", "source", "amount")

# identifiers are never taken from request input
ALLOWED_COLUMNS = {
    EXPENSE_TABLE: EXPENSE_COLUMNS,
    INCOME_TABLE: INCOME_COLUMNS,
}

ORDER_BY = "year DESC, month DESC, day DESC"


# ==========================
# Model: RecordModel
# ==========================

class RecordModel:
    """Fetches expense and income rows, optionally restricted to one month."""

    def __init__(self, connection: mysql.connector.MySQLConnection):
        self.conn = connection

    # ------------
    # Internal Helpers
    # ------------

    def _execute(self, query: str, params: Tuple = ()) -> List[Dict[str, Any]]:
        """Internal DB executor with error handling."""
        try:
            with self.conn.cursor(dictionary=True) as cursor:
                cursor.execute(query, params)
                return cursor.fetchall()
        except mysql.connector.Error as err:
            logger.error("Query failed: %s", err)
            raise RecordQueryError(f"Database error: {err}") from err

    @staticmethod
    def _validate_identifiers(table: str, columns: Sequence[str]) -> None:
        allowed = ALLOWED_COLUMNS.get(table)
        if allowed is None:
            raise RecordValidationError(f"Unknown table: {table}")
        unknown = [col for col in columns if col not in allowed]
        if unknown:
            raise RecordValidationError(f"Unknown columns for {table}: {', '.join(unknown)}")

    # ------------
    # Queries
    # ------------

    def build_query(
        self,
        table: str,
        columns: Sequence[str],
        month_filter: Optional[MonthFilter] = None
    ) -> Tuple[str, Tuple[Any, ...]]:
        """
        Build the SELECT for one table.

        Returns:
            (sql, params) with the month predicate bound as integers when a
            filter is active.
        """
        self._validate_identifiers(table, columns)
        builder = QueryBuilder(f"SELECT {', '.join(columns)} FROM {table}")
        builder.add_month_filter(month_filter)
        builder.add_order_by(ORDER_BY)
        return builder.build()

    def fetch(
        self,
        table: str,
        columns: Sequence[str],
        month_filter: Optional[MonthFilter] = None
    ) -> List[Dict[str, Any]]:
        """Materialize every matching row, most recent first."""
        sql, params = self.build_query(table, columns, month_filter)
        rows = self._execute(sql, params)
        logger.debug("Fetched %d rows from %s", len(rows), table)
        return rows

    def fetch_expenses(self, month_filter: Optional[MonthFilter] = None) -> List[ExpenseRecord]:
        rows = self.fetch(EXPENSE_TABLE, EXPENSE_COLUMNS, month_filter)
        return [
            ExpenseRecord(
                year=int(row["year"]),
                month=int(row["month"]),
                day=int(row["day"]),
                category=row.get("category") or "",
                description=row.get("description") or "",
                amount=to_decimal(row.get("amount")),
            )
            for row in rows
        ]

    def fetch_income(self, month_filter: Optional[MonthFilter] = None) -> List[IncomeRecord]:
        rows = self.fetch(INCOME_TABLE, INCOME_COLUMNS, month_filter)
        return [
            IncomeRecord(
                year=int(row["year"]),
                month=int(row["month"]),
                day=int(row["day"]),
                source=row.get("source") or "",
                amount=to_decimal(row.get("amount")),
            )
            for row in rows
        ]
