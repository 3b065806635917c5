"""
Common Helper Functions for the Expenses Report

This module provides reusable utility functions for:
- Month filter parsing (YYYY-MM)
- Month keys used for grouping and sorting
- Query building with bound parameters
- Display formatting of amounts and dates
"""

from __future__ import annotations
from typing import Optional, Any, Iterable, List, Tuple, Union
from dataclasses import dataclass
from decimal import Context, Decimal, ROUND_HALF_UP, InvalidOperation, localcontext
import re

# ============================================================================
# Month Utilities
# ============================================================================

MONTH_FILTER_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}")


@dataclass(frozen=True)
class MonthFilter:
    """A validated year/month restriction applied to both record fetches."""
    year: int
    month: int

    @property
    def key(self) -> str:
        return month_key(self.year, self.month)

    def predicate(self) -> Tuple[str, Tuple[int, int]]:
        """WHERE predicate and its typed parameters."""
        return "year = %s AND month = %s", (self.year, self.month)


def parse_month_filter(raw: Optional[str]) -> Optional[MonthFilter]:
    """
    Parse a raw ``YYYY-MM`` filter.

    Anything that is not exactly four digits, a dash and two digits naming a
    month between 01 and 12 means "no filter" and yields None. Malformed
    input is never reported as an error.

    Examples:
        >>> parse_month_filter("2024-01")
        MonthFilter(year=2024, month=1)

        >>> parse_month_filter("2024-13") is None
        True
    """
    if not raw or not isinstance(raw, str):
        return None
    if not MONTH_FILTER_PATTERN.fullmatch(raw):
        return None

    year, month = (int(part) for part in raw.split("-"))
    if not 1 <= month <= 12:
        return None
    return MonthFilter(year=year, month=month)


def month_key(year: Any, month: Any) -> str:
    """``YYYY-MM`` with zero padded month, so lexical order is chronological."""
    return f"{int(year):04d}-{int(month):02d}"


def format_record_date(year: Any, month: Any, day: Any) -> str:
    return f"{int(year):04d}-{int(month):02d}-{int(day):02d}"


# ============================================================================
# Amount Utilities
# ============================================================================

def to_decimal(value: Union[str, int, float, Decimal, None]) -> Decimal:
    """Coerce a driver value into Decimal. None and garbage count as zero."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    try:
        # str() first so floats keep their printed value
        return Decimal(str(value).strip() or "0")
    except InvalidOperation:
        return Decimal("0")


# MySQL DECIMAL holds up to 65 digits; sums of such amounts must not round
AMOUNT_CONTEXT = Context(prec=100, rounding=ROUND_HALF_UP)


def sum_amounts(amounts: Iterable[Decimal]) -> Decimal:
    """Exact sum of Decimal amounts, however large."""
    with localcontext(AMOUNT_CONTEXT):
        return sum(amounts, Decimal("0"))


# ============================================================================
# Query Building Utilities
# ============================================================================

class QueryBuilder:
    """Dynamic SQL query builder with parameter management."""

    def __init__(self, base_query: str):
        """
        Initialize query builder.

        Args:
            base_query: Base SQL query without a WHERE clause
        """
        self.query = base_query
        self.params: List[Any] = []
        self._has_where = False

    def add_condition(self, condition: str, *params: Any) -> "QueryBuilder":
        """
        Add a WHERE condition with parameters.

        Args:
            condition: SQL condition (e.g., "year = %s")
            *params: Parameters for the condition

        Returns:
            Self for method chaining
        """
        self.query += f" AND {condition}" if self._has_where else f" WHERE {condition}"
        self._has_where = True
        self.params.extend(params)
        return self

    def add_month_filter(self, month_filter: Optional[MonthFilter]) -> "QueryBuilder":
        if month_filter is not None:
            condition, params = month_filter.predicate()
            self.add_condition(condition, *params)
        return self

    def add_order_by(self, order_clause: str) -> "QueryBuilder":
        """
        Add ORDER BY clause.

        Args:
            order_clause: ORDER BY clause (e.g., "year DESC, month DESC")

        Returns:
            Self for method chaining
        """
        self.query += f" ORDER BY {order_clause}"
        return self

    def build(self) -> Tuple[str, Tuple[Any, ...]]:
        """
        Build final query and parameters.

        Returns:
            Tuple of (query_string, parameters)
        """
        return self.query, tuple(self.params)


# ============================================================================
# Format Helpers
# ============================================================================

def _display_value(amount: Union[int, float, Decimal, None]) -> Decimal:
    with localcontext(AMOUNT_CONTEXT):
        value = to_decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        # no "-0.00" in the report
        return abs(value) if value.is_zero() else value


class FormatHelper:
    """Format data for display."""

    @staticmethod
    def format_amount(amount: Union[int, float, Decimal, None]) -> str:
        """
        Format an amount to two decimals with a thousands separator.

        Rounds half up on the display value only; aggregates stay exact.

        Examples:
            >>> FormatHelper.format_amount(Decimal("1234.565"))
            '1,234.57'
            >>> FormatHelper.format_amount(Decimal("-50"))
            '-50.00'
        """
        return f"{_display_value(amount):,.2f}"

    @staticmethod
    def format_plain_amount(amount: Union[int, float, Decimal, None]) -> str:
        """Two decimals, no separator; used for machine readable output."""
        return f"{_display_value(amount):.2f}"
