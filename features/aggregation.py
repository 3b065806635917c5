# features/aggregation.py
"""
Totals, monthly grouping and category classification for the expenses report.

All sums are exact ``Decimal`` arithmetic. Formatting to two decimals is left
to the sheet renderer.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal, localcontext
from typing import Dict, List, Sequence, Iterable, TypeVar, Union

from core.utils import AMOUNT_CONTEXT, month_key, sum_amounts
from models.records_model import ExpenseRecord, IncomeRecord

# Closed classification: anything else is folded into "other"
CATEGORIES = ("uber", "food", "airtime", "other")
FALLBACK_CATEGORY = "other"

Record = TypeVar("Record", ExpenseRecord, IncomeRecord)


@dataclass(frozen=True)
class MonthlyClassification:
    month: str
    totals: Dict[str, Decimal]

    @property
    def total(self) -> Decimal:
        return sum_amounts(self.totals.values())


@dataclass
class ReportSummary:
    total_expenses: Decimal
    total_income: Decimal
    income_by_month: Dict[str, Decimal] = field(default_factory=dict)
    expenses_by_month: Dict[str, List[ExpenseRecord]] = field(default_factory=dict)
    classification: List[MonthlyClassification] = field(default_factory=list)

    @property
    def remaining_balance(self) -> Decimal:
        with localcontext(AMOUNT_CONTEXT):
            return self.total_income - self.total_expenses


def total_amount(records: Iterable[Union[ExpenseRecord, IncomeRecord]]) -> Decimal:
    return sum_amounts(record.amount for record in records)


def group_by_month(records: Sequence[Record]) -> Dict[str, List[Record]]:
    """
    Group records by ``YYYY-MM``.

    Records keep their relative order inside a group; the returned dict is
    ordered by month key, most recent first.
    """
    grouped: Dict[str, List[Record]] = {}
    for record in records:
        grouped.setdefault(month_key(record.year, record.month), []).append(record)
    return {key: grouped[key] for key in sorted(grouped, reverse=True)}


def classify_by_category(records: Iterable[ExpenseRecord]) -> Dict[str, Decimal]:
    """Sum amounts into the fixed buckets; unknown or empty categories go to "other"."""
    result = {category: Decimal("0") for category in CATEGORIES}
    with localcontext(AMOUNT_CONTEXT):
        for record in records:
            category = (record.category or "").lower()
            if category not in result:
                category = FALLBACK_CATEGORY
            result[category] += record.amount
    return result


def income_by_month(records: Sequence[IncomeRecord]) -> Dict[str, Decimal]:
    return {
        key: total_amount(rows)
        for key, rows in group_by_month(records).items()
    }


def classify_by_month(expenses_by_month: Dict[str, List[ExpenseRecord]]) -> List[MonthlyClassification]:
    return [
        MonthlyClassification(month=key, totals=classify_by_category(rows))
        for key, rows in expenses_by_month.items()
    ]


def summarize(expenses: Sequence[ExpenseRecord], incomes: Sequence[IncomeRecord]) -> ReportSummary:
    """Compute every figure the report needs from the fetched records."""
    expenses_by_month = group_by_month(expenses)
    return ReportSummary(
        total_expenses=total_amount(expenses),
        total_income=total_amount(incomes),
        income_by_month=income_by_month(incomes),
        expenses_by_month=expenses_by_month,
        classification=classify_by_month(expenses_by_month),
    )
