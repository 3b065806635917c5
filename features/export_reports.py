#Excel and CSV report generation
"""
Export and Report Generation Service for the University Expenses Tracker

This module builds the downloadable report:
- Expenses sheet with every expense and the grand total
- Income sheet with every income entry and a per-month income table
- Balance sheet (income minus expenses as of today)
- Classification sheet (Uber / Food / Airtime / Other per month)
- Flat CSV export of the same records using pandas

The sheet layout (row/column coordinates) is the user-visible contract and is
written cell by cell through SheetWriter.
"""

from __future__ import annotations
from typing import Optional, Dict, Any, List, Sequence
from datetime import date
from dataclasses import dataclass, field
from io import BytesIO
import logging

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import column_index_from_string, get_column_letter
from openpyxl.worksheet.worksheet import Worksheet
import mysql.connector

from core.database import read_config
from core.utils import (
    FormatHelper,
    MonthFilter,
    format_record_date,
    parse_month_filter
)
from features.aggregation import CATEGORIES, ReportSummary, summarize
from models.records_model import ExpenseRecord, IncomeRecord, RecordModel

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
CSV_MEDIA_TYPE = "text/csv"

CSV_COLUMNS = ["Type", "Date", "Category", "Description", "Amount"]


# ================================================================
# Export Configuration
# ================================================================

@dataclass
class ExportConfig:
    """Configuration for export operations."""
    filename: str = "university_expenses.xlsx"
    csv_filename: str = "university_expenses.csv"
    csv_encoding: str = "utf-8"
    autosize_columns: List[str] = field(
        default_factory=lambda: [get_column_letter(i) for i in range(1, 13)]  # A..L
    )
    max_column_width: int = 50


def load_export_config(config_path: Optional[str] = None) -> ExportConfig:
    """Read the optional [export] section; a missing section means defaults."""
    config = read_config(config_path)
    export_config = ExportConfig()
    if config.has_section("export"):
        export_config.filename = config.get("export", "filename", fallback=export_config.filename)
        export_config.csv_filename = config.get("export", "csv_filename", fallback=export_config.csv_filename)
    return export_config


# ================================================================
# Sheet Writer
# ================================================================

class SheetWriter:
    """Thin cell-level writer over one openpyxl worksheet."""

    BOLD = Font(bold=True)

    def __init__(self, ws: Worksheet):
        self.ws = ws

    def write_cell(self, coordinate: str, value: Any) -> None:
        self.ws[coordinate] = value

    def write_row(self, values: Sequence[Any], row: int, start_col: str = "A") -> None:
        """Write values left to right starting at start_col/row."""
        start_idx = column_index_from_string(start_col)
        for offset, value in enumerate(values):
            self.ws.cell(row=row, column=start_idx + offset, value=value)

    def bold_row(self, row: int, col_count: int, start_col: str = "A") -> None:
        """Bold col_count cells of one row, starting at start_col."""
        start_idx = column_index_from_string(start_col)
        for col_idx in range(start_idx, start_idx + col_count):
            self.ws.cell(row=row, column=col_idx).font = self.BOLD

    def autosize_columns(self, columns: Sequence[str], max_width: int = 50) -> None:
        """Mark columns best-fit and size them to their widest value."""
        # iter_rows creates cells, so stay inside the used range
        last_column = self.ws.max_column
        for column_letter in columns:
            dimension = self.ws.column_dimensions[column_letter]
            dimension.auto_size = True
            col_idx = column_index_from_string(column_letter)
            if col_idx > last_column:
                continue
            max_length = 0
            for (cell,) in self.ws.iter_rows(min_col=col_idx, max_col=col_idx):
                if cell.value:
                    max_length = max(max_length, len(str(cell.value)))
            if max_length:
                dimension.width = min(max_length + 4, max_width)


# ================================================================
# Main Report Builder
# ================================================================

class ReportBuilder:
    """
    Builds the four-sheet expenses workbook for one export request.

    Each instance owns fresh state: the month filter is parsed once, both
    tables are fetched once, and the workbook is rendered from those
    snapshots.
    """

    def __init__(
        self,
        conn: mysql.connector.MySQLConnection,
        month_filter: Optional[str] = None,
        config: Optional[ExportConfig] = None,
        today: Optional[date] = None
    ):
        self.conn = conn
        self.month_filter: Optional[MonthFilter] = parse_month_filter(month_filter)
        self.config = config or ExportConfig()
        self.today = today
        self.record_model = RecordModel(conn)

        if month_filter and self.month_filter is None:
            logger.info("Ignoring invalid month filter %r", month_filter)

    # ================================================================
    # DATA
    # ================================================================

    def fetch_records(self):
        """Fetch expenses then income, both under the same month filter."""
        expenses = self.record_model.fetch_expenses(self.month_filter)
        incomes = self.record_model.fetch_income(self.month_filter)
        return expenses, incomes

    # ================================================================
    # EXCEL EXPORT
    # ================================================================

    def build_workbook(self) -> Workbook:
        """Fetch, aggregate and render the whole workbook."""
        expenses, incomes = self.fetch_records()
        summary = summarize(expenses, incomes)
        logger.info(
            "Rendering report: %d expenses, %d income entries, filter=%s",
            len(expenses), len(incomes),
            self.month_filter.key if self.month_filter else "none"
        )

        wb = Workbook()
        expenses_ws = wb.active
        expenses_ws.title = "Expenses"
        self._create_expenses_sheet(SheetWriter(expenses_ws), expenses, summary)
        self._create_income_sheet(SheetWriter(wb.create_sheet("Income")), incomes, summary, self.month_filter)
        self._create_balance_sheet(SheetWriter(wb.create_sheet("Balance")), summary)
        self._create_classification_sheet(SheetWriter(wb.create_sheet("Classification")), summary)

        for ws in wb.worksheets:
            SheetWriter(ws).autosize_columns(self.config.autosize_columns, self.config.max_column_width)

        return wb

    def to_bytes(self) -> bytes:
        """Serialize the workbook as .xlsx bytes."""
        buffer = BytesIO()
        self.build_workbook().save(buffer)
        return buffer.getvalue()

    # ================================================================
    # CSV EXPORT
    # ================================================================

    def to_csv(self) -> bytes:
        """
        Flat CSV of every fetched record, expenses first then income.

        Income rows carry their source in the Category column and an empty
        description.
        """
        expenses, incomes = self.fetch_records()
        rows: List[Dict[str, Any]] = [self._expense_csv_row(e) for e in expenses]
        rows.extend(self._income_csv_row(i) for i in incomes)

        df = pd.DataFrame(rows, columns=CSV_COLUMNS)
        return df.to_csv(index=False).encode(self.config.csv_encoding)

    @staticmethod
    def _expense_csv_row(expense: ExpenseRecord) -> Dict[str, Any]:
        return {
            "Type": "Expense",
            "Date": format_record_date(expense.year, expense.month, expense.day),
            "Category": expense.category,
            "Description": expense.description,
            "Amount": FormatHelper.format_plain_amount(expense.amount),
        }

    @staticmethod
    def _income_csv_row(income: IncomeRecord) -> Dict[str, Any]:
        return {
            "Type": "Income",
            "Date": format_record_date(income.year, income.month, income.day),
            "Category": income.source,
            "Description": "",
            "Amount": FormatHelper.format_plain_amount(income.amount),
        }

    # ================================================================
    # EXCEL HELPER METHODS
    # ================================================================

    @staticmethod
    def _create_expenses_sheet(writer: SheetWriter, expenses: Sequence[ExpenseRecord], summary: ReportSummary):
        """Expense listing with the grand total beside the header."""
        fmt = FormatHelper.format_amount
        total = fmt(summary.total_expenses)

        row = 1
        writer.write_cell(f"A{row}", "==== EXPENSES ====")
        writer.bold_row(row, 4, "A")
        row += 1
        writer.write_row(["Date", "Category", "Description", "Amount"], row, "A")
        writer.bold_row(row, 4, "A")
        writer.write_cell("F2", "Total Expenses:")
        writer.write_cell("G2", total)
        writer.bold_row(2, 2, "F")
        row += 1

        for e in expenses:
            writer.write_row(
                [format_record_date(e.year, e.month, e.day), e.category, e.description, fmt(e.amount)],
                row, "A"
            )
            row += 1
        writer.write_row(["Total Expenses", "", "", total], row, "A")

    @staticmethod
    def _create_income_sheet(
        writer: SheetWriter,
        incomes: Sequence[IncomeRecord],
        summary: ReportSummary,
        month_filter: Optional[MonthFilter]
    ):
        """Income listing plus the per-month table in F/G."""
        fmt = FormatHelper.format_amount

        row = 1
        writer.write_cell(f"A{row}", "==== INCOME ====")
        writer.bold_row(row, 3, "A")
        row += 1
        writer.write_row(["Date", "Source", "Amount"], row, "A")
        writer.bold_row(row, 3, "A")

        selected = month_filter.key if month_filter else None
        if selected is not None and selected in summary.income_by_month:
            writer.write_cell("F2", f"Income for {selected}:")
            writer.write_cell("G2", fmt(summary.income_by_month[selected]))
        else:
            writer.write_cell("F2", "Income by Month:")
            writer.write_cell("G2", "")
        writer.bold_row(2, 2, "F")
        row += 1

        for i in incomes:
            writer.write_row([format_record_date(i.year, i.month, i.day), i.source, fmt(i.amount)], row, "A")
            row += 1
        writer.write_row(["Total Income", "", fmt(summary.total_income)], row, "A")

        # Fixed position: shares rows 5+ with the listing in A-C
        row = 5
        writer.write_cell(f"F{row}", "==== INCOME BY MONTH ====")
        writer.bold_row(row, 2, "F")
        row += 1
        writer.write_row(["Month", "Total Income"], row, "F")
        writer.bold_row(row, 2, "F")
        row += 1
        for month, amount in summary.income_by_month.items():
            writer.write_row([month, fmt(amount)], row, "F")
            row += 1

    def _create_balance_sheet(self, writer: SheetWriter, summary: ReportSummary):
        today = (self.today or date.today()).strftime("%Y-%m-%d")
        writer.write_cell("A1", f"==== REMAINING BALANCE AS OF {today} ====")
        writer.bold_row(1, 2, "A")
        writer.write_row(["Balance", FormatHelper.format_amount(summary.remaining_balance)], 2, "A")
        writer.bold_row(2, 2, "A")

    @staticmethod
    def _create_classification_sheet(writer: SheetWriter, summary: ReportSummary):
        """One row per month, most recent first, with the four buckets and their total."""
        fmt = FormatHelper.format_amount
        categories = list(CATEGORIES)

        row = 1
        writer.write_cell(
            f"A{row}",
            "==== EXPENSE CLASSIFICATION BY MONTH (Uber, Food, Airtime, Other) ===="
        )
        writer.bold_row(row, len(categories) + 2, "A")
        row += 1
        writer.write_row(["Month"] + [c.capitalize() for c in categories] + ["Total"], row, "A")
        writer.bold_row(row, len(categories) + 2, "A")
        row += 1

        for monthly in summary.classification:
            writer.write_row(
                [monthly.month]
                + [fmt(monthly.totals[c]) for c in categories]
                + [fmt(monthly.total)],
                row, "A"
            )
            row += 1
