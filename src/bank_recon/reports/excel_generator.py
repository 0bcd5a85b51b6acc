"""
Excel report generator for bank reconciliation results.
Creates multi-sheet workbooks with formatted output.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional
import logging

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Border, Side
from openpyxl.worksheet.worksheet import Worksheet

from ..config import ReconConfig
from ..models.ledger import BankTransaction, StatementStatus
from ..models.results import ReconciliationItems, ReconciliationReport
from ..utils.exceptions import ReportGenerationError

logger = logging.getLogger(__name__)

# Style definitions
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
MATCH_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
UNMATCHED_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)

TRANSACTION_HEADERS = [
    "Statement",
    "Date",
    "Description",
    "Amount",
    "Direction",
    "Status",
    "Matched Book Record",
    "Matched At",
]


class ExcelReportGenerator:
    """Generates Excel reconciliation reports with multiple sheets."""

    def __init__(self, config: Optional[ReconConfig] = None):
        """
        Initialize the report generator.

        Args:
            config: Application configuration
        """
        self.config = config or ReconConfig()
        self.sheet_config = self.config.output.sheets

    def default_output_path(self, directory: Path = Path(".")) -> Path:
        """Report path from the configured filename template."""
        now = datetime.now()
        filename = self.config.output.excel.filename_template.format(
            date=now.strftime("%Y%m%d"), time=now.strftime("%H%M%S")
        )
        return directory / filename

    def generate_report(
        self,
        report: ReconciliationReport,
        items_by_statement: dict[str, ReconciliationItems],
        output_path: Path,
    ) -> Path:
        """
        Generate the complete reconciliation workbook.

        Args:
            report: Account reconciliation report
            items_by_statement: Matched/unmatched transactions per statement id
            output_path: Path for output file

        Returns:
            Path to generated report

        Raises:
            ReportGenerationError: If the workbook cannot be written
        """
        logger.info(f"Generating Excel report: {output_path}")

        wb = Workbook()
        if wb.active:
            wb.remove(wb.active)

        numbers = {h.statement_id: h.statement_number for h in report.statements}
        matched = [
            (numbers.get(stmt_id, stmt_id), txn)
            for stmt_id, items in items_by_statement.items()
            for txn in items.matched
        ]
        unmatched = [
            (numbers.get(stmt_id, stmt_id), txn)
            for stmt_id, items in items_by_statement.items()
            for txn in items.unmatched
        ]

        sheets = self.sheet_config
        if sheets.summary.enabled:
            self._create_summary_sheet(wb, report)
        if sheets.statements.enabled:
            self._create_statements_sheet(wb, report)
        if sheets.matched.enabled:
            self._create_transaction_sheet(wb, sheets.matched.name, matched, MATCH_FILL)
        if sheets.unmatched.enabled:
            self._create_transaction_sheet(wb, sheets.unmatched.name, unmatched, UNMATCHED_FILL)
        if sheets.recommendations.enabled:
            self._create_recommendations_sheet(wb, report)

        if not wb.sheetnames:
            raise ReportGenerationError("All report sheets are disabled")

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except OSError as e:
            raise ReportGenerationError(f"Failed to write report {output_path}: {e}") from e

        logger.info(f"Report saved: {output_path}")
        return output_path

    def _create_summary_sheet(self, wb: Workbook, report: ReconciliationReport) -> None:
        """Create the summary sheet with account-wide totals."""
        ws = wb.create_sheet(self.sheet_config.summary.name)

        ws["A1"] = "Bank Reconciliation Summary"
        ws["A1"].font = Font(size=16, bold=True)
        ws.merge_cells("A1:D1")

        totals = report.summary
        rows = [
            ("Bank Account:", report.account_id),
            ("Generated At:", report.generated_at.strftime("%Y-%m-%d %H:%M:%S")),
            ("", ""),
            ("Total Statements:", totals.total_statements),
            ("Reconciled Statements:", totals.reconciled_count),
            ("Unreconciled Statements:", totals.unreconciled_count),
            ("Total Transactions:", totals.total_transactions),
            ("Matched Transactions:", totals.total_matched),
            ("Unmatched Transactions:", totals.total_unmatched),
        ]

        for i, (label, value) in enumerate(rows, start=3):
            ws[f"A{i}"] = label
            ws[f"B{i}"] = value
            if label:
                ws[f"A{i}"].font = Font(bold=True)

        ws.column_dimensions["A"].width = 30
        ws.column_dimensions["B"].width = 40

    def _create_statements_sheet(self, wb: Workbook, report: ReconciliationReport) -> None:
        """Create one row per statement, newest import first."""
        ws = wb.create_sheet(self.sheet_config.statements.name)
        self._write_headers(
            ws,
            [
                "Statement Number",
                "Statement ID",
                "Imported At",
                "Reconciled At",
                "Status",
                "Matched",
                "Unmatched",
                "Difference",
            ],
        )

        for row_num, entry in enumerate(report.statements, start=2):
            row_data = [
                entry.statement_number,
                entry.statement_id,
                entry.imported_at,
                entry.reconciled_at or "",
                entry.status.value,
                entry.matched_count,
                entry.unmatched_count,
                float(entry.difference),
            ]
            fill = MATCH_FILL if entry.status == StatementStatus.RECONCILED else UNMATCHED_FILL
            self._write_row(ws, row_num, row_data, fill)

        self._auto_fit_columns(ws)

    def _create_transaction_sheet(
        self,
        wb: Workbook,
        sheet_name: str,
        rows: list[tuple[str, BankTransaction]],
        fill: PatternFill,
    ) -> None:
        """Create a sheet listing bank transactions."""
        ws = wb.create_sheet(sheet_name)
        self._write_headers(ws, TRANSACTION_HEADERS)

        for row_num, (statement_number, txn) in enumerate(rows, start=2):
            row_data = [
                statement_number,
                txn.transaction_date,
                txn.description,
                float(txn.amount),
                txn.direction.value,
                txn.status.value,
                txn.matched_book_transaction_id or "",
                txn.matched_at or "",
            ]
            self._write_row(ws, row_num, row_data, fill)

        self._auto_fit_columns(ws)

    def _create_recommendations_sheet(
        self, wb: Workbook, report: ReconciliationReport
    ) -> None:
        ws = wb.create_sheet(self.sheet_config.recommendations.name)
        ws["A1"] = "Recommendations"
        ws["A1"].font = Font(size=14, bold=True)

        if not report.recommendations:
            ws["A3"] = "All statements are reconciled."
        for i, text in enumerate(report.recommendations, start=3):
            ws[f"A{i}"] = text

        ws.column_dimensions["A"].width = 90

    def _write_headers(self, ws: Worksheet, headers: list[str]) -> None:
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.fill = HEADER_FILL
            cell.font = HEADER_FONT
            cell.border = THIN_BORDER

    def _write_row(self, ws: Worksheet, row_num: int, row_data: list, fill: PatternFill) -> None:
        for col, value in enumerate(row_data, start=1):
            cell = ws.cell(row=row_num, column=col, value=value)
            cell.border = THIN_BORDER
            cell.fill = fill

    def _auto_fit_columns(self, ws: Worksheet) -> None:
        """Auto-fit column widths based on content."""
        for column_cells in ws.columns:
            column = column_cells[0].column_letter
            max_length = max(
                (len(str(cell.value)) for cell in column_cells if cell.value is not None),
                default=0,
            )
            ws.column_dimensions[column].width = min(max_length + 2, 50)
