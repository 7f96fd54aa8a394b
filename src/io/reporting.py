from __future__ import annotations

"""Render extracted statements and computed ratios as an Excel workbook."""

import logging
from datetime import date
from io import BytesIO
from typing import Iterable, Mapping

import pandas as pd
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font
from openpyxl.worksheet.worksheet import Worksheet

from src.domain.schemas import FinancialRecord, RatioReport


XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# (block header, ((label, category, field, is_percent), ...))
SUMMARY_LAYOUT: tuple[tuple[str, tuple[tuple[str, str, str, bool], ...]], ...] = (
    (
        "LIQUIDITY RATIOS",
        (
            ("Current Ratio", "liquidity", "current_ratio", False),
            ("Quick Ratio", "liquidity", "quick_ratio", False),
            ("Cash Ratio", "liquidity", "cash_ratio", False),
        ),
    ),
    (
        "LEVERAGE RATIOS",
        (
            ("Debt-to-Equity", "leverage", "debt_to_equity", False),
            ("Debt-to-Assets", "leverage", "debt_to_assets", False),
            ("Interest Coverage", "leverage", "interest_coverage", False),
        ),
    ),
    (
        "PROFITABILITY RATIOS",
        (
            ("Return on Equity (ROE)", "profitability", "roe", True),
            ("Return on Assets (ROA)", "profitability", "roa", True),
            ("Net Profit Margin", "profitability", "net_profit_margin", True),
            ("Gross Profit Margin", "profitability", "gross_profit_margin", True),
        ),
    ),
    (
        "EFFICIENCY RATIOS",
        (
            ("Asset Turnover", "efficiency", "asset_turnover", False),
            ("Inventory Turnover", "efficiency", "inventory_turnover", False),
            ("Receivables Turnover", "efficiency", "receivables_turnover", False),
        ),
    ),
    (
        "COVERAGE RATIOS",
        (
            ("Times Interest Earned", "coverage", "times_interest_earned", False),
            ("Debt Service Coverage", "coverage", "debt_service_coverage", False),
        ),
    ),
)

STATEMENT_SHEETS = (
    ("Income Statement", "Income Statement", "income_statement"),
    ("Balance Sheet", "Balance Sheet", "balance_sheet"),
    ("Cash Flow", "Cash Flow Statement", "cash_flow"),
)

NUMBER_FORMAT = "#,##0;[Red](#,##0)"
RATIO_FORMAT = "0.00"
PERCENT_SUFFIX_FORMAT = '0.00"%"'


logger = logging.getLogger(__name__)


def render_report(
    record: FinancialRecord,
    ratios: RatioReport,
    company_name: str,
    analysis_date: date | None = None,
) -> bytes:
    """Write extracted statements and ratios to an in-memory Excel workbook.

    Args:
        record (FinancialRecord): Extracted statement figures and notes.
        ratios (RatioReport): Ratios computed from the record.
        company_name (str): Company shown on the summary sheet.
        analysis_date (date | None): Date shown on the summary sheet; today when omitted.

    Returns:
        bytes: The .xlsx workbook.
    """
    analysis_date = analysis_date or date.today()
    buffer = BytesIO()
    summary, percent_rows = _summary_frame(ratios, company_name, analysis_date)
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        summary.to_excel(writer, sheet_name="Summary", header=False, index=False)
        for sheet_name, title, section in STATEMENT_SHEETS:
            _statement_frame(getattr(record, section)).to_excel(
                writer,
                sheet_name=sheet_name,
                startrow=1,
                index=False,
            )
            writer.sheets[sheet_name].cell(row=1, column=1, value=title)
        _notes_frame(record.notes).to_excel(writer, sheet_name="Notes", startrow=1, index=False)
        writer.sheets["Notes"].cell(row=1, column=1, value="Notes and Disclosures")
        _format_workbook(writer, percent_rows)
    content = buffer.getvalue()
    logger.debug("Rendered %d byte report for %s", len(content), company_name)
    return content


def clean_text(value: str) -> str:
    """Remove control characters that worksheets cannot store."""
    return ILLEGAL_CHARACTERS_RE.sub("", value)


def report_filename(company_name: str, analysis_date: date | None = None) -> str:
    """Build the download filename for a report.

    Args:
        company_name (str): Company name as entered.
        analysis_date (date | None): Report date; today when omitted.

    Returns:
        str: Filename like ``2024_03_31_Acme Ltd.xlsx``.
    """
    analysis_date = analysis_date or date.today()
    stamp = analysis_date.isoformat().replace("-", "_")
    safe_name = clean_text(company_name).strip().replace("/", "_").replace("\\", "_")
    return f"{stamp}_{safe_name}.xlsx"


def _summary_frame(
    ratios: RatioReport,
    company_name: str,
    analysis_date: date,
) -> tuple[pd.DataFrame, set[int]]:
    """Build the summary sheet rows.

    Args:
        ratios (RatioReport): Computed ratios.
        company_name (str): Company name.
        analysis_date (date): Date of the analysis.

    Returns:
        tuple[pd.DataFrame, set[int]]: Summary rows and the 1-based worksheet rows
        holding percentage values.
    """
    rows: list[tuple[str | None, object]] = [
        ("Financial Analysis Summary", None),
        ("Company Name", clean_text(company_name)),
        ("Analysis Date", analysis_date.isoformat()),
    ]
    percent_rows: set[int] = set()
    for header, entries in SUMMARY_LAYOUT:
        rows.append((None, None))
        rows.append((header, None))
        for label, category, field, is_percent in entries:
            rows.append((label, getattr(getattr(ratios, category), field)))
            if is_percent:
                percent_rows.add(len(rows))
    return pd.DataFrame(rows, columns=["Metric", "Value"]), percent_rows


def _statement_frame(items: Mapping[str, float]) -> pd.DataFrame:
    """Render a statement mapping as an Item/Amount table in extraction order."""
    return pd.DataFrame(
        [(clean_text(key), value) for key, value in items.items()],
        columns=["Item", "Amount"],
    )


def _notes_frame(notes: Iterable[str]) -> pd.DataFrame:
    """Number notes from 1 as ``Note N`` rows."""
    rows = [(f"Note {index}", clean_text(note)) for index, note in enumerate(notes, start=1)]
    return pd.DataFrame(rows, columns=["Note", "Description"])


def _format_workbook(writer: pd.ExcelWriter, percent_rows: set[int]) -> None:
    """Apply number formats, bold titles and column widths.

    Args:
        writer (pd.ExcelWriter): Excel writer with workbook/worksheets.
        percent_rows (set[int]): Summary rows holding percentage values.

    Returns:
        None: Mutates workbook formatting.
    """
    headers = {header for header, _ in SUMMARY_LAYOUT}
    summary = writer.sheets["Summary"]
    for label_cell, value_cell in summary.iter_rows(min_row=1, max_col=2):
        if label_cell.row == 1 or label_cell.value in headers:
            label_cell.font = Font(bold=True)
        if isinstance(value_cell.value, (int, float)):
            value_cell.number_format = (
                PERCENT_SUFFIX_FORMAT if value_cell.row in percent_rows else RATIO_FORMAT
            )
    for sheet_name, _, _ in STATEMENT_SHEETS:
        sheet = writer.sheets[sheet_name]
        # Amounts start below the title and header rows.
        for row in sheet.iter_rows(min_row=3, min_col=2, max_col=2):
            for cell in row:
                cell.number_format = NUMBER_FORMAT
    for sheet in writer.sheets.values():
        sheet.sheet_view.showGridLines = False
        _title_row(sheet)
        sheet.column_dimensions["A"].width = 32
        sheet.column_dimensions["B"].width = 60 if sheet.title == "Notes" else 20


def _title_row(sheet: Worksheet) -> None:
    sheet.cell(row=1, column=1).font = Font(bold=True, size=12)
