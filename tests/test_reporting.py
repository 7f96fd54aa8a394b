from __future__ import annotations

"""Tests for the Excel report renderer."""

from datetime import date
from io import BytesIO

from openpyxl import load_workbook
from openpyxl.workbook.workbook import Workbook

from src.domain.schemas import FinancialRecord
from src.io.reporting import render_report, report_filename
from src.logic.ratios import compute_ratios


ANALYSIS_DATE = date(2024, 3, 31)


def _render(record: FinancialRecord) -> Workbook:
    """Render a record and load the workbook back."""
    content = render_report(record, compute_ratios(record), "Acme Ltd", ANALYSIS_DATE)
    return load_workbook(BytesIO(content))


def _rows(workbook: Workbook, sheet: str) -> list[tuple[object, ...]]:
    return [tuple(row) for row in workbook[sheet].iter_rows(values_only=True)]


def test_render_report_sheet_order(sample_record: FinancialRecord) -> None:
    workbook = _render(sample_record)

    assert workbook.sheetnames == [
        "Summary",
        "Income Statement",
        "Balance Sheet",
        "Cash Flow",
        "Notes",
    ]


def test_render_report_summary_layout(sample_record: FinancialRecord) -> None:
    """Summary should list company, date and every ratio under its category header.

    Args:
        sample_record (FinancialRecord): Shared sample record fixture.

    Returns:
        None: Assertions validate the summary sheet.
    """
    workbook = _render(sample_record)
    rows = _rows(workbook, "Summary")
    labels = [label for label, _ in rows]
    values = {label: value for label, value in rows if label is not None}

    assert rows[0] == ("Financial Analysis Summary", None)
    assert values["Company Name"] == "Acme Ltd"
    assert values["Analysis Date"] == "2024-03-31"
    assert [label for label in labels if label and label.endswith("RATIOS")] == [
        "LIQUIDITY RATIOS",
        "LEVERAGE RATIOS",
        "PROFITABILITY RATIOS",
        "EFFICIENCY RATIOS",
        "COVERAGE RATIOS",
    ]
    ratio_labels = labels[labels.index("LIQUIDITY RATIOS"):]
    assert [label for label in ratio_labels if label and not label.endswith("RATIOS")] == [
        "Current Ratio",
        "Quick Ratio",
        "Cash Ratio",
        "Debt-to-Equity",
        "Debt-to-Assets",
        "Interest Coverage",
        "Return on Equity (ROE)",
        "Return on Assets (ROA)",
        "Net Profit Margin",
        "Gross Profit Margin",
        "Asset Turnover",
        "Inventory Turnover",
        "Receivables Turnover",
        "Times Interest Earned",
        "Debt Service Coverage",
    ]
    assert values["Return on Equity (ROE)"] == 4.0
    assert values["Cash Ratio"] == 0.5
    assert values["Debt Service Coverage"] == 3.2


def test_render_report_percent_format(sample_record: FinancialRecord) -> None:
    """Profitability ratios display with a percent suffix, other ratios do not."""
    sheet = _render(sample_record)["Summary"]
    formats = {
        row[0].value: row[1].number_format
        for row in sheet.iter_rows(max_col=2)
        if row[0].value is not None
    }

    assert formats["Return on Equity (ROE)"] == '0.00"%"'
    assert formats["Gross Profit Margin"] == '0.00"%"'
    assert formats["Current Ratio"] == "0.00"


def test_render_report_statement_tables(sample_record: FinancialRecord) -> None:
    """Statement sheets should list items in extraction order under a title."""
    workbook = _render(sample_record)

    income = _rows(workbook, "Income Statement")
    assert income[0] == ("Income Statement", None)
    assert income[1] == ("Item", "Amount")
    assert income[2:] == [
        ("Revenue", 800),
        ("CostOfGoodsSold", 350),
        ("GrossProfit", 400),
        ("OperatingIncome", 120),
        ("InterestExpense", 40),
        ("NetIncome", 80),
    ]
    cash_flow = _rows(workbook, "Cash Flow")
    assert cash_flow[0] == ("Cash Flow Statement", None)
    assert cash_flow[2:] == [("OperatingCashFlow", 90), ("CapitalExpenditures", -30)]


def test_render_report_numbers_notes(sample_record: FinancialRecord) -> None:
    rows = _rows(_render(sample_record), "Notes")

    assert rows[0] == ("Notes and Disclosures", None)
    assert rows[1] == ("Note", "Description")
    assert rows[2:] == [
        ("Note 1", "Revenue recognised on delivery."),
        ("Note 2", "Debt covenant waived in Q3."),
    ]


def test_render_report_empty_record() -> None:
    """An empty record still renders every sheet with headers only."""
    workbook = _render(FinancialRecord())

    assert _rows(workbook, "Balance Sheet") == [("Balance Sheet", None), ("Item", "Amount")]
    assert _rows(workbook, "Notes") == [("Notes and Disclosures", None), ("Note", "Description")]
    values = {label: value for label, value in _rows(workbook, "Summary") if label is not None}
    assert values["Current Ratio"] == 0


def test_report_filename() -> None:
    assert report_filename("Acme Ltd", ANALYSIS_DATE) == "2024_03_31_Acme Ltd.xlsx"
    assert report_filename("  Foo/Bar  ", ANALYSIS_DATE) == "2024_03_31_Foo_Bar.xlsx"


def test_render_report_strips_control_characters() -> None:
    """Characters worksheets cannot store should be dropped from every text cell."""
    record = FinancialRecord.model_validate(
        {"incomeStatement": {"Net\x0bIncome": 5}, "notes": ["Page break\x0cnext note"]}
    )
    content = render_report(record, compute_ratios(record), "Acme\x0c Ltd", ANALYSIS_DATE)
    workbook = load_workbook(BytesIO(content))

    values = {label: value for label, value in _rows(workbook, "Summary") if label is not None}
    assert values["Company Name"] == "Acme Ltd"
    assert _rows(workbook, "Income Statement")[2:] == [("NetIncome", 5)]
    assert _rows(workbook, "Notes")[2:] == [("Note 1", "Page breaknext note")]
    assert report_filename("Acme\x0b", ANALYSIS_DATE) == "2024_03_31_Acme.xlsx"
