from __future__ import annotations

"""Run one statement through validation, extraction, ratios and reporting."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable

from src.config import get_assumed_debt_interest_rate, get_upload_limits
from src.domain.errors import InputValidationError
from src.domain.schemas import FinancialRecord, RatioReport
from src.io.extraction import extract_financial_record
from src.io.reporting import render_report, report_filename
from src.logic.ratios import compute_ratios
from src.logic.validation import normalize_company_name, validate_upload


logger = logging.getLogger(__name__)

Extractor = Callable[[bytes], FinancialRecord]


@dataclass(frozen=True)
class AnalysisResult:
    """Container for a rendered report and the figures behind it."""

    filename: str
    content: bytes
    record: FinancialRecord
    ratios: RatioReport


def run_analysis(
    pdf_bytes: bytes | None,
    company_name: str | None,
    filename: str | None = "statement.pdf",
    content_type: str | None = None,
    extractor: Extractor | None = None,
    analysis_date: date | None = None,
) -> AnalysisResult:
    """Analyze a financial statement PDF and render the ratio workbook.

    Args:
        pdf_bytes (bytes | None): Uploaded document, or None when nothing was uploaded.
        company_name (str | None): Company name as entered.
        filename (str | None): Original file name, used for the PDF suffix check.
        content_type (str | None): Declared MIME type, when the caller has one.
        extractor (Extractor | None): Turns PDF bytes into a FinancialRecord;
            the Gemini adapter when omitted.
        analysis_date (date | None): Report date; today when omitted.

    Returns:
        AnalysisResult: Workbook bytes, filename, extracted record and ratios.
    """
    max_bytes, max_name_length = get_upload_limits()
    errors = validate_upload(
        filename=filename if pdf_bytes is not None else None,
        content_type=content_type,
        size=len(pdf_bytes or b""),
        company_name=company_name,
        max_bytes=max_bytes,
        max_company_name_length=max_name_length,
    )
    if errors:
        logger.info("Rejected upload: %s", "; ".join(errors))
        raise InputValidationError(errors[0])
    name = normalize_company_name(company_name)
    analysis_date = analysis_date or date.today()
    logger.info("Analyzing statement for %s", name)
    # Extraction failures propagate unchanged to the caller.
    record = (extractor or extract_financial_record)(pdf_bytes or b"")
    ratios = compute_ratios(record, assumed_debt_interest_rate=get_assumed_debt_interest_rate())
    content = render_report(record, ratios, name, analysis_date)
    result = AnalysisResult(
        filename=report_filename(name, analysis_date),
        content=content,
        record=record,
        ratios=ratios,
    )
    logger.info("Analysis complete for %s: %s", name, result.filename)
    return result
