from __future__ import annotations

"""Extract statement figures from a PDF with the Gemini API (network I/O happens here)."""

import base64
import json
import logging
import os
import re
from typing import Any, Mapping

import requests  # type: ignore[import-untyped]
from more_itertools import first
from pydantic import ValidationError

from src.config import get_gemini_settings
from src.domain.errors import ConfigurationError, ExtractionError, ResponseParseError
from src.domain.schemas import FinancialRecord


logger = logging.getLogger(__name__)

API_KEY_ENV = "GEMINI_API_KEY"
PDF_MEDIA_TYPE = "application/pdf"

_JSON_SPAN = re.compile(r"\{[\s\S]*\}")

EXTRACTION_PROMPT = """
Analyze this financial statement PDF and extract all key financial data.

Please provide a comprehensive analysis including:

1. Income Statement data (Revenue, Cost of Goods Sold, Gross Profit, Operating Expenses, Operating Income, Interest Expense, Net Income, etc.)
2. Balance Sheet data (Cash, Accounts Receivable, Inventory, Total Current Assets, Property Plant & Equipment, Total Assets, Accounts Payable, Short-term Debt, Long-term Debt, Total Liabilities, Shareholders' Equity, etc.)
3. Cash Flow Statement data (Operating Cash Flow, Investing Cash Flow, Financing Cash Flow, Net Cash Flow, etc.)
4. Any important notes or disclosures

Return the data in the following JSON format:
{
  "incomeStatement": {
    "Revenue": number,
    "CostOfGoodsSold": number,
    "GrossProfit": number,
    "OperatingExpenses": number,
    "OperatingIncome": number,
    "InterestExpense": number,
    "NetIncome": number,
    "EBITDA": number
  },
  "balanceSheet": {
    "Cash": number,
    "AccountsReceivable": number,
    "Inventory": number,
    "TotalCurrentAssets": number,
    "PropertyPlantEquipment": number,
    "TotalAssets": number,
    "AccountsPayable": number,
    "ShortTermDebt": number,
    "LongTermDebt": number,
    "TotalLiabilities": number,
    "ShareholdersEquity": number,
    "TotalEquity": number
  },
  "cashFlow": {
    "OperatingCashFlow": number,
    "InvestingCashFlow": number,
    "FinancingCashFlow": number,
    "NetCashFlow": number,
    "CapitalExpenditures": number
  },
  "notes": ["note1", "note2", "note3"]
}

Important:
- Extract actual numerical values, not percentages
- If a value is not available, use 0
- Ensure all numbers are in the same currency unit
- Include any significant notes or disclosures in the notes array
- Be thorough in extracting all available financial data
""".strip()


def extract_financial_record(
    pdf_bytes: bytes,
    api_key: str | None = None,
    model: str | None = None,
    timeout: float | None = None,
) -> FinancialRecord:
    """Send a PDF to Gemini and parse the statement figures from its answer.

    Args:
        pdf_bytes (bytes): Raw PDF document.
        api_key (str | None): Gemini API key; read from GEMINI_API_KEY when omitted.
        model (str | None): Model name; configured default when omitted.
        timeout (float | None): Request timeout in seconds; configured default when omitted.

    Returns:
        FinancialRecord: Extracted income statement, balance sheet, cash flow and notes.
    """
    api_key = api_key or os.getenv(API_KEY_ENV)
    if not api_key:
        raise ConfigurationError(f"{API_KEY_ENV} is not set")
    default_model, api_url, default_timeout = get_gemini_settings()
    model = model or default_model
    timeout = timeout if timeout is not None else default_timeout
    logger.info("Requesting statement extraction from %s (%d bytes)", model, len(pdf_bytes))
    payload = _generate_content(api_url, model, api_key, pdf_bytes, timeout)
    text = _response_text(payload)
    logger.debug("Gemini response length: %d characters", len(text))
    record = parse_financial_record(text)
    logger.info(
        "Extracted %d income, %d balance sheet, %d cash flow items and %d notes",
        len(record.income_statement),
        len(record.balance_sheet),
        len(record.cash_flow),
        len(record.notes),
    )
    return record


def parse_financial_record(text: str) -> FinancialRecord:
    """Parse the statement JSON embedded in a model answer.

    Args:
        text (str): Free-form model answer containing a JSON object.

    Returns:
        FinancialRecord: Validated statement figures.
    """
    span = find_json_object(text)
    if span is None:
        raise ResponseParseError("Could not extract JSON from Gemini response")
    try:
        data = json.loads(span)
    except json.JSONDecodeError as exc:
        raise ResponseParseError(f"Gemini response is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ResponseParseError("Gemini JSON response is not an object")
    try:
        return FinancialRecord.model_validate(data)
    except ValidationError as exc:
        raise ResponseParseError(
            f"Gemini JSON does not match the financial statement shape: {exc.error_count()} errors"
        ) from exc


def find_json_object(text: str) -> str | None:
    """Return the span from the first '{' to the last '}', or None when absent."""
    match = _JSON_SPAN.search(text)
    return match.group(0) if match else None


def _generate_content(
    api_url: str,
    model: str,
    api_key: str,
    pdf_bytes: bytes,
    timeout: float,
) -> Mapping[str, Any]:
    """Call the generateContent endpoint with the prompt and inline PDF.

    Args:
        api_url (str): Gemini API base URL.
        model (str): Model name.
        api_key (str): Gemini API key.
        pdf_bytes (bytes): Raw PDF document.
        timeout (float): Request timeout in seconds.

    Returns:
        Mapping[str, Any]: Decoded JSON response.
    """
    body = {
        "contents": [
            {
                "parts": [
                    {"text": EXTRACTION_PROMPT},
                    {
                        "inline_data": {
                            "mime_type": PDF_MEDIA_TYPE,
                            "data": base64.b64encode(pdf_bytes).decode("ascii"),
                        }
                    },
                ]
            }
        ]
    }
    try:
        response = requests.post(
            f"{api_url}/models/{model}:generateContent",
            headers={"x-goog-api-key": api_key},
            json=body,
            timeout=timeout,
        )
        response.raise_for_status()
    except requests.HTTPError as exc:
        status = exc.response.status_code if exc.response is not None else None
        message = _error_message(exc.response)
        logger.info("Gemini request failed with status %s: %s", status, message)
        if status in {400, 401, 403} and "api key" in message.lower():
            raise ConfigurationError(f"Gemini rejected the API key: {message}") from exc
        raise ExtractionError(f"Failed to analyze PDF: {message}") from exc
    except requests.RequestException as exc:
        logger.info("Gemini request failed: %s", exc)
        raise ExtractionError(f"Failed to analyze PDF: {exc}") from exc
    try:
        payload = response.json()
    except ValueError as exc:
        raise ResponseParseError(f"Failed to decode Gemini JSON envelope: {exc}") from exc
    if not isinstance(payload, dict):
        raise ResponseParseError("Gemini response did not return a JSON object")
    return payload


def _response_text(payload: Mapping[str, Any]) -> str:
    """Join the text parts of the first candidate in a generateContent response.

    Args:
        payload (Mapping[str, Any]): Decoded response body.

    Returns:
        str: Concatenated answer text.
    """
    candidates = payload.get("candidates")
    candidate = first(candidates, None) if isinstance(candidates, list) else None
    if not isinstance(candidate, Mapping):
        feedback = payload.get("promptFeedback")
        raise ExtractionError(f"Failed to analyze PDF: Gemini returned no candidates ({feedback})")
    content = candidate.get("content")
    parts = content.get("parts") if isinstance(content, Mapping) else None
    texts = [
        part["text"]
        for part in (parts if isinstance(parts, list) else [])
        if isinstance(part, Mapping) and isinstance(part.get("text"), str)
    ]
    if not texts:
        raise ResponseParseError("Gemini response contained no text")
    return "".join(texts)


def _error_message(response: requests.Response | None) -> str:
    """Pull the error message from a Gemini error body, falling back to the raw text."""
    if response is None:
        return "no response"
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason or "unknown error"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    return response.text or "unknown error"
