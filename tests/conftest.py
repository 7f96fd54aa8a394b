from __future__ import annotations

from pathlib import Path
import sys
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

import src.config  # noqa: E402
from src.domain.schemas import FinancialRecord  # noqa: E402


@pytest.fixture(autouse=True)
def default_config(monkeypatch: pytest.MonkeyPatch) -> dict[str, Any]:
    """Isolate tests from the repository config file by starting with no overrides."""
    config: dict[str, Any] = {}
    monkeypatch.setattr(src.config, "_CONFIG_CACHE", config)
    return config


@pytest.fixture
def sample_record() -> FinancialRecord:
    """A small record with every line item the ratio engine reads."""
    return FinancialRecord.model_validate(
        {
            "incomeStatement": {
                "Revenue": 800.0,
                "CostOfGoodsSold": 350.0,
                "GrossProfit": 400.0,
                "OperatingIncome": 120.0,
                "InterestExpense": 40.0,
                "NetIncome": 80.0,
            },
            "balanceSheet": {
                "Cash": 150.0,
                "AccountsReceivable": 100.0,
                "Inventory": 300.0,
                "TotalCurrentAssets": 1000.0,
                "TotalAssets": 5000.0,
                "AccountsPayable": 200.0,
                "ShortTermDebt": 100.0,
                "TotalEquity": 2000.0,
            },
            "cashFlow": {
                "OperatingCashFlow": 90.0,
                "CapitalExpenditures": -30.0,
            },
            "notes": ["Revenue recognised on delivery.", "Debt covenant waived in Q3."],
        }
    )


class StubExtractor:
    """Extractor double that records PDF payloads and returns a fixed record."""

    def __init__(self, record: FinancialRecord) -> None:
        self.record = record
        self.calls: list[bytes] = []

    def __call__(self, pdf_bytes: bytes) -> FinancialRecord:
        self.calls.append(pdf_bytes)
        return self.record


@pytest.fixture
def stub_extractor(sample_record: FinancialRecord) -> StubExtractor:
    return StubExtractor(sample_record)
