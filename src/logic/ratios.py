from __future__ import annotations

"""Compute credit-underwriting ratios from extracted statement figures."""

import logging
from functools import partial
from math import isfinite
from typing import Mapping

from src.domain.schemas import (
    CoverageRatios,
    EfficiencyRatios,
    FinancialRecord,
    LeverageRatios,
    LiquidityRatios,
    ProfitabilityRatios,
    RatioReport,
)

logger = logging.getLogger(__name__)

ASSUMED_DEBT_INTEREST_RATE = 0.1
PERCENT = 100.0


def safe_divide(numerator: float, denominator: float) -> float:
    """Divide two figures, returning zero for unusable operands.

    Args:
        numerator (float): Dividend.
        denominator (float): Divisor.

    Returns:
        float: The quotient, or 0.0 when the divisor is zero, either operand
        is NaN or infinite, or the quotient overflows.
    """
    if denominator == 0 or not isfinite(numerator) or not isfinite(denominator):
        return 0.0
    quotient = numerator / denominator
    return quotient if isfinite(quotient) else 0.0


def _percent(ratio: float) -> float:
    """Scale a ratio to percent, reporting an overflowed product as 0.0."""
    scaled = ratio * PERCENT
    return scaled if isfinite(scaled) else 0.0


def line_item(mapping: Mapping[str, float], key: str) -> float:
    """Look up a statement line item, treating absent keys as zero.

    Args:
        mapping (Mapping[str, float]): Statement figures by line-item name.
        key (str): Line-item name.

    Returns:
        float: The figure, or 0.0 when missing.
    """
    value = mapping.get(key)
    return 0.0 if value is None else float(value)


def resolve_equity(balance_sheet: Mapping[str, float]) -> float:
    """Return TotalEquity when nonzero, otherwise ShareholdersEquity.

    Args:
        balance_sheet (Mapping[str, float]): Balance sheet figures.

    Returns:
        float: Equity figure used as a denominator (0.0 when neither is present).
    """
    total_equity = line_item(balance_sheet, "TotalEquity")
    if total_equity:
        return total_equity
    return line_item(balance_sheet, "ShareholdersEquity")


def compute_ratios(
    record: FinancialRecord,
    assumed_debt_interest_rate: float = ASSUMED_DEBT_INTEREST_RATE,
) -> RatioReport:
    """Compute liquidity, leverage, profitability, efficiency and coverage ratios.

    Args:
        record (FinancialRecord): Extracted income statement, balance sheet and cash flow.
        assumed_debt_interest_rate (float): Rate applied to total debt when
            estimating debt service.

    Returns:
        RatioReport: Every ratio, with unusable divisions reported as 0.0.
    """
    income = partial(line_item, record.income_statement)
    balance = partial(line_item, record.balance_sheet)

    current_assets = balance("TotalCurrentAssets")
    current_liabilities = balance("AccountsPayable") + balance("ShortTermDebt")
    inventory = balance("Inventory")
    total_debt = balance("ShortTermDebt") + balance("LongTermDebt")
    total_assets = balance("TotalAssets")
    equity = resolve_equity(record.balance_sheet)

    revenue = income("Revenue")
    net_income = income("NetIncome")
    operating_income = income("OperatingIncome")
    interest_expense = income("InterestExpense")
    # Interest coverage and times interest earned share the same definition.
    interest_cover = safe_divide(operating_income, interest_expense)

    report = RatioReport(
        liquidity=LiquidityRatios(
            current_ratio=safe_divide(current_assets, current_liabilities),
            quick_ratio=safe_divide(current_assets - inventory, current_liabilities),
            cash_ratio=safe_divide(balance("Cash"), current_liabilities),
        ),
        leverage=LeverageRatios(
            debt_to_equity=safe_divide(total_debt, equity),
            debt_to_assets=safe_divide(total_debt, total_assets),
            interest_coverage=interest_cover,
        ),
        profitability=ProfitabilityRatios(
            roe=_percent(safe_divide(net_income, equity)),
            roa=_percent(safe_divide(net_income, total_assets)),
            net_profit_margin=_percent(safe_divide(net_income, revenue)),
            gross_profit_margin=_percent(safe_divide(income("GrossProfit"), revenue)),
        ),
        efficiency=EfficiencyRatios(
            asset_turnover=safe_divide(revenue, total_assets),
            inventory_turnover=safe_divide(income("CostOfGoodsSold"), inventory),
            receivables_turnover=safe_divide(revenue, balance("AccountsReceivable")),
        ),
        coverage=CoverageRatios(
            times_interest_earned=interest_cover,
            debt_service_coverage=safe_divide(
                operating_income + interest_expense,
                interest_expense + total_debt * assumed_debt_interest_rate,
            ),
        ),
    )
    logger.debug("Computed ratios: %s", report.model_dump())
    return report
