from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class FinancialRecord(BaseModel):
    """Statement figures extracted from a single financial document."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    income_statement: dict[str, float] = Field(default_factory=dict, alias="incomeStatement")
    balance_sheet: dict[str, float] = Field(default_factory=dict, alias="balanceSheet")
    cash_flow: dict[str, float] = Field(default_factory=dict, alias="cashFlow")
    notes: tuple[str, ...] = ()

    @field_validator("income_statement", "balance_sheet", "cash_flow", mode="before")
    @classmethod
    def _drop_null_items(cls, value: Any) -> Any:
        """Treat null line items as absent so they read as zero downstream.

        Args:
            value (Any): Raw statement mapping.

        Returns:
            Any: Mapping without null entries, or the raw value for pydantic to reject.
        """
        if value is None:
            return {}
        if isinstance(value, Mapping):
            return {key: item for key, item in value.items() if item is not None}
        return value

    @field_validator("notes", mode="before")
    @classmethod
    def _default_notes(cls, value: Any) -> Any:
        return () if value is None else value


class _RatioCategory(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class LiquidityRatios(_RatioCategory):
    current_ratio: float
    quick_ratio: float
    cash_ratio: float


class LeverageRatios(_RatioCategory):
    debt_to_equity: float
    debt_to_assets: float
    interest_coverage: float


class ProfitabilityRatios(_RatioCategory):
    roe: float
    roa: float
    net_profit_margin: float
    gross_profit_margin: float


class EfficiencyRatios(_RatioCategory):
    asset_turnover: float
    inventory_turnover: float
    receivables_turnover: float


class CoverageRatios(_RatioCategory):
    times_interest_earned: float
    debt_service_coverage: float


class RatioReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    liquidity: LiquidityRatios
    leverage: LeverageRatios
    profitability: ProfitabilityRatios
    efficiency: EfficiencyRatios
    coverage: CoverageRatios
