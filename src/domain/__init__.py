from .errors import (
    AnalysisError,
    ConfigurationError,
    ExtractionError,
    InputValidationError,
    ResponseParseError,
)
from .schemas import (
    CoverageRatios,
    EfficiencyRatios,
    FinancialRecord,
    LeverageRatios,
    LiquidityRatios,
    ProfitabilityRatios,
    RatioReport,
)

__all__ = [
    "AnalysisError",
    "ConfigurationError",
    "ExtractionError",
    "InputValidationError",
    "ResponseParseError",
    "CoverageRatios",
    "EfficiencyRatios",
    "FinancialRecord",
    "LeverageRatios",
    "LiquidityRatios",
    "ProfitabilityRatios",
    "RatioReport",
]
