from __future__ import annotations

"""Configuration loader for the application."""

from pathlib import Path
from typing import Any

import tomllib


DEFAULT_ASSUMED_DEBT_INTEREST_RATE = 0.1
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024
DEFAULT_MAX_COMPANY_NAME_LENGTH = 100
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_GEMINI_TIMEOUT_SECONDS = 120.0

_CONFIG_CACHE: dict[str, Any] | None = None


def load_config() -> dict[str, Any]:
    """Load configuration from the repository root config file.

    Args:
        None

    Returns:
        dict[str, Any]: Parsed configuration values.
    """
    global _CONFIG_CACHE
    if _CONFIG_CACHE is not None:
        return _CONFIG_CACHE
    config_path = Path(__file__).resolve().parents[1] / "config.toml"
    _CONFIG_CACHE = (
        tomllib.loads(config_path.read_text(encoding="utf-8")) if config_path.exists() else {}
    )
    return _CONFIG_CACHE


def get_assumed_debt_interest_rate() -> float:
    """Return the average interest rate assumed on total debt for DSCR.

    Args:
        None

    Returns:
        float: Annual rate applied to short- plus long-term debt.
    """
    ratios = _section("ratios")
    return _coerce_float(
        ratios.get("assumed_debt_interest_rate"),
        DEFAULT_ASSUMED_DEBT_INTEREST_RATE,
    )


def get_upload_limits() -> tuple[int, int]:
    """Return the maximum upload size and company name length.

    Args:
        None

    Returns:
        tuple[int, int]: Maximum file size in bytes and name length in characters.
    """
    upload = _section("upload")
    max_bytes = _coerce_int(upload.get("max_bytes"), DEFAULT_MAX_UPLOAD_BYTES)
    max_name = _coerce_int(upload.get("max_company_name_length"), DEFAULT_MAX_COMPANY_NAME_LENGTH)
    return max_bytes, max_name


def get_gemini_settings() -> tuple[str, str, float]:
    """Return the Gemini model name, API base URL and request timeout.

    Args:
        None

    Returns:
        tuple[str, str, float]: Model, base URL and timeout in seconds.
    """
    gemini = _section("gemini")
    model = _coerce_str(gemini.get("model"), DEFAULT_GEMINI_MODEL)
    api_url = _coerce_str(gemini.get("api_url"), DEFAULT_GEMINI_API_URL).rstrip("/")
    timeout = _coerce_float(gemini.get("timeout_seconds"), DEFAULT_GEMINI_TIMEOUT_SECONDS)
    return model, api_url, timeout


def _section(name: str) -> dict[str, Any]:
    """Return a named config table, or an empty dict when it is missing."""
    config = load_config()
    section = config.get(name, {}) if isinstance(config, dict) else {}
    return section if isinstance(section, dict) else {}


def _coerce_float(value: object, default: float) -> float:
    """Coerce a value to float with a default fallback.

    Args:
        value (object): Raw value to convert.
        default (float): Default to return on error.

    Returns:
        float: Parsed float or default.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return default
    return default


def _coerce_int(value: object, default: int) -> int:
    """Coerce a value to int with a default fallback."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return default
    return default


def _coerce_str(value: object, default: str) -> str:
    """Return a non-empty stripped string or the default."""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default
