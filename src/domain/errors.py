from __future__ import annotations

"""Error categories surfaced by the analysis pipeline."""


class AnalysisError(Exception):
    """Base class for failures that abort a single analysis request."""


class InputValidationError(AnalysisError, ValueError):
    """The upload was rejected before any processing."""


class ExtractionError(AnalysisError, RuntimeError):
    """The document could not be processed by the extraction model."""


class ResponseParseError(ExtractionError):
    """The model answered, but no statement JSON could be parsed from the answer."""


class ConfigurationError(AnalysisError, RuntimeError):
    """Credentials or settings required by the extraction model are missing."""
