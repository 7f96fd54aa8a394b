from __future__ import annotations

"""Validation helpers for uploaded statements."""

import re
from pathlib import PurePath

from src.config import DEFAULT_MAX_COMPANY_NAME_LENGTH, DEFAULT_MAX_UPLOAD_BYTES

PDF_MEDIA_TYPE = "application/pdf"

_CONTROL_CHARACTERS = re.compile(r"[\x00-\x1f\x7f]")


def validate_upload(
    filename: str | None,
    content_type: str | None,
    size: int,
    company_name: str | None,
    max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    max_company_name_length: int = DEFAULT_MAX_COMPANY_NAME_LENGTH,
) -> list[str]:
    """Validate an uploaded statement before any processing happens.

    Args:
        filename (str | None): Original file name, or None when no file was sent.
        content_type (str | None): Declared MIME type; None when the caller has none.
        size (int): File size in bytes.
        company_name (str | None): Company name as entered.
        max_bytes (int): Largest accepted file size.
        max_company_name_length (int): Longest accepted company name.

    Returns:
        list[str]: Human-readable errors, empty when the upload is acceptable.
    """
    if filename is None:
        return ["No file uploaded"]
    name = normalize_company_name(company_name)
    errors = [
        *([] if name else ["Company name is required"]),
        *(
            []
            if len(name) <= max_company_name_length
            else [f"Company name must be at most {max_company_name_length} characters"]
        ),
        *([] if size <= max_bytes else [f"File size must be less than {_megabytes(max_bytes)}MB"]),
        *([] if _is_pdf(filename, content_type) else ["Only PDF files are allowed"]),
    ]
    return errors


def normalize_company_name(company_name: str | None) -> str:
    """Drop control characters and trim surrounding whitespace from a company name."""
    return _CONTROL_CHARACTERS.sub("", company_name or "").strip()


def _is_pdf(filename: str, content_type: str | None) -> bool:
    """Check the declared MIME type, falling back to the file suffix.

    Args:
        filename (str): Original file name.
        content_type (str | None): Declared MIME type.

    Returns:
        bool: True when the upload is a PDF.
    """
    if content_type is not None:
        return content_type == PDF_MEDIA_TYPE
    return PurePath(filename).suffix.lower() == ".pdf"


def _megabytes(size: int) -> int:
    return size // (1024 * 1024)
