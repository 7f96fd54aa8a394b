from __future__ import annotations

"""HTTP endpoint that turns an uploaded statement into a ratio workbook."""

import logging
import re
from urllib.parse import quote

from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from src.domain.errors import (
    AnalysisError,
    ConfigurationError,
    ExtractionError,
    InputValidationError,
    ResponseParseError,
)
from src.io.reporting import XLSX_MEDIA_TYPE
from src import pipeline


logger = logging.getLogger(__name__)

CONFIGURATION_MESSAGE = "Gemini API key is not configured. Please check your environment variables."
PDF_MESSAGE = (
    "Failed to process PDF. The file may be corrupted, password-protected, "
    "or contain no readable text."
)
PARSE_MESSAGE = (
    "Failed to extract financial data from PDF. "
    "The document may not contain standard financial statements."
)
GENERIC_MESSAGE = "An error occurred during analysis"

_CONTROL_CHARACTERS = re.compile(r"[\x00-\x1f\x7f]")

app = FastAPI(title="Credit Ratio Report API", version="0.1.0")


@app.exception_handler(AnalysisError)
async def analysis_error_handler(request: Request, exc: AnalysisError) -> JSONResponse:
    """Map pipeline failures to user-facing error categories."""
    status_code, message = error_response(exc)
    if status_code >= 500:
        logger.error("Analysis failed for %s: %s", request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Report failures outside the known categories with the generic message."""
    logger.exception("Unexpected failure for %s", request.url.path)
    return JSONResponse(status_code=500, content={"error": GENERIC_MESSAGE})


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/api/analyze")
def analyze(
    file: UploadFile | None = File(None),
    company_name: str | None = Form(None, alias="companyName"),
) -> Response:
    """Analyze an uploaded PDF and return the workbook as an attachment.

    Args:
        file (UploadFile | None): Financial statement PDF.
        company_name (str | None): Company name for the report.

    Returns:
        Response: The .xlsx bytes with a download filename.
    """
    content = file.file.read() if file is not None else None
    logger.info(
        "Received upload %s (%s, %d bytes)",
        file.filename if file is not None else None,
        file.content_type if file is not None else None,
        len(content or b""),
    )
    result = pipeline.run_analysis(
        pdf_bytes=content,
        company_name=company_name,
        filename=(file.filename or "upload") if file is not None else None,
        content_type=file.content_type if file is not None else None,
    )
    return Response(
        content=result.content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": content_disposition(result.filename)},
    )


def error_response(exc: AnalysisError) -> tuple[int, str]:
    """Return the HTTP status and message for a pipeline failure.

    Args:
        exc (AnalysisError): Raised pipeline error.

    Returns:
        tuple[int, str]: Status code and user-facing message.
    """
    if isinstance(exc, InputValidationError):
        return 400, str(exc)
    if isinstance(exc, ConfigurationError):
        return 500, CONFIGURATION_MESSAGE
    if isinstance(exc, ResponseParseError):
        return 500, PARSE_MESSAGE
    if isinstance(exc, ExtractionError):
        return 500, PDF_MESSAGE
    return 500, str(exc) or GENERIC_MESSAGE


def content_disposition(filename: str) -> str:
    """Build an attachment header, adding an RFC 5987 name for non-ASCII filenames."""
    filename = _CONTROL_CHARACTERS.sub("", filename).replace('"', "'")
    if filename.isascii():
        return f'attachment; filename="{filename}"'
    fallback = filename.encode("ascii", "replace").decode("ascii").replace("?", "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"
