from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

import uvicorn

from src import pipeline
from src.domain.errors import AnalysisError


logger = logging.getLogger(__name__)

COMMANDS = {"analyze", "serve"}


def _parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse CLI arguments for the analyze and serve commands."""
    parser = argparse.ArgumentParser(description="Credit ratio report runner")
    subparsers = parser.add_subparsers(dest="command", required=True)
    analyze = subparsers.add_parser("analyze", help="Extract a statement PDF and write the ratio workbook.")
    analyze.add_argument("pdf", type=Path, help="Financial statement PDF")
    analyze.add_argument("--company", required=True, help="Company name shown in the report")
    analyze.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for the workbook (defaults to the run's results directory)",
    )
    serve = subparsers.add_parser("serve", help="Run the HTTP analysis endpoint.")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    if argv and argv[0] not in COMMANDS and not argv[0].startswith("-"):
        argv = ["analyze", *argv]
    return parser.parse_args(argv)


def run_analyze_command(pdf_path: Path, company_name: str, output_dir: Path) -> Path:
    """Analyze a PDF on disk and write the workbook next to the run log.

    Args:
        pdf_path (Path): Statement PDF to analyze.
        company_name (str): Company name for the report.
        output_dir (Path): Directory receiving the workbook.

    Returns:
        Path: Location of the written workbook.
    """
    if not pdf_path.is_file():
        raise FileNotFoundError(f"PDF not found: {pdf_path}")
    logger.info("Reading statement from %s", pdf_path)
    result = pipeline.run_analysis(
        pdf_bytes=pdf_path.read_bytes(),
        company_name=company_name,
        filename=pdf_path.name,
    )
    output_dir.mkdir(parents=True, exist_ok=True)
    report_path = output_dir / result.filename
    report_path.write_bytes(result.content)
    logger.info("Wrote report to %s", report_path)
    return report_path


def main(args: argparse.Namespace, results_dir: Path) -> int:
    """Dispatch a parsed command.

    Args:
        args (argparse.Namespace): Parsed CLI arguments.
        results_dir (Path): Output directory for this run.

    Returns:
        int: Process exit status.
    """
    if args.command == "serve":
        logger.info("Serving analysis API on %s:%d", args.host, args.port)
        uvicorn.run("src.io.api:app", host=args.host, port=args.port)
        return 0
    try:
        run_analyze_command(args.pdf, args.company, args.output_dir or results_dir)
    except (AnalysisError, FileNotFoundError) as exc:
        logger.error("Analysis failed: %s", exc)
        return 1
    except Exception:
        logger.exception("Analysis failed unexpectedly")
        return 1
    return 0


def _ensure_results_root() -> tuple[Path, bool]:
    """Ensure the root results directory exists.

    Args:
        None

    Returns:
        tuple[Path, bool]: Results path and whether it was created.
    """
    results_root = Path(__file__).resolve().parent / "results"
    created = not results_root.exists()
    results_root.mkdir(parents=True, exist_ok=True)
    return results_root, created


def _build_results_dir(results_root: Path) -> Path:
    """Create a timestamped results directory for the current run.

    Args:
        results_root (Path): Base directory for run outputs.

    Returns:
        Path: Directory path for this run's outputs.
    """
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    run_dir = results_root / timestamp
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


if __name__ == "__main__":
    args = _parse_args(sys.argv[1:])
    results_root, results_created = _ensure_results_root()
    results_dir = _build_results_dir(results_root)
    log_path = results_dir / "run.log"
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)

    file_handler = logging.FileHandler(log_path)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)

    logging.basicConfig(level=logging.DEBUG, handlers=[console_handler, file_handler])
    if results_created:
        logger.info("Created results directory: %s", results_root)
    logger.info("Run output directory: %s", results_dir)
    sys.exit(main(args, results_dir))
