"""Command-line interface for OCR text post-processing and CSV export.

Provides subcommands for ending-balance detection and subcategory
inference on OCR text files, and for processing folders of OCR text
dumps into a single CSV.
"""

import argparse
import csv
import json
import sys
from pathlib import Path

from src.api.schemas import EndingBalanceResponse, SubcategoryResponse
from src.balance.selector import detect_ending_balance
from src.classification.subcategory import infer_subcategory_from_multiple_texts
from src.ocr.scanner import analyze_document, format_amount, format_date
from src.utils.config import AppConfig, load_config
from src.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_SUPPORTED_EXTENSIONS = ("*.txt",)
_COLUMNS = [
    "filename",
    "status",
    "ending_balance",
    "ending_balance_value",
    "ending_date",
    "balance_confidence",
    "selection_reason",
    "subcategory",
    "subcategory_confidence",
    "auto_populate",
    "error",
]


def _find_documents(input_dir: Path) -> list[Path]:
    """Find all OCR text dumps in a directory.

    Args:
        input_dir: Directory to scan.

    Returns:
        Sorted list of text file paths.
    """
    files: list[Path] = []
    for ext in _SUPPORTED_EXTENSIONS:
        files.extend(input_dir.glob(ext))
        files.extend(input_dir.glob(ext.upper()))
    return sorted(set(files))


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


def process_folder(
    input_dir: Path,
    output_csv: Path,
    config: AppConfig | None = None,
    verbose: bool = False,
) -> dict[str, int]:
    """Analyze every OCR text dump in a folder and export results to CSV.

    Args:
        input_dir: Directory containing ``.txt`` OCR outputs.
        output_csv: Path for the output CSV file.
        config: Application configuration. Loaded from disk if ``None``.
        verbose: Whether to print per-file progress.

    Returns:
        Summary dict with total, successful, and failed counts.
    """
    config = config or load_config()

    files = _find_documents(input_dir)
    if not files:
        logger.warning("No OCR text files found in %s", input_dir)
        return {"total": 0, "successful": 0, "failed": 0}

    logger.info("Found %d OCR text files to process", len(files))

    results: list[dict[str, object]] = []
    successful = 0
    failed = 0

    for i, file_path in enumerate(files, 1):
        if verbose:
            print(f"Processing [{i}/{len(files)}]: {file_path.name}")

        try:
            results.append(_process_single_file(file_path, config))
            successful += 1
        except (OSError, ValueError) as exc:
            logger.error("Failed to process %s: %s", file_path.name, exc)
            results.append(
                {
                    "filename": file_path.name,
                    "status": "failed",
                    "error": str(exc),
                }
            )
            failed += 1

    _write_csv(results, output_csv)
    logger.info("Results written to %s", output_csv)

    summary = {"total": len(files), "successful": successful, "failed": failed}
    _print_summary(summary, output_csv)
    return summary


def _process_single_file(file_path: Path, config: AppConfig) -> dict[str, object]:
    """Run both engine pipelines on one OCR text file.

    Form feeds in the dump are treated as page breaks.

    Args:
        file_path: Path to the OCR text file.
        config: Application configuration.

    Returns:
        One CSV row as a dictionary.
    """
    pages = _read_text(file_path).split("\f")
    analysis = analyze_document(pages, config.balance, config.subcategory)
    balance = analysis.ending_balance
    inference = analysis.subcategory

    return {
        "filename": file_path.name,
        "status": "success",
        "ending_balance": (
            format_amount(balance.ending_balance) if balance.ending_balance else None
        ),
        "ending_balance_value": (
            balance.ending_balance.value if balance.ending_balance else None
        ),
        "ending_date": format_date(balance.ending_date) if balance.ending_date else None,
        "balance_confidence": round(balance.confidence, 3),
        "selection_reason": balance.selection_reason,
        "subcategory": inference.inferred_subcategory,
        "subcategory_confidence": inference.confidence,
        "auto_populate": inference.auto_populate,
        "error": None,
    }


def _write_csv(results: list[dict[str, object]], output_path: Path) -> None:
    """Write analysis results to a CSV file.

    Args:
        results: List of result dictionaries.
        output_path: Path for the output CSV file.
    """
    if not results:
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(results)


def _print_summary(summary: dict[str, int], output_csv: Path) -> None:
    """Print batch processing summary to stdout.

    Args:
        summary: Counts of total, successful, and failed documents.
        output_csv: Path to the output CSV.
    """
    print(f"\n{'=' * 50}")
    print("Batch Processing Complete")
    print(f"{'=' * 50}")
    print(f"Total:      {summary['total']}")
    print(f"Successful: {summary['successful']}")
    print(f"Failed:     {summary['failed']}")
    print(f"Output:     {output_csv}")


def detect_balance_in_file(
    file_path: Path, config: AppConfig | None = None
) -> dict[str, object]:
    """Detect the ending balance in one OCR text file.

    Args:
        file_path: Path to the OCR text file.
        config: Application configuration. Loaded from disk if ``None``.

    Returns:
        JSON-ready ending-balance result with the filename.
    """
    config = config or load_config()
    result = detect_ending_balance(_read_text(file_path), config.balance)
    return {
        "filename": file_path.name,
        **EndingBalanceResponse.from_result(result).model_dump(mode="json"),
    }


def classify_files(
    file_paths: list[Path], config: AppConfig | None = None
) -> dict[str, object]:
    """Infer one subcategory from one or more OCR text files.

    Several files are treated as the pages of a single document.

    Args:
        file_paths: OCR text files, in page order.
        config: Application configuration. Loaded from disk if ``None``.

    Returns:
        JSON-ready inference result with the filenames.
    """
    config = config or load_config()
    texts = [_read_text(p) for p in file_paths]
    result = infer_subcategory_from_multiple_texts(texts, config.subcategory)
    return {
        "filenames": [p.name for p in file_paths],
        **SubcategoryResponse.from_result(result).model_dump(mode="json"),
    }


def _emit(payload: dict[str, object], output: Path | None) -> None:
    output_str = json.dumps(payload, indent=2)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(output_str)
        print(f"Output written to {output}")
    else:
        print(output_str)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="OCR Post-Processing Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-c", "--config", type=Path, help="YAML configuration file"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    balance_parser = subparsers.add_parser(
        "balance", help="Detect the ending balance in an OCR text file"
    )
    balance_parser.add_argument("file", type=Path, help="OCR text file to process")
    balance_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    classify_parser = subparsers.add_parser(
        "classify", help="Infer the subcategory of a document"
    )
    classify_parser.add_argument(
        "files", type=Path, nargs="+", help="OCR text file(s), one per page"
    )
    classify_parser.add_argument(
        "--no-auto-populate",
        action="store_true",
        help="Only suggest subcategories, never auto-populate",
    )
    classify_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    batch_parser = subparsers.add_parser(
        "batch", help="Process a folder of OCR text files"
    )
    batch_parser.add_argument(
        "input_dir", type=Path, help="Input directory with OCR text files"
    )
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("results.csv"),
        help="Output CSV file (default: results.csv)",
    )
    batch_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output"
    )

    args = parser.parse_args(argv)

    config = load_config(args.config)
    setup_logging(config.log_level)

    if args.command == "balance":
        if not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        _emit(detect_balance_in_file(args.file, config), args.output)
    elif args.command == "classify":
        missing = [p for p in args.files if not p.exists()]
        if missing:
            print(f"Error: {missing[0]} does not exist", file=sys.stderr)
            sys.exit(1)
        if args.no_auto_populate:
            subcategory = config.subcategory.model_copy(update={"auto_populate": False})
            config = config.model_copy(update={"subcategory": subcategory})
        _emit(classify_files(args.files, config), args.output)
    elif args.command == "batch":
        if not args.input_dir.is_dir():
            print(f"Error: {args.input_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        process_folder(args.input_dir, args.output, config, args.verbose)
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
