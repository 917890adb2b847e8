#!/usr/bin/env python3
"""
Vehicle Valuation Report Resolver - Main Entry Point.

This is the main entry point for the resolver. It provides both a
command-line interface and programmatic access to the resolution
pipeline.

Usage:
    Command Line:
        python main.py --input report.txt --output results.json
        python main.py --input ./reports/ --output results.xlsx --backend tesseract
        python main.py --input ./reports/ --evaluate --ground-truth data/ground_truth.json

    Python:
        from main import run_resolution
        documents = run_resolution("report.txt")

Author: ML Engineering Team
Version: 1.0.0
"""

import argparse
import dataclasses
import sys
import time
from pathlib import Path
from typing import List, Optional

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

# Import project modules
from config import ConfigurationManager
from src.utils.exceptions import (
    IngestionError,
    InputError,
    OutputError,
    ValuationExtractionError
)
from src.utils.helpers import ensure_directory, get_file_extension
from src.utils.logger import document_context, get_logger, set_level, setup_logger_from_config


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Vehicle Valuation Report Resolver",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Resolve a single OCR text file:
        python main.py --input report.txt --output results.json

    Resolve a directory of scanned PDFs:
        python main.py --input ./reports/ --output results.xlsx --backend tesseract

    With evaluation:
        python main.py --input ./reports/ --evaluate --ground-truth data/ground_truth.json
        """
    )

    # Input/Output arguments
    parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="Input file or directory containing .txt or .pdf reports"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output file (.json or .xlsx). Default: timestamped Excel file in outputs/"
    )

    # Processing options
    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
    )

    parser.add_argument(
        "--backend", "-b",
        type=str,
        choices=["text", "tesseract"],
        default=None,
        help="Ingestion backend (default: ingestion.backend from configuration)"
    )

    parser.add_argument(
        "--review-threshold",
        type=float,
        default=None,
        help="Confidence below which records are flagged for manual review"
    )

    parser.add_argument(
        "--no-excel",
        action="store_true",
        help="Disable Excel output"
    )

    parser.add_argument(
        "--no-database",
        action="store_true",
        help="Disable database output"
    )

    # Evaluation options
    parser.add_argument(
        "--evaluate",
        action="store_true",
        help="Run evaluation after resolution"
    )

    parser.add_argument(
        "--ground-truth", "-gt",
        type=str,
        default=None,
        help="Path to ground truth file for evaluation (.json or .csv)"
    )

    # Logging options
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log warnings and errors"
    )

    return parser.parse_args(argv)


def initialize_system(args: argparse.Namespace) -> ConfigurationManager:
    """
    Initialize the resolver with configuration and logging.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Initialized configuration manager.
    """
    # Load configuration
    config = ConfigurationManager(args.config)

    # Setup logging
    logger = setup_logger_from_config()

    if args.debug:
        set_level("DEBUG")
    elif args.quiet:
        set_level("WARNING")

    logger.info("=" * 60)
    logger.info("VEHICLE VALUATION REPORT RESOLVER")
    logger.info("=" * 60)
    logger.info(f"Version: {config.get('project.version', '1.0.0')}")
    logger.info(f"Input: {args.input}")
    logger.info(f"Output: {args.output or 'default'}")

    return config


def collect_input_files(input_path: str, supported_extensions: List[str]) -> List[Path]:
    """
    Collect the files to process from a file or directory path.

    Args:
        input_path: File or directory.
        supported_extensions: Extensions the ingestion backend accepts.

    Returns:
        Sorted list of input file paths.

    Raises:
        FileNotFoundError: If input path doesn't exist.
        ValueError: If a single file has an unsupported type.
    """
    logger = get_logger(__name__)
    path = Path(input_path)

    if not path.exists():
        raise FileNotFoundError(f"Input path not found: {path}")

    if path.is_file():
        if get_file_extension(path) in supported_extensions:
            return [path]
        raise ValueError(f"Unsupported file type: {path.suffix}")

    files = sorted(
        p for p in path.iterdir()
        if p.is_file() and get_file_extension(p) in supported_extensions
    )

    if not files:
        logger.warning(f"No supported files found in: {path}")
    else:
        logger.info(f"Found {len(files)} files to process")

    return files


def _process_file(file_path: Path, text_source, engine, review_threshold: float):
    """
    Ingest and resolve one file.

    Returns:
        ProcessedDocument, or None when the file could not be read.
    """
    from src.resolver import ProcessedDocument

    logger = get_logger(__name__)
    logger.info(f"Processing: {file_path.name}")
    start = time.perf_counter()

    try:
        # Phase 1: Ingestion - text or OCR
        raw = text_source.extract(
            file_path,
            progress=lambda page, total: logger.debug(f"  Page {page}/{total}")
        )

        # Phase 2: Resolution
        record = engine.resolve(raw)

    except (InputError, IngestionError) as e:
        logger.error(f"Error processing {file_path.name}: {e}")
        return None

    logger.info(
        f"  Resolved: VIN {record.identifier_code or 'N/A'}, "
        f"Confidence: {record.overall_confidence:.1f}"
    )
    if record.needs_manual_review(review_threshold):
        logger.warning("  Needs manual review")

    return ProcessedDocument(
        record=record,
        source_file=file_path.name,
        processing_time=round(time.perf_counter() - start, 3)
    )


def run_resolution(
    input_path: str,
    output_path: Optional[str] = None,
    config_path: Optional[str] = None,
    backend: Optional[str] = None,
    enable_excel: bool = True,
    enable_database: bool = True,
    review_threshold: Optional[float] = None,
    evaluate: bool = False,
    ground_truth_path: Optional[str] = None
) -> list:
    """
    Run the resolution pipeline.

    This is the main programmatic entry point. It ingests every input
    file, resolves it, writes the configured outputs and optionally
    evaluates against ground truth.

    Args:
        input_path: Path to input file or directory.
        output_path: Output file (.json or .xlsx).
        config_path: Optional custom configuration file path.
        backend: Ingestion backend name ("text" or "tesseract").
        enable_excel: Whether to generate Excel output.
        enable_database: Whether to save to database.
        review_threshold: Overrides ``resolution.review_threshold``.
        evaluate: Whether to run evaluation.
        ground_truth_path: Path to ground truth for evaluation.

    Returns:
        List of ProcessedDocument objects.

    Example:
        >>> documents = run_resolution("reports/", "outputs/results.json")
        >>> for document in documents:
        ...     print(document.record.identifier_code)
    """
    logger = get_logger(__name__)

    # Initialize configuration
    ConfigurationManager(config_path)

    # Import pipeline components
    from src.ingestion import create_text_source
    from src.output_handler import OutputHandler
    from src.resolver import ResolutionEngine, ResolutionSettings

    # Initialize pipeline components
    logger.info("Initializing pipeline components...")
    text_source = create_text_source(backend)

    settings = ResolutionSettings.from_config()
    if review_threshold is not None:
        settings = dataclasses.replace(settings, review_threshold=review_threshold)
    engine = ResolutionEngine(settings=settings)

    output_suffix = get_file_extension(output_path) if output_path else ''
    output_handler = OutputHandler(
        excel_enabled=enable_excel and output_suffix != '.json',
        database_enabled=enable_database
    )

    files_to_process = collect_input_files(input_path, text_source.SUPPORTED_EXTENSIONS)
    logger.info(f"Processing {len(files_to_process)} files...")

    documents = []

    for file_path in files_to_process:
        with document_context(file_path.name):
            document = _process_file(file_path, text_source, engine, settings.review_threshold)
        if document is not None:
            documents.append(document)

    # Phase 3: Output generation
    if documents:
        logger.info("Generating outputs...")

        if output_suffix == '.json':
            output_handler.to_json(documents, output_path)

        excel_filename = Path(output_path).name if output_suffix == '.xlsx' else None
        output_dir = str(Path(output_path).parent) if output_suffix == '.xlsx' else None

        if output_handler.excel_enabled:
            try:
                excel_path = output_handler.to_excel(documents, excel_filename, output_dir)
                logger.info(f"Excel output: {excel_path}")
            except OutputError as e:
                logger.error(f"Excel export failed: {e}")

        if output_handler.database_enabled:
            try:
                db_info = output_handler.to_database(documents)
                logger.info(
                    f"Database: {db_info['inserted']} inserted, "
                    f"{db_info['skipped']} skipped"
                )
            except OutputError as e:
                logger.error(f"Database save failed: {e}")

    # Phase 4: Evaluation (if enabled)
    if evaluate:
        if ground_truth_path:
            run_evaluation(documents, ground_truth_path, settings.review_threshold)
        else:
            logger.warning("Evaluation requested without --ground-truth; skipping")

    return documents


def run_evaluation(documents: list, ground_truth_path: str, review_threshold: Optional[float] = None):
    """
    Evaluate processed documents against a ground truth file.

    Documents without a ground truth entry are left out.

    Returns:
        EvaluationResult, or None when nothing could be matched.
    """
    from src.evaluation import GroundTruthLoader, MetricsCalculator

    logger = get_logger(__name__)
    ground_truth = GroundTruthLoader(ground_truth_path)

    predictions, expected = [], []
    for document in documents:
        truth = ground_truth.get_by_filename(document.source_file or '')
        if truth is None:
            logger.warning(f"No ground truth for {document.source_file}")
            continue
        predictions.append(document.to_dict())
        expected.append(truth)

    if not predictions:
        logger.warning("No documents matched the ground truth")
        return None

    result = MetricsCalculator(review_threshold=review_threshold).evaluate(predictions, expected)
    for line in result.print_report().splitlines():
        logger.info(line)

    return result


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code (0 for success, 1 for errors, 130 when interrupted).
    """
    args = None
    try:
        # Parse command-line arguments
        args = parse_arguments(argv)

        # Initialize system
        initialize_system(args)
        logger = get_logger(__name__)

        # Ensure output directory exists
        if args.output:
            ensure_directory(Path(args.output).parent)

        # Run resolution
        documents = run_resolution(
            input_path=args.input,
            output_path=args.output,
            config_path=args.config,
            backend=args.backend,
            enable_excel=not args.no_excel,
            enable_database=not args.no_database,
            review_threshold=args.review_threshold,
            evaluate=args.evaluate,
            ground_truth_path=args.ground_truth
        )

        if not documents:
            logger.error("No documents were resolved")
            return 1

        logger.info("=" * 60)
        logger.info(f"Resolution complete. Processed {len(documents)} files.")
        logger.info("=" * 60)

        return 0

    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 130

    except ValuationExtractionError as e:
        print(f"Error: {e}", file=sys.stderr)
        if args is not None and args.debug:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
