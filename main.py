#!/usr/bin/env python3
"""
PDF Text Outline Extractor - Main Application Entry Point

This is the main entry point for the PDF Text Outline Extractor application.
It processes every PDF in the input directory concurrently, recovering a
title and heading outline from each document's extracted text and writing
one JSON file per document.
"""

import argparse
import logging
import os
import platform
import sys
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import List, Optional

from textoutline.config import (
    APP_NAME,
    APP_VERSION,
    DEFAULT_EXTRACTOR,
    DEFAULT_INPUT_DIR,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PAGE_BASE,
    EXTRACTION_TIMEOUT_SECONDS,
    NOISE_MIN_PAGES,
    NOISE_PAGE_RATIO,
    SUPPORTED_EXTRACTORS,
    setup_logging,
)
from textoutline.error_handler import ErrorHandler, WriteFailed
from textoutline.file_scanner import FileScanner
from textoutline.json_generator import JSONGenerator
from textoutline.outline_extractor import OutlineExtractor
from textoutline.text_extractor import create_extractor

# Set up logging
setup_logging()
logger = logging.getLogger(__name__)


class BatchProcessor:
    """Runs the outline pipeline over every PDF in a directory."""

    def __init__(self, input_dir: Path, output_dir: Path,
                 outline_extractor: Optional[OutlineExtractor] = None,
                 max_workers: Optional[int] = None):
        """
        Initialize the batch processor with input and output directories.

        Args:
            input_dir: Directory containing PDF files to process
            output_dir: Directory where JSON outputs will be written
            outline_extractor: Per-document pipeline, pdftotext-backed if None
            max_workers: Thread pool size, derived from the file count if None
        """
        self.input_dir = input_dir
        self.output_dir = output_dir

        # Initialize components
        self.file_scanner = FileScanner()
        self.outline_extractor = outline_extractor or OutlineExtractor()
        self.json_generator = JSONGenerator()
        self.error_handler = ErrorHandler()

        # Processing statistics
        self.total_files = 0
        self.successful_files = 0
        self.failed_files = 0
        self.start_time = None

        # Thread safety for concurrent processing
        self._stats_lock = threading.Lock()

        self.max_workers = max_workers

    def process_all_pdfs(self) -> bool:
        """
        Process all PDF files in the input directory concurrently.

        Returns:
            True if every document was processed successfully, False otherwise
        """
        logger.info("Starting batch PDF processing")
        self.start_time = time.time()
        self.error_handler.start_monitoring()

        pdf_files = self.file_scanner.scan_input_directory(self.input_dir)
        self.total_files = len(pdf_files)

        if self.total_files == 0:
            logger.warning(f"No PDF files found in {self.input_dir}")
            return True

        self.output_dir.mkdir(parents=True, exist_ok=True)

        unique_files = self._reject_output_collisions(pdf_files)
        if unique_files:
            self._process_pdfs_concurrently(unique_files)
        self._validate_processing_results(unique_files)
        self._log_final_statistics()

        return not self.error_handler.has_errors()

    def _reject_output_collisions(self, pdf_files: List[Path]) -> List[Path]:
        """
        Keep one PDF per output file name.

        "report.pdf" and "report.PDF" both map to "report.json". The first
        file in scan order keeps the name; later ones fail with WriteFailed
        instead of silently overwriting it.

        Args:
            pdf_files: Sorted list of PDF file paths

        Returns:
            The PDF files whose output names are unique
        """
        claimed = {}
        unique_files = []

        for pdf_path in pdf_files:
            output_name = self.json_generator.generate_output_filename(pdf_path.name)
            owner = claimed.setdefault(output_name, pdf_path)
            if owner is pdf_path:
                unique_files.append(pdf_path)
                continue

            self.error_handler.record_error(
                pdf_path.name,
                WriteFailed(pdf_path.name, f"output {output_name} is already written for {owner.name}")
            )
            self.failed_files += 1

        return unique_files

    def _process_pdfs_concurrently(self, pdf_files: List[Path]) -> None:
        """
        Process PDF files on a thread pool, one task per document.

        Args:
            pdf_files: List of PDF file paths to process
        """
        workers = self.max_workers or min(4, max(1, len(pdf_files) // 2))
        logger.info(f"Using {workers} concurrent workers for {len(pdf_files)} files")

        with ThreadPoolExecutor(max_workers=workers) as executor:
            future_to_pdf = {
                executor.submit(self._process_single_pdf, pdf_path): pdf_path
                for pdf_path in pdf_files
            }

            completed_count = 0
            for future in as_completed(future_to_pdf):
                completed_count += 1

                # Task failures are recorded inside the task, never raised
                success = future.result()

                with self._stats_lock:
                    if success:
                        self.successful_files += 1
                    else:
                        self.failed_files += 1

                if completed_count % 5 == 0 or completed_count == len(pdf_files):
                    self._log_progress(completed_count)

    def _process_single_pdf(self, pdf_path: Path) -> bool:
        """
        Process a single PDF file at the task boundary.

        Args:
            pdf_path: Path to the PDF file to process

        Returns:
            True if processing succeeded, False otherwise
        """
        logger.debug(f"Starting processing of {pdf_path.name}")

        output_path = self.error_handler.run_document_task(pdf_path, self._run_pipeline)
        if output_path is None:
            return False

        logger.info(f"Processed {pdf_path.name} -> {output_path.name}")
        return True

    def _run_pipeline(self, pdf_path: Path) -> Path:
        document = self.outline_extractor.extract_document(pdf_path)
        return self.json_generator.write_document(pdf_path, self.output_dir, document)

    def _validate_processing_results(self, pdf_files: List[Path]):
        """Check that every successful PDF has a valid JSON output."""
        failed = set(self.error_handler.get_error_summary()['failed_files'])
        expected = [pdf for pdf in pdf_files if pdf.name not in failed]

        validation_results = self.json_generator.validate_processing_results(expected, self.output_dir)

        if validation_results['success']:
            logger.debug("All successful PDF files have valid JSON outputs")
            return

        for missing_pdf in validation_results['missing_outputs']:
            logger.warning(f"Missing output for: {missing_pdf.name}")
        for invalid_json in validation_results['invalid_outputs']:
            logger.warning(f"Output does not match schema: {invalid_json.name}")

    def _log_progress(self, current_file: int):
        """Log processing progress."""
        if self.start_time is None:
            return

        elapsed_time = time.time() - self.start_time
        files_per_second = current_file / elapsed_time if elapsed_time > 0 else 0

        logger.info(
            f"Progress: {current_file}/{self.total_files} files "
            f"({current_file/self.total_files*100:.1f}%) - "
            f"Success: {self.successful_files}, Failed: {self.failed_files} - "
            f"Rate: {files_per_second:.2f} files/sec"
        )

    def _log_final_statistics(self):
        """Log final processing statistics and every recorded failure."""
        elapsed_time = time.time() - self.start_time

        logger.info("=" * 60)
        logger.info("PROCESSING COMPLETED")
        logger.info("=" * 60)
        logger.info(f"Total files processed: {self.total_files}")
        logger.info(f"Successful: {self.successful_files}")
        logger.info(f"Failed: {self.failed_files}")
        logger.info(f"Success rate: {self.successful_files/max(self.total_files,1)*100:.1f}%")
        logger.info(f"Total processing time: {elapsed_time:.2f} seconds")
        logger.info(f"Average time per file: {elapsed_time/max(self.total_files,1):.2f} seconds")

        performance_metrics = self.error_handler.get_detailed_performance_metrics()
        logger.info(f"Peak memory usage: {performance_metrics['session_metrics']['peak_memory_mb']:.1f} MB")
        logger.info(f"Throughput: {performance_metrics['performance_ratios']['files_per_second']:.2f} files/sec")

        time_stats = performance_metrics['processing_time_stats']
        if time_stats:
            logger.info(
                f"Per-file time: min {time_stats['min_time']:.2f}s, "
                f"avg {time_stats['avg_time']:.2f}s, max {time_stats['max_time']:.2f}s"
            )

        error_summary = self.error_handler.get_error_summary()
        if error_summary['total_errors'] > 0:
            logger.warning(f"Total errors encountered: {error_summary['total_errors']}")
            for category, count in error_summary['error_categories'].items():
                logger.warning(f"  {category}: {count}")
            for message in self.error_handler.get_error_messages():
                logger.error(message)

        output_summary = self.json_generator.get_output_summary(self.output_dir)
        logger.info(f"Output files present: {output_summary['json_files']}")
        logger.info(f"Total output size: {output_summary['total_size_mb']:.2f} MB")
        logger.info("=" * 60)


def parse_arguments(argv: Optional[List[str]] = None):
    """
    Parse command-line arguments for the PDF Text Outline Extractor.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description=f"{APP_NAME} - Recover titles and heading outlines from text PDFs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Use default container paths
  python main.py

  # Use custom input/output directories
  python main.py --input ./pdfs --output ./json

  # Extract with PyMuPDF instead of pdftotext, numbering pages from 1
  python main.py --extractor pymupdf --page-base 1
        """
    )

    parser.add_argument(
        "--input", "-i",
        type=Path,
        default=DEFAULT_INPUT_DIR,
        help=f"Input directory containing PDF files (default: {DEFAULT_INPUT_DIR})"
    )

    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=DEFAULT_OUTPUT_DIR,
        help=f"Output directory for JSON files (default: {DEFAULT_OUTPUT_DIR})"
    )

    parser.add_argument(
        "--extractor",
        choices=SUPPORTED_EXTRACTORS,
        default=DEFAULT_EXTRACTOR,
        help=f"Text extraction backend (default: {DEFAULT_EXTRACTOR})"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=EXTRACTION_TIMEOUT_SECONDS,
        help=f"Per-file pdftotext timeout in seconds (default: {EXTRACTION_TIMEOUT_SECONDS:g})"
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of documents processed in parallel (default: derived from file count)"
    )

    parser.add_argument(
        "--page-base",
        type=int,
        choices=[0, 1],
        default=DEFAULT_PAGE_BASE,
        help=f"Number reported for the first page (default: {DEFAULT_PAGE_BASE})"
    )

    parser.add_argument(
        "--noise-ratio",
        type=float,
        default=NOISE_PAGE_RATIO,
        help=f"Lines found on more than this share of pages are noise (default: {NOISE_PAGE_RATIO})"
    )

    parser.add_argument(
        "--noise-min-pages",
        type=int,
        default=NOISE_MIN_PAGES,
        help=f"Minimum page count before noise filtering applies (default: {NOISE_MIN_PAGES})"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose debug logging"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress all output except errors"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"{APP_NAME} v{APP_VERSION}"
    )

    args = parser.parse_args(argv)
    if args.workers is not None and args.workers < 1:
        parser.error("--workers must be at least 1")
    if args.timeout <= 0:
        parser.error("--timeout must be positive")
    return args


def setup_logging_from_args(args):
    """
    Configure logging based on command-line arguments.

    Args:
        args: Parsed command-line arguments
    """
    if args.quiet:
        log_level = logging.ERROR
    elif args.verbose:
        log_level = logging.DEBUG
    else:
        log_level = logging.INFO

    setup_logging(log_level)

    for logger_name in ['__main__', 'main', 'textoutline']:
        logging.getLogger(logger_name).setLevel(log_level)


def validate_directories(input_dir: Path, output_dir: Path):
    """
    Validate input and output directories.

    Args:
        input_dir: Input directory path
        output_dir: Output directory path

    Raises:
        SystemExit: If validation fails
    """
    if not input_dir.exists():
        logger.error(f"Input directory does not exist: {input_dir}")
        sys.exit(2)

    if not input_dir.is_dir():
        logger.error(f"Input path is not a directory: {input_dir}")
        sys.exit(2)

    if not os.access(input_dir, os.R_OK):
        logger.error(f"Input directory is not readable: {input_dir}")
        sys.exit(2)

    if output_dir.exists() and not output_dir.is_dir():
        logger.error(f"Output path exists but is not a directory: {output_dir}")
        sys.exit(2)

    try:
        JSONGenerator().check_output_directory_permissions(output_dir)
    except OSError as e:
        logger.error(f"Output directory is not usable: {e}")
        sys.exit(2)

    logger.debug(f"Directory validation successful - Input: {input_dir}, Output: {output_dir}")


def log_startup_info(args, input_dir: Path, output_dir: Path):
    """Log startup information and configuration."""
    logger.info("=" * 60)
    logger.info(f"{APP_NAME.upper()} STARTING")
    logger.info("=" * 60)
    logger.info(f"Version: {APP_VERSION}")
    logger.info(f"Input directory: {input_dir}")
    logger.info(f"Output directory: {output_dir}")
    logger.info(f"Extractor: {args.extractor} (timeout {args.timeout:g}s)")
    logger.info(f"Page base: {args.page_base}")
    logger.info(f"Noise filter: ratio {args.noise_ratio}, min pages {args.noise_min_pages}")
    logger.info(f"Log level: {logging.getLevelName(logger.getEffectiveLevel())}")
    logger.info(f"Platform: {platform.system()} {platform.release()}")
    logger.info(f"Python: {platform.python_version()}")
    logger.info("=" * 60)


def log_shutdown_info(success: bool, exit_code: int):
    """
    Log shutdown information and final status.

    Args:
        success: Whether processing was successful
        exit_code: Exit code to be returned
    """
    logger.info("=" * 60)
    logger.info(f"{APP_NAME.upper()} SHUTDOWN")
    logger.info("=" * 60)
    logger.info(f"Status: {'SUCCESS' if success else 'FAILED'}")
    logger.info(f"Exit code: {exit_code}")

    if exit_code == 0:
        logger.info("All PDF files processed successfully")
    elif exit_code == 1:
        logger.error("Processing completed with errors")
    elif exit_code == 2:
        logger.error("Configuration or setup error")
    elif exit_code == 130:
        logger.info("Processing interrupted by user")
    else:
        logger.error(f"Unexpected exit code: {exit_code}")

    logger.info("=" * 60)


def main(argv: Optional[List[str]] = None):
    """Main application entry point."""
    args = parse_arguments(argv)
    setup_logging_from_args(args)

    input_dir = args.input.resolve()
    output_dir = args.output.resolve()

    log_startup_info(args, input_dir, output_dir)

    try:
        validate_directories(input_dir, output_dir)

        outline_extractor = OutlineExtractor(
            extractor=create_extractor(args.extractor, timeout=args.timeout),
            noise_ratio=args.noise_ratio,
            noise_min_pages=args.noise_min_pages,
            page_base=args.page_base
        )
        processor = BatchProcessor(input_dir, output_dir, outline_extractor, max_workers=args.workers)
        success = processor.process_all_pdfs()

        exit_code = 0 if success else 1
        log_shutdown_info(success, exit_code)
        sys.exit(exit_code)

    except KeyboardInterrupt:
        logger.info("Processing interrupted by user (Ctrl+C)")
        log_shutdown_info(False, 130)
        sys.exit(130)
    except OSError as e:
        logger.error(f"Cannot read input directory: {e}")
        log_shutdown_info(False, 2)
        sys.exit(2)


if __name__ == "__main__":
    main()
