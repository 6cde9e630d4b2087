"""
Configuration module for PDF Text Outline Extractor

This module contains configuration settings and constants used
throughout the application.
"""

import logging
import sys
from pathlib import Path

# Application constants
APP_NAME = "PDF Text Outline Extractor"
APP_VERSION = "1.0.0"
DEFAULT_INPUT_DIR = Path("/app/input")
DEFAULT_OUTPUT_DIR = Path("/app/output")

# Text extraction
PAGE_BREAK = "\f"
DEFAULT_EXTRACTOR = "pdftotext"
SUPPORTED_EXTRACTORS = ["pdftotext", "pymupdf"]
PDFTOTEXT_BINARY = "pdftotext"
EXTRACTION_TIMEOUT_SECONDS = 60.0

# Title inference
UNTITLED = "Untitled"
TITLE_MIN_LENGTH = 5    # exclusive
TITLE_MAX_LENGTH = 100  # exclusive
PROMINENT_LENGTH = 20   # lines longer than this are prominent

# Noise filtering
NOISE_PAGE_RATIO = 0.5
NOISE_MIN_PAGES = 3

# Output page numbering: 0 reports the first page as page 0
DEFAULT_PAGE_BASE = 0

# Supported heading levels
SUPPORTED_HEADING_LEVELS = ["H1", "H2", "H3"]


def setup_logging(level: int = logging.INFO) -> None:
    """
    Set up logging configuration for the application.

    Args:
        level: Logging level (default: INFO)
    """
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )
    # basicConfig is a no-op once handlers exist, so apply the level explicitly
    logging.getLogger().setLevel(level)

    # PyMuPDF is chatty at INFO
    logging.getLogger("fitz").setLevel(logging.WARNING)
