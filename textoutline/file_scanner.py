"""
File Scanner Component

This module handles scanning the input directory for PDF files.
"""

import logging
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)


class FileScanner:
    """Handles discovery of PDF files for processing."""

    def scan_input_directory(self, input_path: Path) -> List[Path]:
        """
        Scan the input directory for PDF files.

        Files are only matched by extension; unreadable or corrupt files are
        left for extraction to reject so that they are reported as failures.

        Args:
            input_path: Path to the input directory

        Returns:
            Sorted list of PDF file paths found

        Raises:
            NotADirectoryError: If input_path is not a directory
            OSError: If the directory cannot be listed
        """
        logger.info(f"Scanning directory: {input_path}")

        if not input_path.is_dir():
            raise NotADirectoryError(f"Input path is not a directory: {input_path}")

        pdf_files = []
        for file_path in input_path.iterdir():
            if file_path.is_file() and file_path.suffix.lower() == '.pdf':
                pdf_files.append(file_path)
                logger.debug(f"Found PDF: {file_path}")

        # Sort files for consistent processing order
        pdf_files.sort()
        logger.info(f"Found {len(pdf_files)} PDF files")
        return pdf_files
