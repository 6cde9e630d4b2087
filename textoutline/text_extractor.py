"""
Text Extraction Component

This module provides the text extraction backends that linearize a PDF
into layout-preserving plain text, one form-feed terminated block per page.
The outline heuristics only ever see this text, so any callable mapping a
path to such a string can stand in for a real backend.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import List, Optional, Tuple

import fitz  # PyMuPDF

from .config import (
    EXTRACTION_TIMEOUT_SECONDS,
    PAGE_BREAK,
    PDFTOTEXT_BINARY,
    SUPPORTED_EXTRACTORS,
)
from .error_handler import ExtractionFailed

logger = logging.getLogger(__name__)


class TextExtractor:
    """
    Base class for backends turning a PDF file into page-separated text.

    Subclasses must override _extract; extract_text runs the shared file
    checks before calling it.
    """

    name = "base"

    def extract_text(self, file_path: Path) -> str:
        """
        Extract the full text of a PDF.

        Args:
            file_path: Path to the PDF file

        Returns:
            Plain text with every page terminated by a form feed

        Raises:
            ExtractionFailed: If the file cannot be read or converted
        """
        self.validate_pdf_file(file_path)
        logger.debug(f"Extracting text from {file_path.name} with {self.name}")
        return self._extract(file_path)

    def _extract(self, file_path: Path) -> str:
        """Convert an already validated PDF to form-feed separated text."""
        raise NotImplementedError(f"{type(self).__name__} does not implement _extract")

    def validate_pdf_file(self, file_path: Path) -> None:
        """
        Check that a file exists, is readable and carries a PDF header.

        Raises:
            ExtractionFailed: Describing the first check that failed
        """
        if not file_path.is_file():
            raise ExtractionFailed(file_path.name, "file does not exist")

        if not os.access(file_path, os.R_OK):
            raise ExtractionFailed(file_path.name, "file is not readable")

        try:
            if file_path.stat().st_size == 0:
                raise ExtractionFailed(file_path.name, "file is empty")

            with open(file_path, 'rb') as f:
                header = f.read(8)
        except OSError as e:
            raise ExtractionFailed(file_path.name, f"error reading file header: {e}") from e

        if not header.startswith(b'%PDF-'):
            raise ExtractionFailed(file_path.name, "file does not have a PDF header")


class PdftotextExtractor(TextExtractor):
    """Runs poppler's pdftotext in layout mode."""

    name = "pdftotext"

    def __init__(self, timeout: Optional[float] = EXTRACTION_TIMEOUT_SECONDS,
                 binary: str = PDFTOTEXT_BINARY):
        self.timeout = timeout
        self.binary = binary

    def build_command(self, file_path: Path) -> List[str]:
        return [self.binary, "-layout", "-enc", "UTF-8", str(file_path), "-"]

    def _extract(self, file_path: Path) -> str:
        command = self.build_command(file_path)

        try:
            completed = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=self.timeout,
                check=False
            )
        except FileNotFoundError as e:
            raise ExtractionFailed(file_path.name, f"{self.binary} executable not found") from e
        except subprocess.TimeoutExpired as e:
            raise ExtractionFailed(file_path.name, f"{self.binary} timed out after {self.timeout} seconds") from e
        except OSError as e:
            raise ExtractionFailed(file_path.name, f"could not run {self.binary}: {e}") from e

        if completed.returncode != 0:
            stderr = completed.stderr.decode("utf-8", errors="replace").strip()
            raise ExtractionFailed(
                file_path.name,
                f"{self.binary} exited with status {completed.returncode}: {stderr or 'no error output'}"
            )

        try:
            return completed.stdout.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ExtractionFailed(file_path.name, f"output is not valid UTF-8: {e}") from e


class PyMuPDFExtractor(TextExtractor):
    """
    Rebuilds layout-preserving page text from PyMuPDF span geometry.

    Each text line is indented by its distance from the page's leftmost
    text, measured in average character widths, so the indentation cues
    pdftotext -layout would produce survive.
    """

    name = "pymupdf"

    def _extract(self, file_path: Path) -> str:
        try:
            doc = fitz.open(str(file_path))
        except (RuntimeError, ValueError, OSError) as e:
            # fitz.FileDataError is a RuntimeError
            raise ExtractionFailed(file_path.name, f"could not open PDF: {e}") from e

        try:
            if doc.needs_pass:
                raise ExtractionFailed(file_path.name, "document is password protected")

            return "".join(self._page_text(page) + PAGE_BREAK for page in doc)
        except RuntimeError as e:
            raise ExtractionFailed(file_path.name, f"text extraction failed: {e}") from e
        finally:
            if not doc.is_closed:
                doc.close()

    def _page_text(self, page: fitz.Page) -> str:
        lines = self._collect_lines(page)
        if not lines:
            return ""

        margin = min(x0 for _, x0, _, _ in lines)
        widths = [w for _, _, _, w in lines if w > 0]
        char_width = sum(widths) / len(widths) if widths else 1.0

        rendered = []
        for _, x0, text, _ in lines:
            indent = int(round((x0 - margin) / char_width))
            rendered.append(" " * indent + text)
        return "\n".join(rendered) + "\n"

    def _collect_lines(self, page: fitz.Page) -> List[Tuple[float, float, str, float]]:
        """
        Return (y0, x0, text, average char width) for each visual row, top to bottom.

        PyMuPDF reports separately placed text, such as a section number and
        its title, as distinct lines. Lines whose vertical centre falls inside
        a row's y range are joined into that row, left to right, with the gap
        between them rendered as spaces.
        """
        spans = []
        text_dict = page.get_text("dict")

        for block in text_dict.get("blocks", []):
            if "lines" not in block:
                continue

            for line in block["lines"]:
                text = "".join(span.get("text", "") for span in line.get("spans", []))
                text = text.rstrip()
                stripped = text.lstrip()
                if not stripped:
                    continue

                x0, y0, x1, y1 = line.get("bbox", (0, 0, 0, 0))
                char_width = (x1 - x0) / len(text) if text else 0.0
                # Leading blanks inside the span shift the visible text right
                x0 += char_width * (len(text) - len(stripped))
                spans.append((y0, y1, x0, x1, stripped, char_width))

        spans.sort(key=lambda item: (item[0], item[2]))

        rows: List[List[Tuple[float, float, float, float, str, float]]] = []
        for span in spans:
            centre = (span[0] + span[1]) / 2
            if rows and rows[-1][0][0] <= centre <= rows[-1][0][1]:
                rows[-1].append(span)
            else:
                rows.append([span])

        return [self._join_row(row) for row in rows]

    def _join_row(self, row) -> Tuple[float, float, str, float]:
        row = sorted(row, key=lambda item: item[2])
        widths = [item[5] for item in row if item[5] > 0]
        char_width = sum(widths) / len(widths) if widths else 1.0

        text = row[0][4]
        previous_x1 = row[0][3]
        for _, _, x0, x1, piece, _ in row[1:]:
            gap = max(1, int(round((x0 - previous_x1) / char_width)))
            text += " " * gap + piece
            previous_x1 = x1

        return (row[0][0], row[0][2], text, char_width)


def create_extractor(name: str, timeout: Optional[float] = EXTRACTION_TIMEOUT_SECONDS) -> TextExtractor:
    """
    Build the extraction backend registered under a name.

    Raises:
        ValueError: If the name is not a supported backend
    """
    if name == "pdftotext":
        return PdftotextExtractor(timeout=timeout)
    if name == "pymupdf":
        return PyMuPDFExtractor()
    raise ValueError(f"Unknown extractor '{name}', expected one of {SUPPORTED_EXTRACTORS}")
