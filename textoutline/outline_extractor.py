"""
Outline Extractor Component

This module runs the per-document outline pipeline: extract text, split
it into pages, infer the title, detect headings and assemble the result.
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Sequence, Union

from .config import DEFAULT_PAGE_BASE, NOISE_MIN_PAGES, NOISE_PAGE_RATIO
from .heading_detector import HeadingDetector
from .models import Document, OutlineEntry
from .page_segmenter import segment_pages
from .text_extractor import PdftotextExtractor, TextExtractor
from .title_inferrer import TitleInferrer

logger = logging.getLogger(__name__)

ExtractFunc = Callable[[Path], str]


class OutlineExtractor:
    """Recovers title and heading outline from a PDF's extracted text."""

    def __init__(self, extractor: Optional[Union[TextExtractor, ExtractFunc]] = None,
                 noise_ratio: float = NOISE_PAGE_RATIO, noise_min_pages: int = NOISE_MIN_PAGES,
                 page_base: int = DEFAULT_PAGE_BASE):
        """
        Initialize the OutlineExtractor.

        Args:
            extractor: Text extraction backend, or any callable from a PDF
                path to form-feed separated page text
            noise_ratio: Share of pages above which a line counts as noise
            noise_min_pages: Page count below which noise filtering is off
            page_base: Number reported for the first page
        """
        if extractor is None:
            extractor = PdftotextExtractor()
        if isinstance(extractor, TextExtractor):
            self._extract_text: ExtractFunc = extractor.extract_text
        else:
            self._extract_text = extractor

        self.title_inferrer = TitleInferrer()
        self.heading_detector = HeadingDetector(
            noise_ratio=noise_ratio,
            noise_min_pages=noise_min_pages,
            page_base=page_base
        )

    def extract_document(self, file_path: Path) -> Document:
        """
        Extract title and outline from a PDF file.

        Args:
            file_path: Path to the PDF file

        Returns:
            The assembled Document

        Raises:
            ExtractionFailed: If text extraction fails
            EmptyDocument: If the extracted text has no pages
        """
        text = self._extract_text(file_path)
        return self.build_document(text, file_path.name)

    def build_document(self, text: str, file_name: str = "<text>") -> Document:
        """
        Run the heuristics over already extracted text.

        Args:
            text: Form-feed separated page text
            file_name: Source name used in logs and error reports

        Returns:
            The assembled Document
        """
        pages = segment_pages(text, file_name)

        title = self.title_inferrer.infer_title(pages)
        logger.debug(f"Extracted title for {file_name}: '{title}'")

        outline = self.heading_detector.detect_headings(pages)
        logger.debug(f"Extracted {len(outline)} headings for {file_name}")

        return self.assemble_document(title, outline)

    @staticmethod
    def assemble_document(title: str, outline: Sequence[OutlineEntry]) -> Document:
        """Combine a title and an ordered outline into the output record."""
        return Document(title=title, outline=tuple(outline))
