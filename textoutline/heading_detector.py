"""
Heading Detector Component

This module scans extracted page text for heading lines. Lines recurring on
too many pages are dropped as noise, the rest are matched against heading
patterns, deduplicated by cleaned text and given an H1-H3 level from
indentation and textual cues.
"""

import logging
import re
from typing import Dict, List, Sequence, Set

from .config import DEFAULT_PAGE_BASE, NOISE_MIN_PAGES, NOISE_PAGE_RATIO
from .models import HeadingCandidate, OutlineEntry, PageText

logger = logging.getLogger(__name__)

HEADING_PATTERN = re.compile(
    r'^(?:Section|Chapter|Part|Appendix)\s+[A-Za-z0-9]+'
    r'|^[A-Z][A-Za-z\s\-:]{5,}$'
)
ALL_CAPS_PATTERN = re.compile(r'^[A-Z\s]+$')


class NoiseFilter:
    """
    Flags running headers, footers and watermarks.

    A line is noise when more than ``ratio`` times the page count of pages
    contain it as a substring. Documents shorter than ``min_pages`` are never
    filtered. Counts are memoised, so one instance serves exactly one document.
    """

    def __init__(self, pages: Sequence[PageText], ratio: float = NOISE_PAGE_RATIO,
                 min_pages: int = NOISE_MIN_PAGES):
        self.pages = pages
        self.ratio = ratio
        self.min_pages = min_pages
        self._counts: Dict[str, int] = {}

    def page_count(self, line: str) -> int:
        """Number of pages whose raw text contains the line."""
        if line not in self._counts:
            self._counts[line] = sum(1 for page in self.pages if line in page.raw)
        return self._counts[line]

    def is_noise(self, line: str) -> bool:
        total = len(self.pages)
        if total < self.min_pages:
            return False
        return self.page_count(line) > self.ratio * total


class LevelClassifier:
    """Assigns a heading level from indentation change and textual cues."""

    def classify(self, candidate: HeadingCandidate, previous_indent: int) -> str:
        """
        Classify a heading candidate.

        Args:
            candidate: The accepted heading line
            previous_indent: Indentation of the last accepted heading on the page

        Returns:
            "H1", "H2" or "H3"
        """
        if candidate.indent > previous_indent:
            return "H2"
        if candidate.indent < previous_indent:
            return "H1"

        text = candidate.stripped
        if ":" in text:
            return "H3"
        if ALL_CAPS_PATTERN.match(text):
            return "H1"
        return "H2"


class HeadingDetector:
    """Builds the ordered outline of one document."""

    def __init__(self, noise_ratio: float = NOISE_PAGE_RATIO, noise_min_pages: int = NOISE_MIN_PAGES,
                 page_base: int = DEFAULT_PAGE_BASE):
        self.noise_ratio = noise_ratio
        self.noise_min_pages = noise_min_pages
        self.page_base = page_base
        self.level_classifier = LevelClassifier()

    @staticmethod
    def is_heading_line(line: str) -> bool:
        return HEADING_PATTERN.match(line) is not None

    def detect_headings(self, pages: Sequence[PageText]) -> List[OutlineEntry]:
        """
        Scan all pages for headings in page and line order.

        Args:
            pages: Ordered pages of the document

        Returns:
            Outline entries in scan order
        """
        noise_filter = NoiseFilter(pages, ratio=self.noise_ratio, min_pages=self.noise_min_pages)
        outline: List[OutlineEntry] = []
        seen: Set[str] = set()

        for page in pages:
            previous_indent = 0

            for raw_line in page.lines:
                line = raw_line.strip()
                if not line:
                    continue

                if noise_filter.is_noise(line):
                    logger.debug(f"Skipping noise line on page {page.index}: '{line}'")
                    continue

                if not self.is_heading_line(line):
                    continue

                candidate = HeadingCandidate.from_line(raw_line, page.index)
                text = candidate.clean_text()
                if text in seen:
                    continue

                level = self.level_classifier.classify(candidate, previous_indent)
                outline.append(OutlineEntry(level=level, text=text, page=page.index + self.page_base))
                seen.add(text)
                previous_indent = candidate.indent

        logger.debug(f"Detected {len(outline)} headings across {len(pages)} pages")
        return outline
