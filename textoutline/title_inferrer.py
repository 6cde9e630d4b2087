"""
Title Inferrer

Picks the document title from extracted page text: the first prominent
line of the first page, else a line repeated across most pages (a running
header), else a fixed sentinel.
"""

import logging
from typing import Dict, Optional, Sequence

from .config import PROMINENT_LENGTH, TITLE_MAX_LENGTH, TITLE_MIN_LENGTH, UNTITLED
from .models import PageText, clean_text

logger = logging.getLogger(__name__)


class TitleInferrer:
    """Infers a title from the page sequence of one document."""

    def __init__(self, min_length: int = TITLE_MIN_LENGTH, max_length: int = TITLE_MAX_LENGTH,
                 prominent_length: int = PROMINENT_LENGTH, sentinel: str = UNTITLED):
        self.min_length = min_length
        self.max_length = max_length
        self.prominent_length = prominent_length
        self.sentinel = sentinel

    def infer_title(self, pages: Sequence[PageText]) -> str:
        """
        Infer the document title.

        Args:
            pages: Ordered pages of the document

        Returns:
            Cleaned title text, never empty
        """
        if not pages:
            return self.sentinel

        for raw_line in pages[0].lines:
            line = raw_line.strip()
            if self._has_title_length(line) and self.is_prominent(line):
                logger.debug(f"Title from first page: '{line}'")
                return clean_text(line)

        repeated = self.find_repeated_text(pages)
        if repeated:
            logger.debug(f"Title from repeated header: '{repeated}'")
            return clean_text(repeated)

        return self.sentinel

    def is_prominent(self, line: str) -> bool:
        """A line is prominent if mostly uppercase or longer than the prominence length."""
        upper_count = sum(1 for ch in line if ch.isupper())
        return upper_count * 2 > len(line) or len(line) > self.prominent_length

    def find_repeated_text(self, pages: Sequence[PageText]) -> Optional[str]:
        """
        Find a line that appears on more than half of the pages.

        The line on the most pages wins; ties go to the line seen first.
        """
        if len(pages) < 2:
            return None

        # dicts keep insertion order, i.e. first occurrence in scan order
        page_counts: Dict[str, int] = {}
        for page in pages:
            seen_on_page = set()
            for raw_line in page.lines:
                line = raw_line.strip()
                if self._has_title_length(line) and line not in seen_on_page:
                    seen_on_page.add(line)
                    page_counts[line] = page_counts.get(line, 0) + 1

        best = None
        best_count = 0
        for line, count in page_counts.items():
            if count * 2 > len(pages) and count > best_count:
                best, best_count = line, count
        return best

    def _has_title_length(self, line: str) -> bool:
        return self.min_length < len(line) < self.max_length
