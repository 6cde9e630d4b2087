"""
Page Segmenter

Splits extracted text into pages on the form-feed page-break character.
"""

import logging
from typing import Tuple

from .config import PAGE_BREAK
from .error_handler import EmptyDocument
from .models import PageText

logger = logging.getLogger(__name__)


def segment_pages(text: str, file_name: str = "<text>") -> Tuple[PageText, ...]:
    """
    Split extracted text into an ordered sequence of pages.

    Extraction terminates every page with a page break, so the empty
    segment after the final break is not a page.

    Args:
        text: Full extracted text of one document
        file_name: Source name used in error reports

    Returns:
        Tuple of PageText in document order

    Raises:
        EmptyDocument: If the text contains no pages at all
    """
    segments = text.split(PAGE_BREAK)
    if segments and segments[-1] == "":
        segments.pop()

    if not segments:
        raise EmptyDocument(file_name, "text extraction produced no pages")

    pages = tuple(PageText.from_raw(index, raw) for index, raw in enumerate(segments))
    logger.debug(f"Segmented {file_name} into {len(pages)} pages")
    return pages
