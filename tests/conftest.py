from pathlib import Path
from typing import Dict

import pytest

from textoutline.models import PageText
from textoutline.page_segmenter import segment_pages
from textoutline.text_extractor import TextExtractor

PDF_STUB = b"%PDF-1.4\n% stub body\n"


class CannedTextExtractor(TextExtractor):
    """Returns prepared text per file name after the usual file checks."""

    name = "canned"

    def __init__(self, texts: Dict[str, str]):
        self.texts = texts
        self.calls = []

    def _extract(self, file_path: Path) -> str:
        self.calls.append(file_path.name)
        return self.texts[file_path.name]


def build_pages(*page_texts: str):
    """Pages from raw page strings, joined the way pdftotext emits them."""
    return segment_pages("".join(text + "\f" for text in page_texts))


@pytest.fixture
def canned_extractor():
    return CannedTextExtractor


@pytest.fixture
def pages():
    return build_pages


@pytest.fixture
def make_pdf(tmp_path):
    def _make(name: str, content: bytes = PDF_STUB, directory: Path = None) -> Path:
        target = (directory or tmp_path) / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        return target
    return _make


@pytest.fixture
def single_page():
    def _page(text: str, index: int = 0) -> PageText:
        return PageText.from_raw(index, text)
    return _page
