"""
Data models for PDF Text Outline Extractor

This module contains the data classes and models used throughout
the outline recovery pipeline.
"""

from dataclasses import dataclass, field
from typing import Tuple
import re

_WHITESPACE_RUN = re.compile(r'\s+')


def clean_text(text: str) -> str:
    """Collapse whitespace runs to a single space and trim the result."""
    return _WHITESPACE_RUN.sub(' ', text).strip()


def count_indent(line: str) -> int:
    """Number of leading spaces on a raw line."""
    return len(line) - len(line.lstrip(' '))


@dataclass(frozen=True)
class PageText:
    """Raw text of a single page as produced by the page segmenter."""
    index: int
    raw: str
    lines: Tuple[str, ...] = field(default=())

    @classmethod
    def from_raw(cls, index: int, raw: str) -> "PageText":
        """Build a page from its raw text, splitting it into lines."""
        return cls(index=index, raw=raw, lines=tuple(raw.split("\n")))


@dataclass(frozen=True)
class HeadingCandidate:
    """Represents a line provisionally identified as a heading."""
    line: str
    page_index: int
    indent: int

    @classmethod
    def from_line(cls, line: str, page_index: int) -> "HeadingCandidate":
        return cls(line=line, page_index=page_index, indent=count_indent(line))

    @property
    def stripped(self) -> str:
        return self.line.strip()

    def clean_text(self) -> str:
        """Return cleaned text with trimmed whitespace and normalized spacing."""
        return clean_text(self.line)


@dataclass(frozen=True)
class OutlineEntry:
    """Represents a confirmed heading with its level."""
    level: str  # "H1", "H2", "H3"
    text: str
    page: int

    def to_dict(self) -> dict:
        """Convert to dictionary format for JSON output."""
        return {
            "level": self.level,
            "text": self.text,
            "page": self.page
        }


@dataclass(frozen=True)
class Document:
    """Title and outline recovered from one PDF."""
    title: str
    outline: Tuple[OutlineEntry, ...] = field(default=())

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "outline": [entry.to_dict() for entry in self.outline]
        }