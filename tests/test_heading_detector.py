import re

import pytest

from textoutline.heading_detector import HeadingDetector, LevelClassifier, NoiseFilter
from textoutline.models import HeadingCandidate


@pytest.mark.parametrize("line", [
    "Section 1",
    "Section 1: Overview",
    "Chapter 12 The Long Road",
    "Part iv",
    "Appendix A",
    "INTRODUCTION",
    "Background and Motivation",
    "Related Work: Prior Art",
    "Cross-Platform Support",
])
def test_heading_pattern_matches(line):
    assert HeadingDetector.is_heading_line(line)


@pytest.mark.parametrize("line", [
    "lowercase start of a sentence",
    "Short",
    "Total: 42 items",
    "Figure 3.1 shows the layout.",
    "This sentence ends with a period.",
    "Notes 2024",
])
def test_heading_pattern_rejects(line):
    assert not HeadingDetector.is_heading_line(line)


class TestLevelClassifier:

    def classify(self, line, previous_indent):
        return LevelClassifier().classify(HeadingCandidate.from_line(line, 0), previous_indent)

    def test_deeper_indentation_is_h2(self):
        assert self.classify("    BACKGROUND", 0) == "H2"

    def test_shallower_indentation_is_h1(self):
        assert self.classify("  Scope: details", 6) == "H1"

    def test_equal_indentation_with_colon_is_h3(self):
        assert self.classify("Section 1: Overview", 0) == "H3"

    def test_equal_indentation_all_caps_is_h1(self):
        assert self.classify("   EXECUTIVE SUMMARY", 3) == "H1"

    def test_equal_indentation_default_is_h2(self):
        assert self.classify("Methods Overview", 0) == "H2"


class TestNoiseFilter:

    def test_line_on_most_pages_is_noise(self, pages):
        doc = pages(*[f"Confidential Draft\nnotes {i}\n" for i in range(4)])
        noise = NoiseFilter(doc, ratio=0.5, min_pages=3)

        assert noise.page_count("Confidential Draft") == 4
        assert noise.is_noise("Confidential Draft")
        assert not noise.is_noise("notes 1")

    def test_counts_substring_occurrences(self, pages):
        doc = pages("see Overview below\n", "Overview\n", "the Overview again\n")

        assert NoiseFilter(doc).page_count("Overview") == 3

    def test_short_documents_are_never_filtered(self, pages):
        doc = pages("Running Header\n", "Running Header\n")

        assert not NoiseFilter(doc, ratio=0.5, min_pages=3).is_noise("Running Header")

    def test_literal_ratio_never_fires(self, pages):
        doc = pages(*["Running Header\n"] * 5)

        assert not NoiseFilter(doc, ratio=2.0, min_pages=1).is_noise("Running Header")


class TestHeadingDetector:

    def test_section_with_colon_at_equal_indentation_is_h3(self, pages):
        outline = HeadingDetector().detect_headings(pages("Section 1: Overview\nbody text follows.\n"))

        assert [(e.level, e.text, e.page) for e in outline] == [("H3", "Section 1: Overview", 0)]

    def test_duplicate_headings_keep_first_occurrence(self, pages):
        doc = pages("Chapter 1\nsome body text.\n", "Chapter 1\nmore body text.\n")
        outline = HeadingDetector().detect_headings(doc)

        assert [(e.text, e.page) for e in outline] == [("Chapter 1", 0)]

    def test_deduplication_uses_cleaned_text(self, pages):
        doc = pages("Chapter 2   Methods\n", "Chapter 2 Methods\n")
        outline = HeadingDetector().detect_headings(doc)

        assert [e.text for e in outline] == ["Chapter 2 Methods"]

    def test_indentation_tracker_follows_accepted_headings(self, pages):
        doc = pages("INTRODUCTION\n    Background Info\nsee the data.\nConclusion Notes\n")
        outline = HeadingDetector().detect_headings(doc)

        assert [(e.level, e.text) for e in outline] == [
            ("H1", "INTRODUCTION"),
            ("H2", "Background Info"),
            ("H1", "Conclusion Notes"),
        ]

    def test_indentation_tracker_resets_per_page(self, pages):
        doc = pages("    Indented Start\n", "    Second Indented\n")
        outline = HeadingDetector().detect_headings(doc)

        assert [(e.level, e.page) for e in outline] == [("H2", 0), ("H2", 1)]

    def test_non_hierarchical_sequences_are_preserved(self, pages):
        doc = pages("SUMMARY\nScope: Limits\nRESULTS\n")
        outline = HeadingDetector().detect_headings(doc)

        assert [e.level for e in outline] == ["H1", "H3", "H1"]

    def test_outline_is_in_page_then_line_order(self, pages):
        doc = pages("Alpha Heading\nBeta Heading\n", "\n", "Gamma Heading\n")
        outline = HeadingDetector().detect_headings(doc)

        assert [(e.text, e.page) for e in outline] == [
            ("Alpha Heading", 0), ("Beta Heading", 0), ("Gamma Heading", 2)
        ]

    def test_page_base_offsets_reported_pages(self, pages):
        doc = pages("Alpha Heading\n", "Gamma Heading\n")
        outline = HeadingDetector(page_base=1).detect_headings(doc)

        assert [e.page for e in outline] == [1, 2]

    def test_line_on_every_page_is_excluded(self, pages):
        doc = pages(*[f"Quarterly Review\nTopic Number {name}\n" for name in ("One", "Two", "Six", "Ten")])
        outline = HeadingDetector().detect_headings(doc)

        assert "Quarterly Review" not in [e.text for e in outline]
        assert len(outline) == 4

    def test_literal_noise_ratio_keeps_repeated_line_once(self, pages):
        doc = pages(*[f"Quarterly Review\nTopic Number {name}\n" for name in ("One", "Two", "Six", "Ten")])
        outline = HeadingDetector(noise_ratio=2.0).detect_headings(doc)

        assert [e.text for e in outline].count("Quarterly Review") == 1

    def test_outline_text_is_normalized_and_unique(self, pages):
        doc = pages(
            "  Chapter 3      Results\n\tAppendix   B  \nChapter 3 Results\n",
            "Appendix B\nDesign   Notes\n",
        )
        texts = [e.text for e in HeadingDetector().detect_headings(doc)]

        assert len(texts) == len(set(texts))
        for text in texts:
            assert text == text.strip()
            assert not re.search(r"\s{2,}", text)


def test_short_heading_contained_in_later_headings_counts_as_noise(pages):
    # "Chapter 1" is a substring of "Chapter 10" and "Chapter 11"
    doc = pages("Chapter 1\nopening text.\n", "Chapter 10 Later\n", "Chapter 11 End\n")

    tightened = HeadingDetector().detect_headings(doc)
    literal = HeadingDetector(noise_ratio=2.0).detect_headings(doc)

    assert [(e.text, e.page) for e in tightened] == [("Chapter 10 Later", 1), ("Chapter 11 End", 2)]
    assert [e.text for e in literal] == ["Chapter 1", "Chapter 10 Later", "Chapter 11 End"]
