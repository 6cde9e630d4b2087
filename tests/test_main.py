import json
import logging

import pytest

import main
from main import BatchProcessor, parse_arguments
from textoutline.outline_extractor import OutlineExtractor

REPORT = "SYSTEMS HANDBOOK\nChapter 1 Basics\nsome body text.\n\fChapter 2 Advanced\n\f"
NOTES = "meeting notes\n\fAppendix A\n\f"


@pytest.fixture
def batch_dirs(tmp_path, make_pdf):
    input_dir = tmp_path / "input"
    output_dir = tmp_path / "output"
    make_pdf("report.pdf", directory=input_dir)
    make_pdf("NOTES.PDF", directory=input_dir)
    make_pdf("corrupt.pdf", b"this is not a pdf", directory=input_dir)
    return input_dir, output_dir


@pytest.fixture
def extractor(canned_extractor):
    return canned_extractor({"report.pdf": REPORT, "NOTES.PDF": NOTES, "blank.pdf": ""})


def test_batch_writes_one_json_per_good_pdf(batch_dirs, extractor):
    input_dir, output_dir = batch_dirs
    processor = BatchProcessor(input_dir, output_dir, OutlineExtractor(extractor=extractor), max_workers=3)

    success = processor.process_all_pdfs()

    assert success is False
    assert sorted(p.name for p in output_dir.iterdir()) == ["NOTES.json", "report.json"]

    report = json.loads((output_dir / "report.json").read_text(encoding="utf-8"))
    assert report == {
        "title": "SYSTEMS HANDBOOK",
        "outline": [
            {"level": "H1", "text": "SYSTEMS HANDBOOK", "page": 0},
            {"level": "H2", "text": "Chapter 1 Basics", "page": 0},
            {"level": "H2", "text": "Chapter 2 Advanced", "page": 1},
        ],
    }

    notes = json.loads((output_dir / "NOTES.json").read_text(encoding="utf-8"))
    assert notes["title"] == "Untitled"


def test_corrupt_pdf_is_reported_and_siblings_succeed(batch_dirs, extractor):
    input_dir, output_dir = batch_dirs
    processor = BatchProcessor(input_dir, output_dir, OutlineExtractor(extractor=extractor))

    processor.process_all_pdfs()

    messages = processor.error_handler.get_error_messages()
    assert len(messages) == 1
    assert "corrupt.pdf" in messages[0]
    assert "ExtractionFailed" in messages[0]
    assert "corrupt.pdf" not in extractor.calls
    assert processor.successful_files == 2
    assert processor.failed_files == 1
    assert not (output_dir / "corrupt.json").exists()


def test_empty_extraction_is_reported(tmp_path, make_pdf, extractor):
    input_dir = tmp_path / "input"
    make_pdf("blank.pdf", directory=input_dir)
    processor = BatchProcessor(input_dir, tmp_path / "output", OutlineExtractor(extractor=extractor))

    assert processor.process_all_pdfs() is False
    assert "EmptyDocument" in processor.error_handler.get_error_messages()[0]


def test_empty_input_directory_succeeds(tmp_path, extractor):
    input_dir = tmp_path / "input"
    input_dir.mkdir()

    processor = BatchProcessor(input_dir, tmp_path / "output", OutlineExtractor(extractor=extractor))

    assert processor.process_all_pdfs() is True


def test_parse_arguments_defaults():
    args = parse_arguments([])

    assert args.extractor == "pdftotext"
    assert args.page_base == 0
    assert args.noise_ratio == 0.5
    assert args.workers is None


def test_parse_arguments_rejects_bad_workers():
    with pytest.raises(SystemExit):
        parse_arguments(["--workers", "0"])


class TestMain:

    def run(self, argv):
        with pytest.raises(SystemExit) as exc_info:
            main.main(argv)
        return exc_info.value.code

    def test_exit_code_one_when_any_document_fails(self, batch_dirs, extractor, monkeypatch):
        input_dir, output_dir = batch_dirs
        monkeypatch.setattr(main, "create_extractor", lambda name, timeout: extractor)

        code = self.run(["-i", str(input_dir), "-o", str(output_dir), "--page-base", "1"])

        assert code == 1
        report = json.loads((output_dir / "report.json").read_text(encoding="utf-8"))
        assert [entry["page"] for entry in report["outline"]] == [1, 1, 2]

    def test_exit_code_zero_when_all_documents_succeed(self, tmp_path, make_pdf, extractor, monkeypatch):
        input_dir = tmp_path / "input"
        make_pdf("report.pdf", directory=input_dir)
        monkeypatch.setattr(main, "create_extractor", lambda name, timeout: extractor)

        assert self.run(["-i", str(input_dir), "-o", str(tmp_path / "out")]) == 0
        assert (tmp_path / "out" / "report.json").is_file()

    def test_missing_input_directory_is_setup_error(self, tmp_path):
        assert self.run(["-i", str(tmp_path / "absent"), "-o", str(tmp_path / "out")]) == 2

    def test_output_path_that_is_a_file_is_setup_error(self, tmp_path):
        (tmp_path / "input").mkdir()
        (tmp_path / "out").write_text("occupied")

        assert self.run(["-i", str(tmp_path / "input"), "-o", str(tmp_path / "out")]) == 2


def test_pdfs_differing_only_in_extension_case_do_not_share_output(tmp_path, make_pdf, canned_extractor):
    input_dir = tmp_path / "input"
    output_dir = tmp_path / "output"
    make_pdf("report.PDF", directory=input_dir)
    make_pdf("report.pdf", directory=input_dir)
    extractor = canned_extractor({
        "report.PDF": "UPPER CASE EDITION\n\f",
        "report.pdf": "LOWER CASE EDITION\n\f",
    })
    processor = BatchProcessor(input_dir, output_dir, OutlineExtractor(extractor=extractor))

    assert processor.process_all_pdfs() is False

    assert [p.name for p in output_dir.iterdir()] == ["report.json"]
    written = json.loads((output_dir / "report.json").read_text(encoding="utf-8"))
    assert written["title"] == "UPPER CASE EDITION"
    assert extractor.calls == ["report.PDF"]
    assert processor.successful_files == 1
    assert processor.failed_files == 1

    messages = processor.error_handler.get_error_messages()
    assert len(messages) == 1
    assert messages[0].startswith("error processing report.pdf: WriteFailed")
    assert "report.PDF" in messages[0]


def test_final_statistics_include_timing(tmp_path, make_pdf, extractor, caplog):
    caplog.set_level(logging.INFO, logger="main")
    input_dir = tmp_path / "input"
    make_pdf("report.pdf", directory=input_dir)
    processor = BatchProcessor(input_dir, tmp_path / "output", OutlineExtractor(extractor=extractor))

    processor.process_all_pdfs()

    assert "Throughput:" in caplog.text
    assert "Per-file time: min" in caplog.text
