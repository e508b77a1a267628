"""
Tests for the command line entry point.

Runs main() with argv lists against real PDFs built with PyMuPDF.
"""

import json

import pytest
from PIL import Image

from fakes import FakeDocumentSource, page_shade
from exam_toolkit.cli import EXIT_OK, EXIT_OPEN_FAILED, EXIT_USAGE, build_parser, config_from_args, main, run_crop
from exam_toolkit.persistence import DirectorySink


class TestRender:
    """Tests for the render command."""

    def test_render_then_png_written_at_scale(self, sample_pdf, tmp_path):
        out = tmp_path / "out" / "page1.png"

        code = main(["render", str(sample_pdf), "--page", "1", "--scale", "1.0", "-o", str(out)])

        assert code == EXIT_OK
        with Image.open(out) as img:
            assert img.size == (595, 842)

    def test_render_when_page_out_of_range_then_usage_error(self, sample_pdf, tmp_path):
        out = tmp_path / "page9.png"

        code = main(["render", str(sample_pdf), "--page", "9", "-o", str(out)])

        assert code == EXIT_USAGE
        assert not out.exists()


class TestCrop:
    """Tests for the crop command and run_crop()."""

    def test_crop_when_two_rects_then_stitched(self, sample_pdf, tmp_path):
        # Arrange
        out = tmp_path / "crop.png"

        # Act
        code = main([
            "crop", str(sample_pdf), "--page", "1", "--scale", "1.0",
            "--rect", "0", "0", "595", "100",
            "--rect", "0", "200", "300", "150",
            "-o", str(out),
        ])

        # Assert
        assert code == EXIT_OK
        with Image.open(out) as img:
            assert img.size == (595, 250)

    def test_crop_when_page_missing_then_usage_error(self, sample_pdf, tmp_path):
        code = main([
            "crop", str(sample_pdf), "--page", "5", "--rect", "0", "0", "10", "10", "-o", str(tmp_path / "x.png"),
        ])

        assert code == EXIT_USAGE

    def test_run_crop_then_slices_in_order(self):
        source = FakeDocumentSource([[], []])

        image = run_crop(source, 2, [(0, 0, 600, 80), (0, 400, 600, 120)], scale=1.0)

        assert image.size == (600, 200)
        assert image.getpixel((10, 10)) == (page_shade(2),) * 3


class TestSegment:
    """Tests for the segment command."""

    def test_segment_then_questions_stored(self, sample_pdf, tmp_path, capsys):
        # Arrange
        store = tmp_path / "store"

        # Act
        code = main(["segment", str(sample_pdf), "--no-ocr", "-o", str(store)])

        # Assert
        assert code == EXIT_OK
        assert sorted(p.name for p in store.iterdir()) == ["q1", "q2", "q3"]
        assert (store / "q1" / "metadata.json").exists()
        assert "Saved 3 questions" in capsys.readouterr().out

    def test_segment_twice_then_orders_continue(self, sample_pdf, tmp_path):
        store = tmp_path / "store"
        main(["segment", str(sample_pdf), "--no-ocr", "-o", str(store)])

        main(["segment", str(sample_pdf), "--no-ocr", "-o", str(store)])

        assert len(DirectorySink(store)) == 6

    def test_segment_memo_then_answers_attached(self, sample_pdf, tmp_path):
        """A memo with matching numbers attaches one answer per stored question."""
        # Arrange
        store = tmp_path / "store"
        main(["segment", str(sample_pdf), "--no-ocr", "-o", str(store)])

        # Act
        code = main(["segment", str(sample_pdf), "--no-ocr", "--memo", "-o", str(store)])

        # Assert
        assert code == EXIT_OK
        sink = DirectorySink(store)
        for qid in ("q1", "q2", "q3"):
            assert sink.load_metadata(qid)["answer_image"] == "answer.png"
        assert len(sink) == 3

    def test_segment_with_diagnostics_then_report_written(self, sample_pdf, tmp_path):
        report = tmp_path / "reports" / "diag.json"

        main(["segment", str(sample_pdf), "--no-ocr", "-o", str(tmp_path / "store"), "--diagnostics", str(report)])

        data = json.loads(report.read_text(encoding="utf-8"))
        assert data["document"] == "paper.pdf"
        assert data["total_issues"] == 0

    def test_segment_when_not_a_pdf_then_open_failed(self, tmp_path, capsys):
        path = tmp_path / "notes.pdf"
        path.write_text("hello", encoding="utf-8")

        code = main(["segment", str(path), "-o", str(tmp_path / "store")])

        assert code == EXIT_OPEN_FAILED
        assert "Invalid file" in capsys.readouterr().err

    def test_segment_when_missing_file_then_open_failed(self, tmp_path):
        code = main(["segment", str(tmp_path / "missing.pdf"), "-o", str(tmp_path / "store")])

        assert code == EXIT_OPEN_FAILED


class TestConfigFromArgs:
    """Tests for mapping flags to SegmentationConfig."""

    def test_defaults_then_default_config(self):
        args = build_parser().parse_args(["segment", "a.pdf", "-o", "out"])

        config = config_from_args(args)

        assert config.reference_scale == 1.6
        assert config.ocr.enabled
        assert config.headers.strict

    def test_overrides_then_applied(self):
        args = build_parser().parse_args([
            "segment", "a.pdf", "-o", "out",
            "--reference-scale", "2", "--ocr-scale", "1.5", "--max-ocr-pages", "3",
            "--no-ocr", "--lenient-headers",
        ])

        config = config_from_args(args)

        assert config.reference_scale == 2.0
        assert (config.ocr.scale, config.ocr.max_pages, config.ocr.enabled) == (1.5, 3, False)
        assert not config.headers.strict

    def test_missing_command_then_exits(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])
