"""
Tests for the PyMuPDF-backed document source.

PDFs are built in memory with PyMuPDF, so no fixture files are needed.
"""

import threading

import pytest

from fakes import make_pdf_bytes
from exam_toolkit.segmenter import DocumentSource, PyMuPDFDocumentSource, Viewport, open_document
from exam_toolkit.segmenter.errors import DocumentOpenError


class TestOpenDocument:
    """Tests for open_document()."""

    def test_open_when_path_then_pages_counted(self, sample_pdf):
        with open_document(sample_pdf) as source:
            assert source.page_count == 2
            assert source.name == "paper.pdf"
            assert isinstance(source, DocumentSource)

    def test_open_when_bytes_then_named(self, sample_pdf):
        with open_document(sample_pdf.read_bytes(), name="upload.pdf") as source:
            assert source.page_count == 2
            assert source.name == "upload.pdf"

    def test_open_when_missing_path_then_file_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            open_document(tmp_path / "nope.pdf")

    def test_open_when_empty_bytes_then_open_error(self):
        with pytest.raises(DocumentOpenError, match="Empty"):
            open_document(b"")

    def test_open_when_garbage_file_then_open_error(self, tmp_path):
        path = tmp_path / "broken.pdf"
        path.write_bytes(b"definitely not a pdf")

        with pytest.raises(DocumentOpenError):
            open_document(path)

    def test_close_then_is_closed(self, sample_pdf):
        source = open_document(sample_pdf)

        source.close()
        source.close()

        assert source.is_closed


class TestPyMuPDFDocumentSource:
    """Tests for token extraction, viewports and rendering."""

    @pytest.fixture
    def source(self, sample_pdf):
        with PyMuPDFDocumentSource.from_path(sample_pdf) as src:
            yield src

    def test_text_tokens_then_pdf_space_bottom_up(self, source):
        """A baseline drawn 100pt from the top sits at y = 842 - 100."""
        # Act
        tokens = source.text_tokens(1)

        # Assert
        header = next(t for t in tokens if t.text.startswith("Question 1"))
        assert header.x == pytest.approx(50, abs=1)
        assert header.y == pytest.approx(742, abs=1)
        assert header.font_height == pytest.approx(14, abs=0.5)

    def test_viewport_then_canvas_y_matches_baseline(self, source):
        viewport = source.viewport(1, 1.0)

        assert viewport == Viewport(width=595, height=842, scale=1.0)
        assert viewport.to_canvas_y(742) == pytest.approx(100)
        assert viewport.pdf_width == pytest.approx(595)

    def test_render_then_scaled_bitmap(self, source):
        image = source.render(2, 2.0)

        assert image.size == (1190, 1684)
        assert image.mode == "RGB"

    @pytest.mark.parametrize("page", [0, 3])
    def test_page_out_of_range_then_value_error(self, source, page):
        with pytest.raises(ValueError, match="out of range"):
            source.render(page, 1.0)

    def test_concurrent_renders_then_all_succeed(self, source):
        """Rendering is serialised by the source's lock."""
        # Arrange
        sizes = []

        def work():
            sizes.append(source.render(1, 0.5).size)

        threads = [threading.Thread(target=work) for _ in range(4)]

        # Act
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        # Assert
        assert len(sizes) == 4
        assert len(set(sizes)) == 1


def test_make_pdf_bytes_blank_page_has_no_tokens():
    with open_document(make_pdf_bytes([[]])) as source:
        assert source.text_tokens(1) == []
