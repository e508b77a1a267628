import os
import sys
from pathlib import Path

import pytest
from PIL import Image

# Add src to sys.path so we can import exam_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

# Widgets are created without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from fakes import (  # noqa: E402
    FakeDocumentSource,
    FakeRecognizer,
    body_tokens,
    header_token,
    make_pdf_bytes,
)


# Common test fixtures
@pytest.fixture
def sample_image():
    """Create a simple test image."""
    return Image.new("RGB", (200, 100), color="white")


@pytest.fixture
def two_page_source():
    """Questions 1 and 2 on page 1, question 3 on page 2."""
    return FakeDocumentSource(
        [
            [header_token("Question 1", 100), *body_tokens(5, 200), header_token("Question 2", 500)],
            [header_token("Question 3", 100), *body_tokens(5, 300)],
        ]
    )


@pytest.fixture
def scanned_source():
    """Two pages with no text layer at all."""
    return FakeDocumentSource([[], []])


@pytest.fixture
def recognizer():
    return FakeRecognizer()


@pytest.fixture
def sample_pdf(tmp_path: Path) -> Path:
    """Real two-page PDF with three keyword headers."""
    data = make_pdf_bytes(
        [
            [
                (50, 100, "Question 1", 14),
                (50, 140, "Describe the water cycle.", 10),
                (50, 420, "Question 2", 14),
                (50, 460, "Explain evaporation.", 10),
            ],
            [
                (50, 100, "Question 3", 14),
                (50, 140, "Label the diagram.", 10),
            ],
        ]
    )
    path = tmp_path / "paper.pdf"
    path.write_bytes(data)
    return path
