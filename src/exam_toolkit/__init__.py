"""Top-level package for the Exam Toolkit.

Provides subpackages:
- exam_toolkit.segmenter – PDF question segmentation (text + OCR header detection, slicing)
- exam_toolkit.correction – crop correction sessions for extracted questions
- exam_toolkit.persistence – sinks for committing extracted questions and memo answers
- exam_toolkit.gui – PySide6 crop editor and review window
"""

def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from pathlib import Path

    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        try:
            content = pyproject.read_text()
        except OSError:
            content = ""
        for line in content.splitlines():
            if line.strip().startswith("version"):
                # Parse: version = "0.3.0"
                return line.split("=")[1].strip().strip('"').strip("'")

    from importlib.metadata import PackageNotFoundError, version as pkg_version
    try:
        return pkg_version("exam-toolkit")
    except PackageNotFoundError:
        return "0.0.0"

__version__ = _get_version()
__all__: list[str] = ["__version__"]
