"""
Module: persistence.directory

Purpose:
    Local filesystem sink. Each committed question gets its own directory
    holding the composite image and a metadata.json record.

    {root}/
    ├── q1/
    │   ├── composite.png    # Question image (absent when no image)
    │   ├── answer.png       # Memo answer, once matched
    │   └── metadata.json    # Validated QuestionRecord fields
    └── q2/ ...

    Directories are named by order, which is unique within a sink, not by
    question number, which repeats across papers.

Key Classes:
    - DirectorySink: QuestionSink over a directory tree

Dependencies:
    - PIL.Image: Image saving
    - core.schemas.validator: Record validation
"""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path
from typing import Any, Dict, List

from PIL import Image

from exam_toolkit.core.schemas.validator import QUESTION_RECORD_SCHEMA_VERSION, validate_question_record

from .matching import StoredQuestion
from .sink import QuestionRecord

logger = logging.getLogger(__name__)

IMAGE_NAME = "composite.png"
ANSWER_NAME = "answer.png"
METADATA_NAME = "metadata.json"


def _atomic_write_image(image: Image.Image, path: Path) -> None:
    """Write image atomically using temp file."""
    path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(mode="wb", suffix=".png", dir=path.parent, delete=False) as f:
        image.save(f, format="PNG", compress_level=1)
        temp_path = Path(f.name)

    temp_path.replace(path)


def _atomic_write_json(data: Dict[str, Any], path: Path) -> None:
    """Write JSON atomically using temp file."""
    path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode="w", suffix=".json", dir=path.parent, delete=False, encoding="utf-8"
    ) as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        temp_path = Path(f.name)

    temp_path.replace(path)


class DirectorySink:
    """
    Stores questions under a root directory.

    Example:
        >>> sink = DirectorySink(Path("out"))
        >>> sink.save_question(QuestionRecord(question_number=1, image=img))
        'file:///.../out/q1'
    """

    def __init__(self, root: Path, *, validate: bool = True):
        self.root = Path(root)
        self.validate = validate

    def question_dir(self, question_id: str) -> Path:
        return self.root / question_id

    def uri_for(self, question_id: str) -> str:
        return self.question_dir(question_id).resolve().as_uri()

    def _metadata(self, record: QuestionRecord, question_id: str) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "schema_version": QUESTION_RECORD_SCHEMA_VERSION,
            "question_id": question_id,
            "question_number": record.question_number,
            "title": record.title,
            "marks": record.marks,
            "order": record.order,
            "extra_text": record.extra_text,
            "image": IMAGE_NAME if record.image is not None else None,
        }
        if record.page is not None:
            data["page"] = record.page
        if record.coordinates is not None:
            data["coordinates"] = record.coordinates.to_dict()
        return data

    def save_question(self, record: QuestionRecord) -> str:
        """
        Write one question.

        Raises:
            ValidationError: If validate=True and the record is invalid.
        """
        question_id = f"q{record.order}"
        metadata = self._metadata(record, question_id)
        if self.validate:
            validate_question_record(metadata)

        qdir = self.question_dir(question_id)
        if record.image is not None:
            _atomic_write_image(record.image, qdir / IMAGE_NAME)
        else:
            # Metadata says "image": null; drop a composite from an earlier save
            (qdir / IMAGE_NAME).unlink(missing_ok=True)
        _atomic_write_json(metadata, qdir / METADATA_NAME)

        logger.debug(f"Saved {record.title} as {question_id}")
        return self.uri_for(question_id)

    def load_metadata(self, question_id: str) -> Dict[str, Any]:
        path = self.question_dir(question_id) / METADATA_NAME
        if not path.exists():
            raise KeyError(f"No stored question {question_id!r} under {self.root}")
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def save_answer(self, question_id: str, image: Image.Image) -> str:
        """
        Attach an answer image to a stored question.

        Raises:
            KeyError: If the question doesn't exist.
        """
        metadata = self.load_metadata(question_id)
        metadata["answer_image"] = ANSWER_NAME
        if self.validate:
            validate_question_record(metadata)

        qdir = self.question_dir(question_id)
        _atomic_write_image(image, qdir / ANSWER_NAME)
        _atomic_write_json(metadata, qdir / METADATA_NAME)
        return (qdir / ANSWER_NAME).resolve().as_uri()

    def stored_questions(self) -> List[StoredQuestion]:
        """All stored questions, sorted by order."""
        stored: List[StoredQuestion] = []
        if not self.root.exists():
            return stored
        for path in self.root.glob(f"q*/{METADATA_NAME}"):
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            stored.append(StoredQuestion(question_id=data["question_id"], title=data["title"], order=data["order"]))
        return sorted(stored, key=lambda s: s.order)

    def __len__(self) -> int:
        return len(self.stored_questions())
