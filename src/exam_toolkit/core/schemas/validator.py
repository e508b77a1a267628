"""
Schema Validation Utilities

Validates persisted question records against their JSON schema.

Basic checks run first so the common mistakes (missing fields, wrong
version) give short messages; the full jsonschema pass then catches the
rest.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema

QUESTION_RECORD_SCHEMA_VERSION = 1

_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class ValidationError(Exception):
    """Raised when data fails schema validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def validate_question_record(data: dict[str, Any]) -> None:
    """
    Validate a question record (metadata.json contents).

    Args:
        data: Record dictionary to validate

    Raises:
        ValidationError: If data is invalid
    """
    required = ["schema_version", "question_id", "question_number", "title", "marks", "order"]
    missing = [f for f in required if f not in data]
    if missing:
        raise ValidationError(
            f"Missing required fields: {missing}",
            path="",
            errors=[f"Missing field: {f}" for f in missing],
        )

    version = data.get("schema_version")
    if version != QUESTION_RECORD_SCHEMA_VERSION:
        raise ValidationError(
            f"Unsupported question record schema version: {version} "
            f"(expected {QUESTION_RECORD_SCHEMA_VERSION})",
            path="schema_version",
        )

    schema = _load_schema("question_record")
    validator = jsonschema.Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path))
    if errors:
        first = errors[0]
        raise ValidationError(
            f"Schema validation failed: {first.message}",
            path=".".join(str(p) for p in first.absolute_path),
            errors=[e.message for e in errors],
        )
