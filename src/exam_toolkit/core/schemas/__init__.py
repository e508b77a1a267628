"""
Schemas Package

JSON schema definitions and validation utilities.
"""

from .validator import (
    QUESTION_RECORD_SCHEMA_VERSION,
    ValidationError,
    validate_question_record,
)

__all__ = [
    "QUESTION_RECORD_SCHEMA_VERSION",
    "ValidationError",
    "validate_question_record",
]
