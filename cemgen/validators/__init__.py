"""Validation of the merged manifest before it is emitted."""

from .base import (
    ManifestValidationError,
    ValidationContext,
    ValidationIssue,
    Validator,
    build_context,
)
from .references import DanglingReferenceValidator
from .schema import SchemaValidator


def default_validators() -> list[Validator]:
    return [DanglingReferenceValidator(), SchemaValidator()]


__all__ = [
    "DanglingReferenceValidator",
    "ManifestValidationError",
    "SchemaValidator",
    "ValidationContext",
    "ValidationIssue",
    "Validator",
    "build_context",
    "default_validators",
]
