"""JSON Schema validation of the emitted manifest document."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

from jsonschema import Draft7Validator

from .base import ValidationContext, ValidationIssue, Validator

SCHEMA_PATH = Path(__file__).resolve().parent.parent / "schema" / "custom-elements.schema.json"


@lru_cache(maxsize=1)
def load_schema() -> Dict[str, Any]:
    with SCHEMA_PATH.open(encoding="utf-8") as handle:
        return json.load(handle)


class SchemaValidator(Validator):
    """Checks the document against the bundled Draft 7 manifest schema."""

    name = "schema"

    def __init__(self, schema: Dict[str, Any] | None = None) -> None:
        self._validator = Draft7Validator(schema if schema is not None else load_schema())

    def validate(self, context: ValidationContext) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        errors = sorted(
            self._validator.iter_errors(context.document),
            key=lambda item: [str(part) for part in item.path],
        )
        for error in errors:
            path = list(error.path)
            module_path = ""
            if len(path) > 1 and path[0] == "modules" and isinstance(path[1], int):
                modules = context.document.get("modules", [])
                if path[1] < len(modules):
                    module_path = modules[path[1]].get("path", "")
            pointer = "/" + "/".join(str(part) for part in path) if path else "/"
            issues.append(ValidationIssue(path=module_path, pointer=pointer, detail=error.message))
        return issues


__all__ = ["SCHEMA_PATH", "SchemaValidator", "load_schema"]
