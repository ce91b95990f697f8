"""Tests for the JSON Schema validator."""

from __future__ import annotations

from cemgen.models import Manifest
from cemgen.validators import SchemaValidator, build_context


def _issues(document):
    return SchemaValidator().validate(build_context(Manifest(), document))


def test_valid_document_passes() -> None:
    document = {
        "schemaVersion": "1.0.0",
        "readme": "",
        "modules": [
            {
                "kind": "javascript-module",
                "path": "src/a.js",
                "declarations": [{"kind": "class", "name": "A", "tagName": "x-a", "customElement": True}],
                "exports": [
                    {"kind": "js", "name": "A", "declaration": {"name": "A", "module": "src/a.js"}},
                    {"kind": "custom-element-definition", "name": "x-a", "declaration": {"name": "A", "module": "src/a.js"}},
                ],
            }
        ],
    }

    assert _issues(document) == []


def test_invalid_document_reports_pointer_and_module() -> None:
    document = {
        "schemaVersion": "1.0.0",
        "modules": [
            {
                "kind": "javascript-module",
                "path": "src/a.js",
                "exports": [{"kind": "js", "name": "A"}],
            }
        ],
    }

    (issue,) = _issues(document)

    assert issue.path == "src/a.js"
    assert issue.pointer == "/modules/0/exports/0"
    assert "declaration" in issue.detail


def test_missing_modules_is_reported_at_root() -> None:
    (issue,) = _issues({"schemaVersion": "1.0.0"})

    assert issue.path == ""
    assert issue.pointer == "/"
