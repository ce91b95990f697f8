"""Tests for cemgen.emitter."""

from __future__ import annotations

import json

from cemgen.emitter import declaration_document, edge_document, emit, serialize, to_document
from cemgen.models import (
    Attribute,
    ClassDeclaration,
    ClassMember,
    CustomElementDefinition,
    Event,
    ExportRecord,
    FunctionDeclaration,
    InheritanceEdge,
    Manifest,
    Module,
    Parameter,
    Reference,
    Slot,
    VariableDeclaration,
)


def test_edge_document_variants() -> None:
    assert edge_document(InheritanceEdge(name="HTMLElement")) == {"name": "HTMLElement", "package": "global:"}
    assert edge_document(InheritanceEdge(name="LitElement", specifier="lit")) == {
        "name": "LitElement",
        "package": "lit",
    }
    assert edge_document(InheritanceEdge(name="Base", specifier="./missing.js")) == {
        "name": "Base",
        "module": "./missing.js",
    }
    resolved = InheritanceEdge(name="Base", specifier="./base.js", resolved=Reference(name="Base", module="src/base.js"))
    assert edge_document(resolved) == {"name": "Base", "module": "src/base.js"}
    assert edge_document(None) is None


def test_class_document_omits_defaults() -> None:
    declaration = ClassDeclaration(
        name="MyEl",
        description="An element.",
        members=(
            ClassMember(name="label", type_text="string", default="''", attribute="label", reflects=True),
            ClassMember(name="_secret", privacy="private"),
            ClassMember(
                name="go",
                kind="method",
                parameters=(Parameter(name="speed", type_text="number", optional=True),),
                return_type="void",
            ),
        ),
        attributes=(Attribute(name="label", field_name="label"),),
        events=(Event(name="go", type_text="CustomEvent"),),
        slots=(Slot(name=""),),
        superclass=InheritanceEdge(name="HTMLElement"),
    )

    document = declaration_document(declaration, "my-el")

    assert document == {
        "kind": "class",
        "name": "MyEl",
        "description": "An element.",
        "slots": [{"name": ""}],
        "members": [
            {
                "kind": "field",
                "name": "label",
                "type": {"text": "string"},
                "default": "''",
                "attribute": "label",
                "reflects": True,
            },
            {"kind": "field", "name": "_secret", "privacy": "private"},
            {
                "kind": "method",
                "name": "go",
                "parameters": [{"name": "speed", "type": {"text": "number"}, "optional": True}],
                "return": {"type": {"text": "void"}},
            },
        ],
        "attributes": [{"name": "label", "fieldName": "label"}],
        "events": [{"name": "go", "type": {"text": "CustomEvent"}}],
        "superclass": {"name": "HTMLElement", "package": "global:"},
        "tagName": "my-el",
        "customElement": True,
    }


def test_variable_and_function_documents() -> None:
    variable = VariableDeclaration(name="answer", type_text="number", default="42", deprecated="true")
    function = FunctionDeclaration(name="add", parameters=(Parameter(name="a"), Parameter(name="rest", rest=True)))

    assert declaration_document(variable) == {
        "kind": "variable",
        "name": "answer",
        "deprecated": True,
        "type": {"text": "number"},
        "default": "42",
    }
    assert declaration_document(function) == {
        "kind": "function",
        "name": "add",
        "parameters": [{"name": "a"}, {"name": "rest", "rest": True}],
    }


def test_to_document_adds_definition_exports_after_js_exports() -> None:
    reference = Reference(name="MyEl", module="src/my-el.js")
    module = Module(
        path="src/my-el.js",
        declarations=(ClassDeclaration(name="MyEl"),),
        exports=(
            ExportRecord(name="MyEl", local_name="MyEl", declaration=reference),
            ExportRecord(name="Unlinked", local_name="Unlinked"),
        ),
        definitions=(
            CustomElementDefinition(tag_name="my-el", class_name="MyEl", module="src/my-el.js", declaration=reference),
        ),
    )
    manifest = Manifest(modules=(module,), definitions=module.definitions)

    document = to_document(manifest)

    assert document["schemaVersion"] == "1.0.0"
    assert [export["kind"] for export in document["modules"][0]["exports"]] == ["js", "custom-element-definition"]
    assert document["modules"][0]["declarations"][0]["tagName"] == "my-el"


def test_emit_is_stable_json_with_trailing_newline() -> None:
    manifest = Manifest(modules=(Module(path="src/empty.js"),))

    text = emit(manifest)

    assert text.endswith("}\n")
    assert json.loads(text) == {
        "schemaVersion": "1.0.0",
        "readme": "",
        "modules": [{"kind": "javascript-module", "path": "src/empty.js"}],
    }
    assert serialize(json.loads(text)) == text
