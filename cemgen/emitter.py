"""Serializes the emission view of a manifest into the manifest JSON document."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple

from .index import is_relative
from .models import (
    GLOBAL_PACKAGE,
    PUBLIC,
    Attribute,
    ClassDeclaration,
    ClassMember,
    CssPart,
    CssProperty,
    CustomElementDefinition,
    Declaration,
    Event,
    FunctionDeclaration,
    InheritanceEdge,
    Manifest,
    MixinDeclaration,
    Module,
    Parameter,
    Reference,
    Slot,
    VariableDeclaration,
)
from .visibility import emission_view

_Key = Tuple[str, str, str]


def _compact(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Drop unset optionals and empty collections."""
    return {key: value for key, value in payload.items() if value not in (None, False, "", [], {})}


def _type(text: Optional[str]) -> Optional[Dict[str, str]]:
    return {"text": text} if text else None


def _deprecated(value: Optional[str]) -> Any:
    if value is None:
        return None
    return True if value == "true" else value


def reference_document(reference: Optional[Reference]) -> Optional[Dict[str, str]]:
    if reference is None:
        return None
    payload = {"name": reference.name}
    if reference.module is not None:
        payload["module"] = reference.module
    if reference.package is not None:
        payload["package"] = reference.package
    return payload


def edge_document(edge: Optional[InheritanceEdge]) -> Optional[Dict[str, str]]:
    if edge is None:
        return None
    if edge.resolved is not None:
        return reference_document(edge.resolved)
    if edge.specifier is None:
        return {"name": edge.name, "package": GLOBAL_PACKAGE}
    if is_relative(edge.specifier):
        return {"name": edge.name, "module": edge.specifier}
    return {"name": edge.name, "package": edge.specifier}


def _parameter(parameter: Parameter) -> Dict[str, Any]:
    return _compact(
        {
            "name": parameter.name,
            "type": _type(parameter.type_text),
            "default": parameter.default,
            "description": parameter.description,
            "optional": parameter.optional,
            "rest": parameter.rest,
        }
    )


def _member(member: ClassMember) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "kind": member.kind,
        "name": member.name,
        "static": member.static,
        "privacy": member.privacy if member.privacy != PUBLIC else None,
        "description": member.description,
        "deprecated": _deprecated(member.deprecated),
    }
    if member.kind == "method":
        payload["parameters"] = [_parameter(parameter) for parameter in member.parameters]
        payload["return"] = {"type": _type(member.return_type)} if member.return_type else None
    else:
        payload["type"] = _type(member.type_text)
        payload["default"] = member.default
        payload["readonly"] = member.readonly
        payload["attribute"] = member.attribute
        payload["reflects"] = member.reflects
    payload["inheritedFrom"] = reference_document(member.inherited_from)
    return _compact(payload)


def _attribute(attribute: Attribute) -> Dict[str, Any]:
    return _compact(
        {
            "name": attribute.name,
            "type": _type(attribute.type_text),
            "default": attribute.default,
            "description": attribute.description,
            "fieldName": attribute.field_name,
            "deprecated": _deprecated(attribute.deprecated),
            "inheritedFrom": reference_document(attribute.inherited_from),
        }
    )


def _event(event: Event) -> Dict[str, Any]:
    return _compact(
        {
            "name": event.name,
            "type": _type(event.type_text),
            "description": event.description,
            "deprecated": _deprecated(event.deprecated),
            "inheritedFrom": reference_document(event.inherited_from),
        }
    )


def _slot(slot: Slot) -> Dict[str, Any]:
    payload = _compact({"description": slot.description})
    return {"name": slot.name, **payload}


def _css_property(prop: CssProperty) -> Dict[str, Any]:
    return _compact(
        {"name": prop.name, "description": prop.description, "default": prop.default, "syntax": prop.syntax}
    )


def _css_part(part: CssPart) -> Dict[str, Any]:
    return _compact({"name": part.name, "description": part.description})


def declaration_document(declaration: Declaration, tag_name: Optional[str] = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "kind": declaration.kind,
        "name": declaration.name,
        "description": declaration.description,
        "summary": declaration.summary,
        "deprecated": _deprecated(declaration.deprecated),
    }
    if isinstance(declaration, ClassDeclaration):
        if isinstance(declaration, MixinDeclaration):
            payload["parameters"] = [_parameter(parameter) for parameter in declaration.parameters]
        payload.update(
            {
                "cssProperties": [_css_property(item) for item in declaration.css_properties],
                "cssParts": [_css_part(item) for item in declaration.css_parts],
                "slots": [_slot(item) for item in declaration.slots],
                "members": [_member(item) for item in declaration.members],
                "attributes": [_attribute(item) for item in declaration.attributes],
                "events": [_event(item) for item in declaration.events],
                "mixins": [edge_document(edge) for edge in declaration.mixins],
                "superclass": edge_document(declaration.superclass),
                "tagName": tag_name,
                "customElement": tag_name is not None,
            }
        )
    elif isinstance(declaration, FunctionDeclaration):
        payload["parameters"] = [_parameter(parameter) for parameter in declaration.parameters]
        payload["return"] = {"type": _type(declaration.return_type)} if declaration.return_type else None
    elif isinstance(declaration, VariableDeclaration):
        payload["type"] = _type(declaration.type_text)
        payload["default"] = declaration.default
    return _compact(payload)


def _tag_names(manifest: Manifest) -> Dict[_Key, str]:
    tags: Dict[_Key, str] = {}
    for definition in manifest.definitions:
        if definition.declaration is not None:
            tags.setdefault(definition.declaration.key, definition.tag_name)
    return tags


def _definition_export(definition: CustomElementDefinition) -> Dict[str, Any]:
    return {
        "kind": "custom-element-definition",
        "name": definition.tag_name,
        "declaration": reference_document(definition.declaration),
    }


def module_document(module: Module, tags: Dict[_Key, str]) -> Dict[str, Any]:
    declarations: List[Dict[str, Any]] = []
    for declaration in module.declarations:
        key = Reference(name=declaration.name, module=module.path).key
        declarations.append(declaration_document(declaration, tags.get(key)))
    exports: List[Dict[str, Any]] = [
        {"kind": "js", "name": record.name, "declaration": reference_document(record.declaration)}
        for record in module.exports
        if record.declaration is not None
    ]
    exports.extend(
        _definition_export(definition) for definition in module.definitions if definition.declaration is not None
    )
    return _compact(
        {
            "kind": "javascript-module",
            "path": module.path,
            "declarations": declarations,
            "exports": exports,
        }
    )


def to_document(manifest: Manifest, *, filtered: bool = False) -> Dict[str, Any]:
    """Build the manifest document; ``filtered`` marks an already filtered view."""
    view = manifest if filtered else emission_view(manifest)
    tags = _tag_names(view)
    return {
        "schemaVersion": view.schema_version,
        "readme": "",
        "modules": [module_document(module, tags) for module in view.modules],
    }


def serialize(document: Dict[str, Any]) -> str:
    return json.dumps(document, indent=2) + "\n"


def emit(manifest: Manifest) -> str:
    return serialize(to_document(manifest))


__all__ = [
    "declaration_document",
    "edge_document",
    "emit",
    "module_document",
    "reference_document",
    "serialize",
    "to_document",
]
