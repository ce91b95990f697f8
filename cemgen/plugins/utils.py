"""Helpers shared by the framework plugins."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Iterator, Optional

from ..models import Attribute, ClassDeclaration, ClassMember, Event
from ..syntax import field, has_keyword, unwrap_expression
from .base import ModuleContext

JS_CONSTRUCTOR_TYPES = {
    "String": "string",
    "Number": "number",
    "Boolean": "boolean",
    "Array": "array",
    "Object": "object",
}

_FIELD_NODES = {"field_definition", "public_field_definition"}


def set_member(declaration: ClassDeclaration, member: ClassMember) -> ClassDeclaration:
    """Replace the member with the same key, or add it after the last field."""
    members = list(declaration.members)
    for index, existing in enumerate(members):
        if existing.key == member.key:
            members[index] = member
            return replace(declaration, members=tuple(members))
    position = 0
    for index, existing in enumerate(members):
        if existing.kind == "field":
            position = index + 1
    members.insert(position, member)
    return replace(declaration, members=tuple(members))


def set_attribute(declaration: ClassDeclaration, attribute: Attribute) -> ClassDeclaration:
    attributes = list(declaration.attributes)
    for index, existing in enumerate(attributes):
        if existing.name == attribute.name:
            attributes[index] = replace(
                attribute,
                description=attribute.description or existing.description,
                default=attribute.default or existing.default,
                tags=attribute.tags | existing.tags,
            )
            return replace(declaration, attributes=tuple(attributes))
    attributes.append(attribute)
    return replace(declaration, attributes=tuple(attributes))


def add_event(declaration: ClassDeclaration, event: Event) -> ClassDeclaration:
    if any(existing.name == event.name for existing in declaration.events):
        return declaration
    return replace(declaration, events=declaration.events + (event,))


def static_value(context: ModuleContext, declaration: ClassDeclaration, name: str) -> Any:
    """Return the value of ``static name = value`` or ``static get name() { return value }``."""
    body = field(declaration.node, "body")
    if body is None:
        return None
    for member in body.named_children:
        if not has_keyword(member, "static"):
            continue
        name_node = field(member, "name", "property")
        if name_node is None or context.text(name_node) != name:
            continue
        if member.type in _FIELD_NODES:
            return unwrap_expression(field(member, "value"))
        if member.type == "method_definition" and has_keyword(member, "get"):
            return unwrap_expression(returned_expression(field(member, "body")))
    return None


def returned_expression(body: Any) -> Any:
    if body is None:
        return None
    for statement in body.named_children:
        if statement.type == "return_statement" and statement.named_children:
            return statement.named_children[0]
    return None


def field_members(declaration: ClassDeclaration) -> Iterator[ClassMember]:
    for member in declaration.members:
        if member.kind == "field" and not member.static and member.node is not None:
            yield member


def type_from_constructor(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    return JS_CONSTRUCTOR_TYPES.get(text.strip())


__all__ = [
    "JS_CONSTRUCTOR_TYPES",
    "add_event",
    "field_members",
    "returned_expression",
    "set_attribute",
    "set_member",
    "static_value",
    "type_from_constructor",
]
