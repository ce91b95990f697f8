"""Lit / LitElement support: decorators, reactive properties and lifecycle."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Optional

from ..models import Attribute, ClassDeclaration, ClassMember
from .base import ModuleContext, Plugin
from .utils import field_members, set_attribute, set_member, static_value, type_from_constructor

LIT_METHODS = frozenset(
    {
        "requestUpdate",
        "createRenderRoot",
        "scheduleUpdate",
        "performUpdate",
        "shouldUpdate",
        "willUpdate",
        "update",
        "render",
        "firstUpdated",
        "updated",
        "getUpdateComplete",
    }
)
LIT_STATICS = frozenset({"styles", "properties", "shadowRootOptions"})
_STATE_DECORATORS = ("state", "internalProperty")


class LitPlugin(Plugin):
    name = "litelement"

    def analyze_class(self, declaration: ClassDeclaration, context: ModuleContext) -> ClassDeclaration:
        element = context.decorator(declaration.node, "customElement")
        if element is not None and element.arguments:
            tag_name = context.string_value(element.arguments[0])
            if tag_name:
                declaration = replace(declaration, tag_name=tag_name)

        properties = static_value(context, declaration, "properties")
        for name, options_node in context.object_entries(properties).items():
            options = context.object_entries(options_node)
            declaration = self._reactive_property(declaration, context, name, options, state=False)

        for member in list(field_members(declaration)):
            decorator = context.decorator(member.node, "property", *_STATE_DECORATORS)
            if decorator is None:
                continue
            options = context.object_entries(decorator.arguments[0]) if decorator.arguments else {}
            state = decorator.name in _STATE_DECORATORS
            declaration = self._reactive_property(declaration, context, member.name, options, state=state)
        return declaration

    def analyze_member(
        self, member: ClassMember, declaration: ClassDeclaration, context: ModuleContext
    ) -> Optional[ClassMember]:
        if member.static and member.name in LIT_STATICS:
            return None
        if not member.static and member.kind == "method" and member.name in LIT_METHODS:
            return None
        return member

    def _reactive_property(
        self,
        declaration: ClassDeclaration,
        context: ModuleContext,
        name: str,
        options: Dict[str, Any],
        *,
        state: bool,
    ) -> ClassDeclaration:
        member = declaration.member(name) or ClassMember(name=name)
        type_text = member.type_text or type_from_constructor(context.text(options.get("type")))

        if state or context.text(options.get("state")) == "true":
            return set_member(declaration, replace(member, type_text=type_text))

        attribute_node = options.get("attribute")
        if attribute_node is None:
            # Lit lowercases the property name for the default attribute.
            attribute_name: Optional[str] = name.lower()
        elif context.text(attribute_node) == "false":
            attribute_name = None
        else:
            attribute_name = context.string_value(attribute_node) or name.lower()

        reflects = context.text(options.get("reflect")) == "true"
        member = replace(member, type_text=type_text, attribute=attribute_name, reflects=reflects)
        declaration = set_member(declaration, member)
        if attribute_name is None:
            return declaration
        return set_attribute(
            declaration,
            Attribute(
                name=attribute_name,
                field_name=name,
                tags=member.tags,
                type_text=type_text,
                default=member.default,
                description=member.description,
                deprecated=member.deprecated,
            ),
        )


__all__ = ["LIT_METHODS", "LitPlugin"]
