"""Stencil component support."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from ..analyzers.classes import kebab_case
from ..models import Attribute, ClassDeclaration, ClassMember, Event
from .base import ModuleContext, Plugin
from .utils import add_event, field_members, set_attribute, set_member

STENCIL_LIFECYCLE = frozenset(
    {
        "componentWillLoad",
        "componentDidLoad",
        "componentShouldUpdate",
        "componentWillUpdate",
        "componentDidUpdate",
        "componentWillRender",
        "componentDidRender",
        "render",
        "hostData",
    }
)
_DROPPED_DECORATORS = ("Event", "Element")


class StencilPlugin(Plugin):
    name = "stencil"

    def analyze_class(self, declaration: ClassDeclaration, context: ModuleContext) -> ClassDeclaration:
        component = context.decorator(declaration.node, "Component")
        if component is not None and component.arguments:
            tag_name = context.string_value(context.object_entries(component.arguments[0]).get("tag"))
            if tag_name:
                declaration = replace(declaration, tag_name=tag_name)

        for member in list(field_members(declaration)):
            prop = context.decorator(member.node, "Prop")
            if prop is not None:
                options = context.object_entries(prop.arguments[0]) if prop.arguments else {}
                attribute_name = context.string_value(options.get("attribute")) or kebab_case(member.name)
                reflects = context.text(options.get("reflect")) == "true"
                declaration = set_member(declaration, replace(member, attribute=attribute_name, reflects=reflects))
                declaration = set_attribute(
                    declaration,
                    Attribute(
                        name=attribute_name,
                        field_name=member.name,
                        tags=member.tags,
                        type_text=member.type_text,
                        default=member.default,
                        description=member.description,
                        deprecated=member.deprecated,
                    ),
                )
                continue

            emitter = context.decorator(member.node, "Event")
            if emitter is not None:
                options = context.object_entries(emitter.arguments[0]) if emitter.arguments else {}
                event_name = context.string_value(options.get("eventName")) or member.name
                declaration = add_event(
                    declaration,
                    Event(
                        name=event_name,
                        tags=member.tags,
                        type_text=_event_type(member.type_text),
                        description=member.description,
                        deprecated=member.deprecated,
                    ),
                )
        return declaration

    def analyze_member(
        self, member: ClassMember, declaration: ClassDeclaration, context: ModuleContext
    ) -> Optional[ClassMember]:
        if member.kind == "method" and not member.static and member.name in STENCIL_LIFECYCLE:
            return None
        if member.node is not None and context.decorator(member.node, *_DROPPED_DECORATORS) is not None:
            return None
        return member


def _event_type(type_text: Optional[str]) -> str:
    # EventEmitter<T> dispatches CustomEvent<T>.
    if type_text and type_text.startswith("EventEmitter<") and type_text.endswith(">"):
        return f"CustomEvent<{type_text[len('EventEmitter<'):-1]}>"
    return "CustomEvent"


__all__ = ["STENCIL_LIFECYCLE", "StencilPlugin"]
