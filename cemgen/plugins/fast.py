"""FAST element support: ``@customElement``, ``@attr`` and ``FASTElement.define``."""

from __future__ import annotations

from dataclasses import replace
from typing import List, Optional

from ..models import Attribute, ClassDeclaration, ClassMember, Declaration, Module
from ..syntax import field, iter_descendants
from .base import ModuleContext, Plugin
from .utils import field_members, set_attribute, set_member

FAST_STATICS = frozenset({"template", "styles", "definition", "shadowOptions", "elementOptions"})
_DEFINE_CALLS = frozenset({"FASTElement.define", "FoundationElement.define"})
_SCOPES = {"class_body", "statement_block"}


class FastPlugin(Plugin):
    name = "fast"

    def analyze_class(self, declaration: ClassDeclaration, context: ModuleContext) -> ClassDeclaration:
        element = context.decorator(declaration.node, "customElement")
        if element is not None and element.arguments:
            argument = element.arguments[0]
            tag_name = context.string_value(argument)
            if tag_name is None:
                tag_name = context.string_value(context.object_entries(argument).get("name"))
            if tag_name:
                declaration = replace(declaration, tag_name=tag_name)

        for member in list(field_members(declaration)):
            decorator = context.decorator(member.node, "attr")
            if decorator is None:
                continue
            options = context.object_entries(decorator.arguments[0]) if decorator.arguments else {}
            attribute_name = context.string_value(options.get("attribute")) or member.name.lower()
            mode = context.string_value(options.get("mode")) or "reflect"
            type_text = "boolean" if mode == "boolean" else member.type_text
            updated = replace(
                member,
                attribute=attribute_name,
                reflects=mode != "fromView",
                type_text=type_text,
            )
            declaration = set_member(declaration, updated)
            declaration = set_attribute(
                declaration,
                Attribute(
                    name=attribute_name,
                    field_name=member.name,
                    tags=member.tags,
                    type_text=type_text,
                    default=member.default,
                    description=member.description,
                    deprecated=member.deprecated,
                ),
            )
        return declaration

    def analyze_member(
        self, member: ClassMember, declaration: ClassDeclaration, context: ModuleContext
    ) -> Optional[ClassMember]:
        if member.static and member.name in FAST_STATICS:
            return None
        return member

    def analyze_module(self, module: Module, context: ModuleContext) -> Module:
        tags = {}
        for call in iter_descendants(context.parsed.root, skip=_SCOPES):
            if call.type != "call_expression":
                continue
            function = field(call, "function")
            if context.text(function) not in _DEFINE_CALLS:
                continue
            arguments = field(call, "arguments")
            args = arguments.named_children if arguments is not None else []
            if len(args) < 2:
                continue
            tag_name = context.string_value(context.object_entries(args[1]).get("name"))
            if tag_name:
                tags[context.text(args[0])] = tag_name
        if not tags:
            return module

        declarations: List[Declaration] = []
        for declaration in module.declarations:
            if isinstance(declaration, ClassDeclaration) and declaration.name in tags and not declaration.tag_name:
                declaration = replace(declaration, tag_name=tags[declaration.name])
            declarations.append(declaration)
        return replace(module, declarations=tuple(declarations))


__all__ = ["FastPlugin"]
