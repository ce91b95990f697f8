"""GitHub Catalyst support: ``@controller`` tag names and ``@attr`` fields."""

from __future__ import annotations

import re
from dataclasses import replace

from ..analyzers.classes import kebab_case
from ..models import Attribute, ClassDeclaration
from .base import ModuleContext, Plugin
from .utils import field_members, set_attribute, set_member


def controller_tag_name(class_name: str) -> str:
    """``HelloWorldElement`` becomes ``hello-world``."""
    base = re.sub(r"Element$", "", class_name) or class_name
    return kebab_case(base)


class CatalystPlugin(Plugin):
    name = "catalyst"

    def analyze_class(self, declaration: ClassDeclaration, context: ModuleContext) -> ClassDeclaration:
        if context.decorator(declaration.node, "controller") is not None and not declaration.tag_name:
            declaration = replace(declaration, tag_name=controller_tag_name(declaration.name))

        for member in list(field_members(declaration)):
            if context.decorator(member.node, "attr") is None:
                continue
            attribute_name = f"data-{kebab_case(member.name)}"
            declaration = set_member(declaration, replace(member, attribute=attribute_name, reflects=True))
            declaration = set_attribute(
                declaration,
                Attribute(
                    name=attribute_name,
                    field_name=member.name,
                    tags=member.tags,
                    type_text=member.type_text,
                    default=member.default,
                    description=member.description,
                ),
            )
        return declaration


__all__ = ["CatalystPlugin", "controller_tag_name"]
