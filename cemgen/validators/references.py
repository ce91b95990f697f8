"""Validator that rejects references to declarations missing from the view."""

from __future__ import annotations

from typing import Iterator, List, Optional, Tuple

from ..models import ClassDeclaration, Module, Reference
from .base import ValidationContext, ValidationIssue, Validator


class DanglingReferenceValidator(Validator):
    """Every internal reference must name a declaration of the emitted view."""

    name = "references"

    def validate(self, context: ValidationContext) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        for module in context.view.modules:
            for pointer, reference in _references(module):
                if not context.is_internal(reference) or context.resolves(reference):
                    continue
                target = f"{reference.package + ':' if reference.package else ''}{reference.module}#{reference.name}"
                issues.append(
                    ValidationIssue(
                        path=module.path,
                        pointer=pointer,
                        detail=f"reference to {target} does not resolve to an emitted declaration",
                    )
                )
        return issues


def _references(module: Module) -> Iterator[Tuple[str, Reference]]:
    base = f"/modules/{module.path}"
    for declaration in module.declarations:
        if not isinstance(declaration, ClassDeclaration):
            continue
        prefix = f"{base}/declarations/{declaration.name}"
        if declaration.superclass is not None:
            yield from _maybe(f"{prefix}/superclass", declaration.superclass.resolved)
        for edge in declaration.mixins:
            yield from _maybe(f"{prefix}/mixins/{edge.name}", edge.resolved)
        for member in declaration.members:
            yield from _maybe(f"{prefix}/members/{member.name}/inheritedFrom", member.inherited_from)
        for attribute in declaration.attributes:
            yield from _maybe(f"{prefix}/attributes/{attribute.name}/inheritedFrom", attribute.inherited_from)
        for event in declaration.events:
            yield from _maybe(f"{prefix}/events/{event.name}/inheritedFrom", event.inherited_from)
    for record in module.exports:
        yield from _maybe(f"{base}/exports/{record.name}", record.declaration)
    for definition in module.definitions:
        yield from _maybe(f"{base}/exports/{definition.tag_name}", definition.declaration)


def _maybe(pointer: str, reference: Optional[Reference]) -> Iterator[Tuple[str, Reference]]:
    if reference is not None:
        yield pointer, reference


__all__ = ["DanglingReferenceValidator"]
