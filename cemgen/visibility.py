"""Visibility filtering for ``@ignore`` and ``@internal`` annotations.

``@ignore`` removes a construct before linking, as if it was never written.
``@internal`` keeps the construct available for linking and only hides it in
the emitted view.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List, Optional, Set, Tuple, TypeVar

from .models import (
    ClassDeclaration,
    Declaration,
    InheritanceEdge,
    Manifest,
    Module,
    Reference,
)

IGNORE = "ignore"
INTERNAL = "internal"

_T = TypeVar("_T")


def _without(items: Iterable[_T], tag: str) -> Tuple[_T, ...]:
    return tuple(item for item in items if tag not in getattr(item, "tags", ()))


def _filter_class(declaration: ClassDeclaration, tag: str) -> ClassDeclaration:
    members = _without(declaration.members, tag)
    kept_fields = {member.name for member in members if not member.static}
    removed_fields = {
        member.name for member in declaration.members if not member.static and member.name not in kept_fields
    }
    # An attribute backed by a removed field goes with it.
    attributes = tuple(
        attribute
        for attribute in _without(declaration.attributes, tag)
        if attribute.field_name is None or attribute.field_name not in removed_fields
    )
    return replace(
        declaration,
        members=members,
        attributes=attributes,
        events=_without(declaration.events, tag),
    )


def apply_ignore(module: Module) -> Module:
    """Drop ``@ignore`` constructs and everything that names them."""
    ignored: Set[str] = set(module.ignored_names)
    declarations: List[Declaration] = []
    for declaration in module.declarations:
        if IGNORE in declaration.tags:
            ignored.add(declaration.name)
            continue
        if isinstance(declaration, ClassDeclaration):
            declaration = _filter_class(declaration, IGNORE)
        declarations.append(declaration)

    exports = tuple(
        record
        for record in module.exports
        if record.specifier is not None or record.local_name not in ignored
    )
    definitions = tuple(
        definition for definition in module.definitions if definition.class_name not in ignored
    )
    return replace(
        module,
        declarations=tuple(declarations),
        exports=exports,
        definitions=definitions,
        ignored_names=frozenset(ignored),
    )


def hidden_references(manifest: Manifest) -> Set[Tuple[str, str, str]]:
    """Keys of local declarations marked ``@internal``."""
    hidden: Set[Tuple[str, str, str]] = set()
    for module in manifest.modules:
        for declaration in module.declarations:
            if INTERNAL in declaration.tags:
                hidden.add(Reference(name=declaration.name, module=module.path).key)
    return hidden


def emission_view(manifest: Manifest) -> Manifest:
    """Return the manifest with ``@internal`` constructs and references to them removed."""
    hidden = hidden_references(manifest)
    modules = tuple(_emission_module(module, hidden) for module in manifest.modules)
    definitions = tuple(
        definition
        for definition in manifest.definitions
        if definition.declaration is None or definition.declaration.key not in hidden
    )
    return replace(manifest, modules=modules, definitions=definitions)


def _emission_module(module: Module, hidden: Set[Tuple[str, str, str]]) -> Module:
    declarations: List[Declaration] = []
    for declaration in module.declarations:
        if INTERNAL in declaration.tags:
            continue
        if isinstance(declaration, ClassDeclaration):
            declaration = _strip_hidden(_filter_class(declaration, INTERNAL), hidden)
        declarations.append(declaration)

    exports = tuple(
        record
        for record in module.exports
        if record.declaration is None or record.declaration.key not in hidden
    )
    definitions = tuple(
        definition
        for definition in module.definitions
        if definition.declaration is None or definition.declaration.key not in hidden
    )
    return replace(module, declarations=tuple(declarations), exports=exports, definitions=definitions)


def _strip_hidden(declaration: ClassDeclaration, hidden: Set[Tuple[str, str, str]]) -> ClassDeclaration:
    def _reference(reference: Optional[Reference]) -> Optional[Reference]:
        if reference is not None and reference.key in hidden:
            return None
        return reference

    def _edge(edge: Optional[InheritanceEdge]) -> Optional[InheritanceEdge]:
        if edge is None or edge.resolved is None or edge.resolved.key not in hidden:
            return edge
        return None

    superclass = _edge(declaration.superclass)
    mixins = tuple(edge for edge in (_edge(item) for item in declaration.mixins) if edge is not None)
    return replace(
        declaration,
        superclass=superclass,
        mixins=mixins,
        members=tuple(replace(item, inherited_from=_reference(item.inherited_from)) for item in declaration.members),
        attributes=tuple(
            replace(item, inherited_from=_reference(item.inherited_from)) for item in declaration.attributes
        ),
        events=tuple(replace(item, inherited_from=_reference(item.inherited_from)) for item in declaration.events),
    )


__all__ = ["IGNORE", "INTERNAL", "apply_ignore", "emission_view", "hidden_references"]
