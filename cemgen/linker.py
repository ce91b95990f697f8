"""Cross-module linking: inheritance edges, flattening and registrations."""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, FrozenSet, List, Optional, Sequence, Set, Tuple

from .diagnostics import CYCLIC_INHERITANCE, UNRESOLVED_REFERENCE, Diagnostic, info, warning
from .index import ModuleIndex, is_platform_base
from .logging import get_logger
from .models import (
    ClassDeclaration,
    CustomElementDefinition,
    Declaration,
    InheritanceEdge,
    Module,
    Reference,
)

logger = get_logger("linker")

_Key = Tuple[str, str, str]


class Linker:
    """Resolves names across modules and flattens inherited API surface.

    Linking runs in two passes over every module: first each inheritance
    edge and registration is resolved to a ``Reference``, then each class is
    flattened with the resolved edges. Flattened classes are memoized so a
    base shared by many subclasses is walked once.
    """

    def __init__(self, index: ModuleIndex) -> None:
        self._index = index
        self._diagnostics: Dict[str, List[Diagnostic]] = {}
        self._resolved: Dict[_Key, Tuple[Module, ClassDeclaration]] = {}
        self._memo: Dict[_Key, ClassDeclaration] = {}
        self._reported_cycles: Set[FrozenSet[_Key]] = set()

    def resolve_name(self, module: Module, name: str, specifier: Optional[str] = None) -> Optional[Reference]:
        """Resolve ``name`` as seen from ``module``.

        Lookup order: a declaration of the module, then the import the name
        came from (chasing re-exports), then any module exporting the name.
        """
        if module.declaration(name) is not None:
            return Reference(name=name, module=module.path, package=module.package)

        head, _, tail = name.partition(".")
        record = module.import_for(head)
        if record is not None:
            if record.imported_name == "*":
                if not tail:
                    return None
                return self._index.resolve_from(module, record.specifier, tail)
            return self._index.resolve_from(module, record.specifier, record.imported_name)
        if specifier is not None:
            return self._index.resolve_from(module, specifier, name)
        return self._index.find_exporter(name)

    def link(self, modules: Sequence[Module]) -> List[Module]:
        with_edges = [self._resolve_edges(module) for module in modules]
        for module in with_edges:
            for declaration in module.class_declarations():
                key = Reference(name=declaration.name, module=module.path).key
                self._resolved[key] = (module, declaration)

        linked: List[Module] = []
        for module in with_edges:
            declarations: List[Declaration] = []
            for declaration in module.declarations:
                if isinstance(declaration, ClassDeclaration):
                    declaration = self._flatten(module, declaration, [])
                declarations.append(declaration)
            linked.append(replace(module, declarations=tuple(declarations)))
        # Cycles can be reported against a module flattened earlier in the loop.
        return [module.with_diagnostics(*self._diagnostics.pop(module.path, [])) for module in linked]

    # ------------------------------------------------------------------
    # Pass one: edges and registrations

    def _resolve_edges(self, module: Module) -> Module:
        declarations: List[Declaration] = []
        for declaration in module.declarations:
            if isinstance(declaration, ClassDeclaration):
                superclass = self._resolve_edge(module, declaration, declaration.superclass)
                mixins = tuple(self._resolve_edge(module, declaration, edge) for edge in declaration.mixins)
                declaration = replace(declaration, superclass=superclass, mixins=mixins)
            declarations.append(declaration)

        definitions: List[CustomElementDefinition] = []
        for definition in module.definitions:
            reference = self.resolve_name(module, definition.class_name)
            if reference is None or not self._index.is_internal(reference):
                self._report(
                    warning(
                        module.path,
                        f"custom element '{definition.tag_name}' registers unknown class "
                        f"'{definition.class_name}'; registration dropped",
                        UNRESOLVED_REFERENCE,
                    )
                )
                continue
            definitions.append(replace(definition, declaration=reference))
        return replace(module, declarations=tuple(declarations), definitions=tuple(definitions))

    def _resolve_edge(
        self, module: Module, declaration: ClassDeclaration, edge: Optional[InheritanceEdge]
    ) -> Optional[InheritanceEdge]:
        if edge is None:
            return None
        reference = self.resolve_name(module, edge.name, edge.specifier)
        if reference is not None and self._index.is_internal(reference):
            return replace(edge, resolved=reference)
        if reference is None and not is_platform_base(edge.name) and not self._imported_externally(module, edge):
            self._report(
                info(
                    module.path,
                    f"could not resolve '{edge.name}' used by class '{declaration.name}'",
                    UNRESOLVED_REFERENCE,
                )
            )
        return replace(edge, resolved=None)

    def _imported_externally(self, module: Module, edge: InheritanceEdge) -> bool:
        if edge.specifier is None:
            return False
        target = self._index.resolve_specifier(module, edge.specifier)
        return target.package is not None

    # ------------------------------------------------------------------
    # Pass two: flattening

    def _flatten(self, module: Module, declaration: ClassDeclaration, stack: List[_Key]) -> ClassDeclaration:
        key = Reference(name=declaration.name, module=module.path, package=module.package).key
        if module.package is not None:
            return declaration
        cached = self._memo.get(key)
        if cached is not None:
            return cached

        stack.append(key)
        members = list(declaration.members)
        attributes = list(declaration.attributes)
        events = list(declaration.events)
        member_keys = {member.key for member in members}
        attribute_names = {attribute.name for attribute in attributes}
        event_names = {event.name for event in events}

        edges = list(declaration.mixins)
        if declaration.superclass is not None:
            edges.append(declaration.superclass)
        for edge in edges:
            reference = edge.resolved
            if reference is None:
                continue
            if reference.key in stack:
                self._report_cycle(module, stack, reference.key)
                continue
            parent = self._parent(reference, stack)
            if parent is None:
                continue
            for member in parent.members:
                if member.key not in member_keys:
                    member_keys.add(member.key)
                    members.append(replace(member, inherited_from=member.inherited_from or reference))
            for attribute in parent.attributes:
                if attribute.name not in attribute_names:
                    attribute_names.add(attribute.name)
                    attributes.append(replace(attribute, inherited_from=attribute.inherited_from or reference))
            for event in parent.events:
                if event.name not in event_names:
                    event_names.add(event.name)
                    events.append(replace(event, inherited_from=event.inherited_from or reference))
        stack.pop()

        flattened = replace(
            declaration, members=tuple(members), attributes=tuple(attributes), events=tuple(events)
        )
        self._memo[key] = flattened
        return flattened

    def _parent(self, reference: Reference, stack: List[_Key]) -> Optional[ClassDeclaration]:
        local = self._resolved.get(reference.key)
        if local is not None:
            return self._flatten(local[0], local[1], stack)
        found = self._index.lookup(reference)
        if found is None or not isinstance(found[1], ClassDeclaration):
            return None
        # Package classes were flattened when their manifest was produced.
        return found[1]

    def _report_cycle(self, module: Module, stack: List[_Key], repeated: _Key) -> None:
        chain = stack[stack.index(repeated) :]
        cycle = frozenset(chain)
        if cycle in self._reported_cycles:
            return
        self._reported_cycles.add(cycle)
        names = " -> ".join(f"{path}:{name}" for _, path, name in chain + [repeated])
        logger.warning("Cyclic inheritance: %s", names)
        self._report(warning(module.path, f"cyclic inheritance: {names}", CYCLIC_INHERITANCE))

    def _report(self, diagnostic: Diagnostic) -> None:
        self._diagnostics.setdefault(diagnostic.path, []).append(diagnostic)


def link_modules(modules: Sequence[Module], index: ModuleIndex) -> List[Module]:
    return Linker(index).link(modules)


__all__ = ["Linker", "link_modules"]
