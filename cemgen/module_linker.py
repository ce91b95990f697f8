"""Resolves export and re-export records to the declarations they name."""

from __future__ import annotations

from dataclasses import replace
from typing import List, Sequence

from .diagnostics import UNRESOLVED_REFERENCE, Diagnostic, info
from .index import ModuleIndex
from .models import ExportRecord, Module, Reference


class ModuleLinker:
    """Points every export record of a module at its ultimate declaration.

    Re-export chains are followed through at most ``index.max_hops`` modules.
    Records that cannot be resolved are dropped with a diagnostic, except
    re-exports from packages that were not supplied, which are kept as
    external package references.
    """

    def __init__(self, index: ModuleIndex) -> None:
        self._index = index

    def link(self, module: Module) -> Module:
        exports: List[ExportRecord] = []
        diagnostics: List[Diagnostic] = []
        for record in module.exports:
            if record.is_star:
                exports.extend(self._expand_star(module, record, diagnostics))
                continue

            if record.specifier is None:
                reference = self._index.resolve_local(module, record.local_name)
                if reference is None:
                    if record.local_name not in module.ignored_names:
                        diagnostics.append(
                            info(
                                module.path,
                                f"export '{record.name}' names '{record.local_name}', "
                                "which is neither declared nor imported here",
                                UNRESOLVED_REFERENCE,
                            )
                        )
                    continue
                exports.append(replace(record, declaration=reference))
                continue

            reference = self._index.resolve_from(module, record.specifier, record.local_name)
            if reference is None:
                diagnostics.append(self._unresolved(module, record))
                continue
            exports.append(replace(record, declaration=reference))
        return replace(module, exports=tuple(exports)).with_diagnostics(*diagnostics)

    def _expand_star(self, module: Module, record: ExportRecord, diagnostics: List[Diagnostic]) -> List[ExportRecord]:
        target = self._index.resolve_specifier(module, record.specifier or "")
        if target.package is not None:
            return [replace(record, declaration=Reference(name="*", package=target.package))]
        if target.missing:
            diagnostics.append(self._unresolved(module, record))
            return []

        expanded: List[ExportRecord] = []
        seen = {existing.name for existing in module.exports if not existing.is_star}
        for source in target.modules:
            for name in self._index.export_names(source):
                if name == "default" or name in seen:
                    continue
                reference = self._index.resolve_export(source, name)
                if reference is None:
                    continue
                seen.add(name)
                expanded.append(
                    ExportRecord(
                        name=name,
                        local_name=name,
                        specifier=record.specifier,
                        location=record.location,
                        declaration=reference,
                    )
                )
        return expanded

    def _unresolved(self, module: Module, record: ExportRecord) -> Diagnostic:
        return info(
            module.path,
            f"could not resolve re-export '{record.local_name}' from '{record.specifier}' "
            f"(missing module or more than {self._index.max_hops} hops)",
            UNRESOLVED_REFERENCE,
        )


def link_exports(modules: Sequence[Module], index: ModuleIndex) -> List[Module]:
    linker = ModuleLinker(index)
    return [linker.link(module) for module in modules]


__all__ = ["ModuleLinker", "link_exports"]
