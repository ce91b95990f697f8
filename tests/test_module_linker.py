"""Tests for cemgen.module_linker."""

from __future__ import annotations

from cemgen.diagnostics import UNRESOLVED_REFERENCE
from cemgen.index import ModuleIndex
from cemgen.models import ClassDeclaration, ExportRecord, Module, Reference, VariableDeclaration
from cemgen.module_linker import ModuleLinker, link_exports

WIDGET = Reference(name="Widget", module="src/impl.js")


def _impl() -> Module:
    return Module(
        path="src/impl.js",
        declarations=(ClassDeclaration(name="Widget"), VariableDeclaration(name="helper")),
        exports=(
            ExportRecord(name="Widget", local_name="Widget"),
            ExportRecord(name="helper", local_name="helper"),
            ExportRecord(name="default", local_name="Widget"),
        ),
    )


def _mid() -> Module:
    return Module(
        path="src/mid.js",
        exports=(ExportRecord(name="Widget", local_name="Widget", specifier="./impl.js"),),
    )


def _index_module() -> Module:
    return Module(
        path="src/index.js",
        exports=(ExportRecord(name="Gadget", local_name="Widget", specifier="./mid.js"),),
    )


def test_re_export_chain_points_at_original_declaration() -> None:
    modules = [_impl(), _mid(), _index_module()]

    impl, mid, index = link_exports(modules, ModuleIndex(modules))

    assert [record.declaration for record in impl.exports] == [
        WIDGET,
        Reference(name="helper", module="src/impl.js"),
        WIDGET,
    ]
    assert mid.exports[0].declaration == WIDGET
    assert [(record.name, record.declaration) for record in index.exports] == [("Gadget", WIDGET)]


def test_chains_longer_than_max_hops_are_dropped() -> None:
    modules = [_impl(), _mid(), _index_module()]
    linker = ModuleLinker(ModuleIndex(modules, max_hops=1))

    linked = linker.link(modules[2])

    assert linked.exports == ()
    assert [diagnostic.code for diagnostic in linked.diagnostics] == [UNRESOLVED_REFERENCE]
    assert "1 hops" in linked.diagnostics[0].message


def test_star_exports_are_expanded() -> None:
    barrel = Module(
        path="src/all.js",
        exports=(
            ExportRecord(name="helper", local_name="helper", specifier="./impl.js"),
            ExportRecord(name="*", local_name="*", specifier="./impl.js"),
            ExportRecord(name="*", local_name="*", specifier="lit"),
        ),
    )
    modules = [_impl(), barrel]

    linked = ModuleLinker(ModuleIndex(modules)).link(barrel)

    assert [(record.name, record.declaration) for record in linked.exports] == [
        ("helper", Reference(name="helper", module="src/impl.js")),
        ("Widget", WIDGET),
        ("*", Reference(name="*", package="lit")),
    ]
    assert linked.diagnostics == ()


def test_unknown_local_export_is_reported() -> None:
    module = Module(path="src/a.js", exports=(ExportRecord(name="nope", local_name="nope"),))

    linked = ModuleLinker(ModuleIndex([module])).link(module)

    assert linked.exports == ()
    assert linked.diagnostics[0].severity.value == "info"


def test_ignored_local_export_is_silent() -> None:
    module = Module(
        path="src/a.js",
        exports=(ExportRecord(name="gone", local_name="gone"),),
        ignored_names=frozenset({"gone"}),
    )

    linked = ModuleLinker(ModuleIndex([module])).link(module)

    assert linked.exports == ()
    assert linked.diagnostics == ()


def test_missing_relative_module_is_reported() -> None:
    module = Module(path="src/a.js", exports=(ExportRecord(name="*", local_name="*", specifier="./missing.js"),))

    linked = ModuleLinker(ModuleIndex([module])).link(module)

    assert linked.exports == ()
    assert "./missing.js" in linked.diagnostics[0].message
