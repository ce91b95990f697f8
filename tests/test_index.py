"""Tests for cemgen.index."""

from __future__ import annotations

import pytest

from cemgen.index import ModuleIndex, is_platform_base, is_relative, package_name
from cemgen.models import ClassDeclaration, ExportRecord, Module, Package, Reference


@pytest.mark.parametrize(
    "specifier, expected",
    [("./a.js", True), ("../b", True), ("/abs.js", True), (".", True), ("lit", False), ("@scope/pkg", False)],
)
def test_is_relative(specifier: str, expected: bool) -> None:
    assert is_relative(specifier) is expected


def test_package_name_handles_scopes() -> None:
    assert package_name("lit") == ("lit", "")
    assert package_name("lit/decorators.js") == ("lit", "decorators.js")
    assert package_name("@scope/pkg/sub/file.js") == ("@scope/pkg", "sub/file.js")


def test_platform_bases() -> None:
    assert is_platform_base("HTMLElement")
    assert is_platform_base("HTMLInputElement")
    assert is_platform_base("SVGElement")
    assert not is_platform_base("LitElement")


def _exporting(path: str, name: str) -> Module:
    return Module(
        path=path,
        declarations=(ClassDeclaration(name=name),),
        exports=(ExportRecord(name=name, local_name=name),),
    )


def test_resolve_specifier_swaps_suffixes_and_finds_index_files() -> None:
    ts_module = _exporting("src/widget.ts", "Widget")
    index_module = _exporting("src/parts/index.ts", "Part")
    importer = Module(path="src/main.js")
    index = ModuleIndex([ts_module, index_module, importer])

    assert index.resolve_specifier(importer, "./widget.js").modules == (ts_module,)
    assert index.resolve_specifier(importer, "./parts").modules == (index_module,)
    assert index.resolve_specifier(importer, "./missing.js").missing
    external = index.resolve_specifier(importer, "@scope/pkg/thing.js")
    assert external.package == "@scope/pkg"
    assert not external.missing


def test_resolve_from_package_uses_loaded_manifest() -> None:
    declaration = Reference(name="KitButton", module="dist/button.js", package="ui-kit")
    package = Package(
        name="ui-kit",
        modules=(
            Module(
                path="dist/button.js",
                package="ui-kit",
                declarations=(ClassDeclaration(name="KitButton"),),
                exports=(ExportRecord(name="KitButton", local_name="KitButton", declaration=declaration),),
            ),
        ),
    )
    importer = Module(path="src/main.js")
    index = ModuleIndex([importer], [package])

    assert index.resolve_from(importer, "ui-kit", "KitButton") == declaration
    assert index.resolve_from(importer, "ui-kit/dist/button.js", "KitButton") == declaration
    assert index.resolve_from(importer, "other-kit", "Thing") == Reference(name="Thing", package="other-kit")
    assert index.is_internal(declaration)
    assert not index.is_internal(Reference(name="Thing", package="other-kit"))
    assert index.lookup(declaration) is not None


def test_cyclic_re_exports_terminate() -> None:
    a = Module(path="src/a.js", exports=(ExportRecord(name="X", local_name="X", specifier="./b.js"),))
    b = Module(path="src/b.js", exports=(ExportRecord(name="X", local_name="X", specifier="./a.js"),))
    index = ModuleIndex([a, b])

    assert index.resolve_export(a, "X") is None


def test_find_exporter_prefers_first_module_by_path() -> None:
    index = ModuleIndex([_exporting("src/z.js", "Shared"), _exporting("src/a.js", "Shared")])

    assert index.find_exporter("Shared") == Reference(name="Shared", module="src/a.js")
    assert index.find_exporter("Nobody") is None


def test_export_names_follow_star_exports_without_default() -> None:
    impl = Module(
        path="src/impl.js",
        exports=(ExportRecord(name="One", local_name="One"), ExportRecord(name="default", local_name="One")),
    )
    barrel = Module(
        path="src/index.js",
        exports=(
            ExportRecord(name="Two", local_name="Two"),
            ExportRecord(name="*", local_name="*", specifier="./impl.js"),
        ),
    )
    index = ModuleIndex([impl, barrel])

    assert index.export_names(barrel) == ["Two", "One"]
