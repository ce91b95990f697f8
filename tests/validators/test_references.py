"""Tests for the dangling reference validator."""

from __future__ import annotations

from cemgen.models import (
    ClassDeclaration,
    ClassMember,
    ExportRecord,
    InheritanceEdge,
    Manifest,
    Module,
    Package,
    Reference,
)
from cemgen.validators import DanglingReferenceValidator, build_context


def _validate(manifest: Manifest):
    return DanglingReferenceValidator().validate(build_context(manifest, {}))


def test_resolving_references_pass() -> None:
    base = Reference(name="Base", module="src/base.js")
    module = Module(
        path="src/child.js",
        declarations=(
            ClassDeclaration(
                name="Child",
                superclass=InheritanceEdge(name="Base", resolved=base),
                members=(ClassMember(name="x", inherited_from=base),),
            ),
        ),
        exports=(ExportRecord(name="Child", local_name="Child", declaration=Reference("Child", "src/child.js")),),
    )
    manifest = Manifest(modules=(Module(path="src/base.js", declarations=(ClassDeclaration(name="Base"),)), module))

    assert _validate(manifest) == []


def test_external_references_are_not_checked() -> None:
    module = Module(
        path="src/a.js",
        exports=(ExportRecord(name="*", local_name="*", declaration=Reference(name="*", package="lit")),),
    )

    assert _validate(Manifest(modules=(module,))) == []


def test_dangling_member_and_package_references_are_reported() -> None:
    package = Package(name="ui-kit", modules=(Module(path="dist/a.js", package="ui-kit"),))
    module = Module(
        path="src/a.js",
        declarations=(
            ClassDeclaration(
                name="A",
                members=(ClassMember(name="x", inherited_from=Reference(name="Gone", module="src/gone.js")),),
                mixins=(
                    InheritanceEdge(
                        name="KitMixin",
                        resolved=Reference(name="KitMixin", module="dist/a.js", package="ui-kit"),
                    ),
                ),
            ),
        ),
    )

    issues = _validate(Manifest(modules=(module,), packages=(package,)))

    assert [issue.pointer for issue in issues] == [
        "/modules/src/a.js/declarations/A/mixins/KitMixin",
        "/modules/src/a.js/declarations/A/members/x/inheritedFrom",
    ]
    assert "ui-kit:dist/a.js#KitMixin" in issues[0].detail
