"""Tests for cemgen.visibility."""

from __future__ import annotations

from cemgen.models import (
    Attribute,
    ClassDeclaration,
    ClassMember,
    CustomElementDefinition,
    Event,
    ExportRecord,
    InheritanceEdge,
    Manifest,
    Module,
    Reference,
    VariableDeclaration,
)
from cemgen.visibility import apply_ignore, emission_view, hidden_references


def _element(**kwargs) -> ClassDeclaration:
    return ClassDeclaration(
        name=kwargs.pop("name", "Element1"),
        members=(
            ClassMember(name="shown"),
            ClassMember(name="ignored", tags=frozenset({"ignore"})),
            ClassMember(name="internal", tags=frozenset({"internal"})),
        ),
        attributes=(Attribute(name="a"), Attribute(name="b", tags=frozenset({"ignore"}))),
        events=(Event(name="changed"), Event(name="secret", tags=frozenset({"internal"}))),
        **kwargs,
    )


def test_apply_ignore_removes_constructs_and_names() -> None:
    module = Module(
        path="src/a.js",
        declarations=(
            VariableDeclaration(name="gone", tags=frozenset({"ignore"})),
            _element(),
        ),
        exports=(
            ExportRecord(name="gone", local_name="gone"),
            ExportRecord(name="Element1", local_name="Element1"),
            ExportRecord(name="gone", local_name="gone", specifier="./other.js"),
        ),
        definitions=(CustomElementDefinition(tag_name="gone-el", class_name="gone", module="src/a.js"),),
    )

    filtered = apply_ignore(module)

    assert [declaration.name for declaration in filtered.declarations] == ["Element1"]
    element = filtered.declarations[0]
    assert [member.name for member in element.members] == ["shown", "internal"]
    assert [attribute.name for attribute in element.attributes] == ["a"]
    assert [(record.name, record.specifier) for record in filtered.exports] == [
        ("Element1", None),
        ("gone", "./other.js"),
    ]
    assert filtered.definitions == ()
    assert filtered.ignored_names == frozenset({"gone"})


def test_ignore_is_absolute_over_privacy() -> None:
    # A member tagged both public and ignore is still removed.
    module = Module(
        path="src/a.js",
        declarations=(
            ClassDeclaration(
                name="A",
                members=(ClassMember(name="both", privacy="public", tags=frozenset({"public", "ignore"})),),
            ),
        ),
    )

    assert apply_ignore(module).declarations[0].members == ()


def test_emission_view_hides_internal_constructs_and_references() -> None:
    hidden_base = ClassDeclaration(name="HiddenBase", tags=frozenset({"internal"}), members=(ClassMember(name="x"),))
    child = ClassDeclaration(
        name="Child",
        superclass=InheritanceEdge(name="HiddenBase", resolved=Reference(name="HiddenBase", module="src/a.js")),
        members=(
            ClassMember(name="own"),
            ClassMember(name="x", inherited_from=Reference(name="HiddenBase", module="src/a.js")),
        ),
    )
    module = Module(
        path="src/a.js",
        declarations=(hidden_base, child, _element()),
        exports=(
            ExportRecord(name="HiddenBase", local_name="HiddenBase", declaration=Reference("HiddenBase", "src/a.js")),
            ExportRecord(name="Child", local_name="Child", declaration=Reference("Child", "src/a.js")),
        ),
    )
    manifest = Manifest(modules=(module,))

    assert hidden_references(manifest) == {("", "src/a.js", "HiddenBase")}
    view = emission_view(manifest)

    (view_module,) = view.modules
    assert [declaration.name for declaration in view_module.declarations] == ["Child", "Element1"]
    view_child = view_module.declarations[0]
    assert view_child.superclass is None
    assert view_child.member("x").inherited_from is None
    element = view_module.declarations[1]
    assert [member.name for member in element.members] == ["shown", "ignored"]
    assert [event.name for event in element.events] == ["changed"]
    assert [record.name for record in view_module.exports] == ["Child"]

    # The full manifest is untouched.
    assert len(manifest.modules[0].declarations) == 3


def test_sibling_visibility_is_independent() -> None:
    module = Module(
        path="src/a.js",
        declarations=(
            VariableDeclaration(name="first", tags=frozenset({"internal"})),
            VariableDeclaration(name="second"),
            VariableDeclaration(name="third", tags=frozenset({"ignore"})),
            VariableDeclaration(name="fourth"),
        ),
    )

    view = emission_view(Manifest(modules=(apply_ignore(module),)))

    assert [declaration.name for declaration in view.modules[0].declarations] == ["second", "fourth"]


def test_attributes_go_with_their_hidden_fields() -> None:
    declaration = ClassDeclaration(
        name="Linked",
        members=(
            ClassMember(name="secret", tags=frozenset({"ignore"}), attribute="secret"),
            ClassMember(name="hidden", tags=frozenset({"internal"}), attribute="hidden"),
            ClassMember(name="shown", attribute="shown"),
        ),
        attributes=(
            Attribute(name="secret", field_name="secret"),
            Attribute(name="hidden", field_name="hidden"),
            Attribute(name="shown", field_name="shown"),
            Attribute(name="loose"),
        ),
    )

    module = apply_ignore(Module(path="src/linked.js", declarations=(declaration,)))
    assert [attribute.name for attribute in module.declarations[0].attributes] == ["hidden", "shown", "loose"]

    (view_module,) = emission_view(Manifest(modules=(module,))).modules
    assert [attribute.name for attribute in view_module.declarations[0].attributes] == ["shown", "loose"]
