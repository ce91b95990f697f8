"""Tests for the Lit plugin."""

from __future__ import annotations

import textwrap

import pytest

from cemgen.analyzers import ModuleAnalyzer
from cemgen.models import ClassDeclaration, Manifest
from cemgen.plugins.lit import LitPlugin
from cemgen.plugins.pipeline import PluginPipeline
from cemgen.syntax import TREE_SITTER_AVAILABLE
from cemgen.visibility import emission_view

pytestmark = pytest.mark.skipif(
    not TREE_SITTER_AVAILABLE, reason="tree-sitter grammars not installed"
)


def _analyze(path: str, text: str):
    analyzer = ModuleAnalyzer(pipeline=PluginPipeline([LitPlugin()]))
    result = analyzer.analyze(path, textwrap.dedent(text).lstrip("\n"))
    assert result.ok
    return result.module


def test_static_properties_become_reactive_fields() -> None:
    module = _analyze(
        "src/my-lit.js",
        """
        import { LitElement, html } from 'lit';

        export class MyLit extends LitElement {
          static properties = {
            heading: { type: String },
            itemCount: { type: Number, attribute: 'item-count', reflect: true },
            internal: { state: true },
            silent: { attribute: false },
          };

          static styles = [];

          constructor() {
            super();
            this.heading = 'Hello';
          }

          render() {
            return html`<h1>${this.heading}</h1>`;
          }

          toggle() {}
        }
        customElements.define('my-lit', MyLit);
        """,
    )

    declaration = module.declarations[0]
    assert isinstance(declaration, ClassDeclaration)
    names = [member.name for member in declaration.members]
    assert "render" not in names
    assert "styles" not in names
    assert "properties" not in names
    assert "toggle" in names

    heading = declaration.member("heading")
    assert heading.type_text == "string"
    assert heading.attribute == "heading"
    assert heading.default == "'Hello'"

    count = declaration.member("itemCount")
    assert count.type_text == "number"
    assert count.attribute == "item-count"
    assert count.reflects is True

    assert declaration.member("internal").attribute is None
    assert declaration.member("silent").attribute is None
    assert [attribute.name for attribute in declaration.attributes] == ["heading", "item-count"]
    assert declaration.attributes[1].field_name == "itemCount"


def test_decorators_set_tag_and_properties() -> None:
    module = _analyze(
        "src/decorated.ts",
        """
        import { LitElement } from 'lit';
        import { customElement, property, state } from 'lit/decorators.js';

        @customElement('decorated-element')
        export class Decorated extends LitElement {
          @property({ type: Boolean, reflect: true }) open = false;
          @property() fullName: string = '';
          @state() private busy = false;
        }
        """,
    )

    declaration = module.declarations[0]
    assert declaration.tag_name == "decorated-element"
    assert [definition.tag_name for definition in module.definitions] == ["decorated-element"]

    opened = declaration.member("open")
    assert opened.attribute == "open"
    assert opened.reflects is True
    assert opened.type_text == "boolean"
    assert declaration.member("fullName").attribute == "fullname"
    assert declaration.member("busy").attribute is None
    assert [attribute.name for attribute in declaration.attributes] == ["open", "fullname"]


def test_ignored_and_internal_properties_drop_their_attributes() -> None:
    module = _analyze(
        "src/guarded.ts",
        """
        import { LitElement } from 'lit';
        import { property } from 'lit/decorators.js';

        export class Guarded extends LitElement {
          /** @ignore */
          @property() secret = '';

          /** @internal */
          @property() hidden = '';

          @property() shown = '';
        }
        """,
    )

    declaration = module.declarations[0]
    assert [member.name for member in declaration.members] == ["hidden", "shown"]
    assert [attribute.name for attribute in declaration.attributes] == ["hidden", "shown"]
    assert "internal" in declaration.attributes[0].tags

    (view_module,) = emission_view(Manifest(modules=(module,))).modules
    view = view_module.declarations[0]
    assert [member.name for member in view.members] == ["shown"]
    assert [attribute.name for attribute in view.attributes] == ["shown"]
