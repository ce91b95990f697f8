"""Tests for the FAST plugin."""

from __future__ import annotations

import textwrap

import pytest

from cemgen.analyzers import ModuleAnalyzer
from cemgen.plugins.fast import FastPlugin
from cemgen.plugins.pipeline import PluginPipeline
from cemgen.syntax import TREE_SITTER_AVAILABLE

pytestmark = pytest.mark.skipif(
    not TREE_SITTER_AVAILABLE, reason="tree-sitter grammars not installed"
)


def _analyze(path: str, text: str):
    analyzer = ModuleAnalyzer(pipeline=PluginPipeline([FastPlugin()]))
    result = analyzer.analyze(path, textwrap.dedent(text).lstrip("\n"))
    assert result.ok
    return result.module


def test_custom_element_decorator_and_attrs() -> None:
    module = _analyze(
        "src/name-tag.ts",
        """
        import { FASTElement, attr, customElement } from '@microsoft/fast-element';

        @customElement({ name: 'name-tag', template })
        export class NameTag extends FASTElement {
          @attr greeting: string = 'Hello';
          @attr({ attribute: 'is-open', mode: 'boolean' }) isOpen = false;
          @attr({ mode: 'fromView' }) size = 'm';

          static styles = [];
        }
        """,
    )

    declaration = module.declarations[0]
    assert declaration.tag_name == "name-tag"
    assert [definition.tag_name for definition in module.definitions] == ["name-tag"]

    greeting = declaration.member("greeting")
    assert greeting.attribute == "greeting"
    assert greeting.reflects is True
    is_open = declaration.member("isOpen")
    assert is_open.attribute == "is-open"
    assert is_open.type_text == "boolean"
    size = declaration.member("size")
    assert size.reflects is False
    assert declaration.member("styles", static=True) is None
    assert [attribute.name for attribute in declaration.attributes] == ["greeting", "is-open", "size"]


def test_define_call_sets_tag_name() -> None:
    module = _analyze(
        "src/counter.js",
        """
        import { FASTElement } from '@microsoft/fast-element';

        export class CounterElement extends FASTElement {}
        FASTElement.define(CounterElement, { name: 'counter-element' });
        """,
    )

    assert module.declarations[0].tag_name == "counter-element"
    assert [definition.class_name for definition in module.definitions] == ["CounterElement"]
